# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the subprocess command runner and cancellation.
"""
import io
import sys
import threading
import time

import pytest

from dockerengine.RUNNERS.cancellation import Cancellation
from dockerengine.RUNNERS.command_runner import SubprocessRunner
from dockerengine.errors import CommandFailed, CommandCancelled

PY = sys.executable


class TestCancellation:
    """Tests for Cancellation."""

    def test_not_cancelled_initially(self):
        cancel = Cancellation()
        assert not cancel.cancelled
        assert cancel.reason == ""
        assert cancel.deadline is None

    def test_cancel(self):
        cancel = Cancellation()
        cancel.cancel()
        assert cancel.cancelled
        assert cancel.reason == "cancelled"

    def test_deadline(self):
        """Test that the signal fires once the deadline passes."""
        cancel = Cancellation(timeout=0)
        assert cancel.expired
        assert cancel.reason == "deadline exceeded"
        assert cancel.wait(1.0)

    def test_wait_returns_early_on_cancel(self):
        cancel = Cancellation()
        threading.Timer(0.05, cancel.cancel).start()
        start = time.monotonic()
        assert cancel.wait(5.0)
        assert time.monotonic() - start < 4.0


class TestSubprocessRunner:
    """Tests for SubprocessRunner."""

    def test_stdout_captured(self):
        out = io.StringIO()
        SubprocessRunner().run(PY, ["-c", "print('hello')"], stdout=out)
        assert out.getvalue() == "hello\n"

    def test_stdout_and_stderr_to_same_sink(self):
        """Test that both streams can share a sink."""
        out = io.StringIO()
        script = "import sys; print('out'); sys.stdout.flush(); sys.stderr.write('err\\n')"
        SubprocessRunner().run(PY, ["-c", script], stdout=out, stderr=out)
        assert sorted(out.getvalue().splitlines()) == ["err", "out"]

    def test_undecodable_output_does_not_break_pipe(self):
        """Test that bytes that are not UTF-8 are replaced and the rest is kept."""
        out = io.StringIO()
        script = (
            "import sys; sys.stdout.buffer.write(b'step 1 \\xff\\xfe\\n'); "
            "sys.stdout.flush(); print('done')"
        )
        SubprocessRunner().run(PY, ["-c", script], stdout=out, stderr=io.StringIO())
        lines = out.getvalue().splitlines()
        assert lines[0].startswith("step 1 ")
        assert "\ufffd" in lines[0]
        assert lines[1] == "done"

    def test_stdin_fed(self):
        """Test that text is fed to the program's standard input."""
        out = io.StringIO()
        script = "import sys; print(sys.stdin.read().upper())"
        SubprocessRunner().run(PY, ["-c", script], stdin="secret", stdout=out)
        assert out.getvalue() == "SECRET\n"

    def test_non_zero_exit(self):
        """Test that a failing program raises with its exit code and stderr."""
        script = "import sys; sys.stderr.write('boom\\n'); sys.exit(3)"
        with pytest.raises(CommandFailed) as exc:
            SubprocessRunner().run(PY, ["-c", script], stdout=io.StringIO(), stderr=io.StringIO())
        assert exc.value.exit_code == 3
        assert "boom" in str(exc.value)
        assert not isinstance(exc.value, CommandCancelled)

    def test_missing_program(self):
        with pytest.raises(CommandFailed) as exc:
            SubprocessRunner().run("definitely-not-a-docker-binary", ["info"])
        assert exc.value.exit_code is None
        assert exc.value.reason

    def test_deadline_stops_program(self):
        """Test that a deadline terminates a long running program promptly."""
        start = time.monotonic()
        with pytest.raises(CommandCancelled) as exc:
            SubprocessRunner(poll_interval=0.05).run_with_cancellation(
                Cancellation(timeout=0.3), PY, ["-c", "import time; time.sleep(30)"],
                stdout=io.StringIO(), stderr=io.StringIO())
        assert time.monotonic() - start < 10
        assert exc.value.reason == "deadline exceeded"

    def test_cancel_stops_program(self):
        """Test that cancel() from another thread terminates the program."""
        cancel = Cancellation()
        threading.Timer(0.2, cancel.cancel).start()
        start = time.monotonic()
        with pytest.raises(CommandCancelled):
            SubprocessRunner(poll_interval=0.05).run_with_cancellation(
                cancel, PY, ["-c", "import time; time.sleep(30)"],
                stdout=io.StringIO(), stderr=io.StringIO())
        assert time.monotonic() - start < 10

    def test_output_streamed_before_cancel(self):
        """Test that output reaches the sink while the program still runs."""
        out = io.StringIO()
        cancel = Cancellation(timeout=1.0)
        script = "import sys, time; print('started'); sys.stdout.flush(); time.sleep(30)"
        with pytest.raises(CommandCancelled):
            SubprocessRunner(poll_interval=0.05).run_with_cancellation(cancel, PY, ["-c", script], stdout=out)
        assert out.getvalue() == "started\n"
