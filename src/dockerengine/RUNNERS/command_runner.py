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
Execution of external commands with output streaming and cancellation.
"""
import logging
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from typing import IO, List, Optional, TextIO

import psutil

from .cancellation import Cancellation
from ..errors import CommandFailed, CommandCancelled

logger = logging.getLogger(__name__)


class CommandRunner(ABC):
    """
    Runs a named program with arguments.

    Implementations raise CommandFailed when the program cannot be started
    or exits non-zero, and CommandCancelled when the cancellation fires
    before the program exits.
    """

    def run(self,
            name: str,
            args: List[str],
            stdin: Optional[str] = None,
            stdout: Optional[TextIO] = None,
            stderr: Optional[TextIO] = None):
        """
        Runs a command and blocks until it exits.

        Args:
            name (str): Program to execute.
            args (List[str]): Arguments passed to the program.
            stdin (Optional[str]): Text fed to the program's standard input.
            stdout (Optional[TextIO]): Sink receiving the program's standard output.
            stderr (Optional[TextIO]): Sink receiving the program's standard error.

        Raises:
            CommandFailed: If the program cannot start or exits non-zero.
        """
        self.run_with_cancellation(None, name, args, stdin=stdin, stdout=stdout, stderr=stderr)

    @abstractmethod
    def run_with_cancellation(self,
                              cancel: Optional[Cancellation],
                              name: str,
                              args: List[str],
                              stdin: Optional[str] = None,
                              stdout: Optional[TextIO] = None,
                              stderr: Optional[TextIO] = None):
        """
        Same as run(), but terminates the program once `cancel` fires.
        """


class SubprocessRunner(CommandRunner):
    """
    CommandRunner backed by subprocess. Output is copied line by line to the
    sinks while the program runs.
    """
    def __init__(self, poll_interval: float = 0.1, kill_timeout: float = 5.0):
        """
        Args:
            poll_interval (float): Seconds between checks of the cancellation.
            kill_timeout (float): Seconds to wait after SIGTERM before SIGKILL.
        """
        self.poll_interval = poll_interval
        self.kill_timeout = kill_timeout

    def run_with_cancellation(self, cancel, name, args, stdin=None, stdout=None, stderr=None):
        command = [name] + list(args)
        logger.debug("Running command: %s", " ".join(command))

        stdout = stdout if stdout is not None else sys.stdout
        stderr = stderr if stderr is not None else sys.stderr

        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                shell=False
            )
        except OSError as e:
            raise CommandFailed(name, args, reason=str(e)) from e

        write_lock = threading.Lock()
        captured_stderr: List[str] = []
        threads = [
            threading.Thread(target=self._pump, args=(process.stdout, stdout, write_lock, None), daemon=True),
            threading.Thread(target=self._pump, args=(process.stderr, stderr, write_lock, captured_stderr), daemon=True),
        ]
        if stdin is not None:
            threads.append(threading.Thread(target=self._feed, args=(process.stdin, stdin), daemon=True))
        for t in threads:
            t.start()

        if cancel is None:
            process.wait()
        else:
            while process.poll() is None:
                if cancel.wait(self.poll_interval):
                    logger.debug("Stopping %s: %s", name, cancel.reason)
                    self._terminate(process)
                    self._join(threads)
                    raise CommandCancelled(name, args, cancel.reason)

        self._join(threads)
        if process.returncode != 0:
            raise CommandFailed(name, args, exit_code=process.returncode, stderr="".join(captured_stderr))

    @staticmethod
    def _pump(pipe: IO[str], sink: TextIO, lock: threading.Lock, capture: Optional[List[str]]):
        with pipe:
            for line in iter(pipe.readline, ""):
                if capture is not None:
                    capture.append(line)
                with lock:
                    sink.write(line)
                    flush = getattr(sink, "flush", None)
                    if flush:
                        flush()

    @staticmethod
    def _feed(pipe: IO[str], data: str):
        try:
            pipe.write(data)
        except BrokenPipeError:
            logger.debug("Command exited before reading its input")
        finally:
            try:
                pipe.close()
            except BrokenPipeError:
                pass

    def _join(self, threads: List[threading.Thread]):
        for t in threads:
            t.join(timeout=self.kill_timeout)

    def _terminate(self, process: subprocess.Popen):
        """
        Stops the process and everything it spawned, with SIGTERM followed by
        SIGKILL for whatever outlives the kill timeout.
        """
        try:
            parent = psutil.Process(process.pid)
            procs = parent.children(recursive=True) + [parent]
        except psutil.NoSuchProcess:
            process.wait()
            return

        for p in procs:
            try:
                p.terminate()
            except psutil.NoSuchProcess:
                continue
        _, alive = psutil.wait_procs(procs, timeout=self.kill_timeout)
        for p in alive:
            try:
                p.kill()
            except psutil.NoSuchProcess:
                continue
        process.wait()
