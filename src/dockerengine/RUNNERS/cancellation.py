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
Cancellation signal for long running docker invocations.
"""
import threading
import time
from typing import Optional


class Cancellation:
    """
    A cancellation signal with an optional deadline.

    Calling cancel() from any thread stops the invocation that received this
    object. When a timeout is given, the signal also fires once the deadline
    has passed.
    """
    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout (Optional[float]): Seconds from now after which the signal fires.
        """
        self._event = threading.Event()
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self):
        self._event.set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called or the deadline passed."""
        return self._event.is_set() or self.expired

    @property
    def reason(self) -> str:
        if self._event.is_set():
            return "cancelled"
        if self.expired:
            return "deadline exceeded"
        return ""

    def wait(self, interval: float) -> bool:
        """
        Blocks for at most `interval` seconds, returning early on cancel().

        Returns:
            bool: True if the signal has fired.
        """
        if self.deadline is not None:
            interval = max(0.0, min(interval, self.deadline - time.monotonic()))
        self._event.wait(interval)
        return self.cancelled
