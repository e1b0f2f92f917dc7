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
Process-wide settings injected into the docker components.
"""
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional


def user_home_directory() -> str:
    """
    Resolves the current user's home directory, or an empty string when it
    cannot be determined.
    """
    try:
        return str(Path.home())
    except RuntimeError:
        return ""


def is_ci(lookup_env: Callable[[str], Optional[str]]) -> bool:
    """
    True when running in a continuous integration environment, signalled
    by CI=true.
    """
    return lookup_env("CI") == "true"


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration shared by the image operations, the engine inspector and
    the credential helper detector.

    The home directory is resolved once, when the configuration is created,
    and never changes afterwards. Environment and PATH lookups go through
    callables so tests can substitute them.
    """

    home_path: str = ""
    lookup_env: Callable[[str], Optional[str]] = field(default=os.environ.get)
    which: Callable[[str], Optional[str]] = field(default=shutil.which)
    executable: str = "docker"

    @classmethod
    def from_environment(cls, executable: str = "docker") -> "EngineConfig":
        """Build a configuration from the running process' environment."""
        return cls(home_path=user_home_directory(), executable=executable)

    def is_ci(self) -> bool:
        return is_ci(self.lookup_env)

    def engine_available(self) -> bool:
        return self.which(self.executable) is not None
