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
Daemon health and server platform inspection.
"""
import io
import logging
from typing import Optional, Tuple

from ..MODELS.engine_config import EngineConfig
from ..PARSERS.engine_output import parse_daemon_info, parse_server_platform
from ..RUNNERS.command_runner import CommandRunner
from ..errors import CommandFailed, DaemonNotResponsive, EngineNotFound, ExternalInvocationFailure

logger = logging.getLogger(__name__)

INFO_FORMAT = "'{{json .}}'"
SERVER_VERSION_FORMAT = "'{{json .Server}}'"


class EngineInspector:
    """
    Asks the docker CLI whether the daemon is up and which platform it runs on.
    """
    def __init__(self, runner: CommandRunner, config: Optional[EngineConfig] = None):
        self.runner = runner
        self.config = config or EngineConfig.from_environment()

    def _require_engine(self):
        if not self.config.engine_available():
            raise EngineNotFound(self.config.executable)

    def _capture(self, args, operation: str) -> str:
        buf = io.StringIO()
        try:
            self.runner.run(self.config.executable, args, stdout=buf)
        except CommandFailed as e:
            raise ExternalInvocationFailure(operation, e) from e
        return buf.getvalue()

    def check_engine_running(self):
        """
        Runs `docker info` and checks that the daemon reported no server errors.

        Raises:
            EngineNotFound: If docker is not on PATH.
            DaemonNotResponsive: If the daemon reported errors.
            ResponseParseError: If `docker info` printed something other than JSON.
        """
        self._require_engine()
        out = self._capture(["info", "-f", INFO_FORMAT], "get docker info")
        info = parse_daemon_info(out)
        if info.healthy:
            return
        logger.debug("docker info reported %d server error(s)", len(info.server_errors))
        raise DaemonNotResponsive("\n".join(info.server_errors))

    def get_platform(self) -> Tuple[str, str]:
        """
        Runs `docker version` and returns the server's OS and architecture.

        Returns:
            Tuple[str, str]: (os, arch), e.g. ("linux", "amd64").

        Raises:
            EngineNotFound: If docker is not on PATH.
            ResponseParseError: If `docker version` printed something other than JSON.
        """
        self._require_engine()
        out = self._capture(["version", "-f", SERVER_VERSION_FORMAT], "run docker version")
        platform = parse_server_platform(out)
        return platform.os, platform.arch
