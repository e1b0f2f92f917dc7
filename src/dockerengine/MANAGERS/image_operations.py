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
Image operations: build, login, push and run through the docker CLI.
"""
import io
import logging
from typing import Optional, TextIO

from ..BUILDERS.build_args import generate_build_args
from ..BUILDERS.run_args import generate_run_args
from ..MODELS.engine_config import EngineConfig
from ..MODELS.intents import BuildIntent, RunIntent, image_name
from ..PARSERS.engine_output import parse_repo_digest
from ..RUNNERS.cancellation import Cancellation
from ..RUNNERS.command_runner import CommandRunner
from ..errors import (
    AuthenticationFailed,
    BuildFailed,
    CommandFailed,
    CompileFailure,
    EmptyTagsError,
    ExternalInvocationFailure,
    InspectFailed,
    PushFailed,
    RunFailed,
)

logger = logging.getLogger(__name__)

# Go template printing the first repository digest, e.g. "repo@sha256:...".
REPO_DIGEST_FORMAT = "'{{json (index .RepoDigests 0)}}'"


class ImageOperations:
    """
    Sequences docker build, login, push and run invocations and turns their
    outcome into return values or typed errors.
    """
    def __init__(self, runner: CommandRunner, config: Optional[EngineConfig] = None):
        """
        Args:
            runner (CommandRunner): Executes the docker commands.
            config (Optional[EngineConfig]): Environment settings. Defaults to the
                current process' environment.
        """
        self.runner = runner
        self.config = config or EngineConfig.from_environment()

    @property
    def executable(self) -> str:
        return self.config.executable

    def build(self, intent: BuildIntent, out: TextIO, cancel: Optional[Cancellation] = None):
        """
        Runs `docker build` for the intent, streaming stdout and stderr to `out`.

        Raises:
            BuildFailed: If the arguments cannot be compiled or the build fails.
        """
        try:
            args = generate_build_args(intent, self.config.lookup_env)
        except CompileFailure as e:
            raise BuildFailed(e, operation="generate docker build args") from e

        try:
            self.runner.run_with_cancellation(cancel, self.executable, args, stdout=out, stderr=out)
        except CommandFailed as e:
            raise BuildFailed(e) from e

    def login(self, uri: str, username: str, password: str):
        """
        Runs `docker login` against the registry. The password is written to
        the command's standard input and never appears in its arguments.

        Raises:
            AuthenticationFailed: If docker rejects the credentials.
        """
        args = ["login", "-u", username, "--password-stdin", uri]
        try:
            self.runner.run(self.executable, args, stdin=password)
        except CommandFailed as e:
            raise AuthenticationFailed(e) from e

    def push(self, uri: str, out: TextIO, *tags: str, cancel: Optional[Cancellation] = None) -> str:
        """
        Pushes `uri:tag` for every tag, in order, and returns the digest of
        the pushed image.

        The digest is read from the image referenced by the first tag: all
        tags of a single-manifest build point at the same content, so any of
        them yields the same digest. Multi-manifest pushes are not covered.

        Returns:
            str: The image digest, e.g. `sha256:...`.

        Raises:
            EmptyTagsError: If no tag is given.
            PushFailed: On the first tag that fails to push.
            InspectFailed: If the digest cannot be inspected.
            DigestParseError: If the inspected value holds no single digest.
        """
        if not tags:
            raise EmptyTagsError(uri)

        extra = ["--quiet"] if self.config.is_ci() else []
        for tag in tags:
            img = image_name(uri, tag)
            try:
                self.runner.run_with_cancellation(cancel, self.executable, ["push", img] + extra,
                                                  stdout=out, stderr=out)
            except CommandFailed as e:
                raise PushFailed(tag, img, e) from e

        buf = io.StringIO()
        args = ["inspect", "--format", REPO_DIGEST_FORMAT, image_name(uri, tags[0])]
        try:
            self.runner.run_with_cancellation(cancel, self.executable, args, stdout=buf)
        except CommandFailed as e:
            raise InspectFailed(uri, e) from e

        digest = parse_repo_digest(buf.getvalue())
        logger.debug("Pushed %s with digest %s", uri, digest)
        return digest

    def run_container(self, intent: RunIntent, cancel: Optional[Cancellation] = None):
        """
        Runs `docker run` for the intent and blocks until the container exits.

        Raises:
            RunFailed: If docker exits non-zero.
        """
        try:
            self.runner.run_with_cancellation(cancel, self.executable, generate_run_args(intent))
        except CommandFailed as e:
            raise RunFailed(e) from e

    def is_container_running(self, container_name: str) -> bool:
        """
        Checks whether a container whose name matches `container_name` is running.
        """
        buf = io.StringIO()
        args = ["ps", "-q", "--filter", f"name={container_name}"]
        try:
            self.runner.run(self.executable, args, stdout=buf)
        except CommandFailed as e:
            raise ExternalInvocationFailure("run docker ps", e) from e
        return buf.getvalue().strip() != ""
