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
Exception hierarchy for docker engine operations.

Every error raised by this package derives from DockerEngineError. Failures
of an external invocation are wrapped in an ExternalInvocationFailure that
names the operation and keeps the underlying error as its cause.
"""
from typing import List, Optional


class DockerEngineError(Exception):
    """Base class for all errors raised by dockerengine."""


class CompileFailure(DockerEngineError):
    """Raised when an intent cannot be compiled into command arguments."""


class EmptyTagsError(CompileFailure):
    """Raised when an image is built or pushed without any tag."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(
            "tags to reference an image should not be empty for building and "
            f"pushing into the repository {uri}"
        )


class CommandFailed(DockerEngineError):
    """
    Raised by a command runner when the external program exits non-zero
    or cannot be started.
    """

    def __init__(self,
                 program: str,
                 args: List[str],
                 exit_code: Optional[int] = None,
                 stderr: str = "",
                 reason: Optional[str] = None):
        self.program = program
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.reason:
            message = f"{self.program}: {self.reason}"
        else:
            message = f"{self.program} exited with status {self.exit_code}"
        if self.stderr.strip():
            message = f"{message}: {self.stderr.strip()}"
        return message


class CommandCancelled(CommandFailed):
    """Raised when a running command is stopped by its cancellation."""

    def __init__(self, program: str, args: List[str], reason: str = "cancelled"):
        super().__init__(program, args, reason=reason)


class ExternalInvocationFailure(DockerEngineError):
    """
    A docker invocation failed. The operation name is kept for context and
    the original error is available as __cause__.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        if cause is not None:
            super().__init__(f"{operation}: {cause}")
        else:
            super().__init__(operation)

    @property
    def cancelled(self) -> bool:
        """True when the failure was caused by a cancellation."""
        return isinstance(self.cause, CommandCancelled)


class BuildFailed(ExternalInvocationFailure):
    def __init__(self, cause: Optional[BaseException] = None, operation: str = "building image"):
        super().__init__(operation, cause)


class AuthenticationFailed(ExternalInvocationFailure):
    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("authenticate to registry", cause)


class PushFailed(ExternalInvocationFailure):
    def __init__(self, tag: str, image: str, cause: Optional[BaseException] = None):
        self.tag = tag
        self.image = image
        super().__init__(f"docker push {image}", cause)


class InspectFailed(ExternalInvocationFailure):
    def __init__(self, uri: str, cause: Optional[BaseException] = None):
        self.uri = uri
        super().__init__(f"inspect image digest for {uri}", cause)


class RunFailed(ExternalInvocationFailure):
    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__("running container", cause)


class EngineNotFound(DockerEngineError):
    """Raised when the docker executable cannot be found on PATH."""

    def __init__(self, executable: str = "docker"):
        self.executable = executable
        super().__init__(f"{executable} command is not found; please install the container engine")


class DaemonNotResponsive(DockerEngineError):
    """Raised when the daemon reports server errors from `docker info`."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"docker daemon is not responsive: {message}")


class ResponseParseError(DockerEngineError):
    """Raised when an inspection command returns output that is not the expected JSON."""

    def __init__(self, what: str, payload: str, cause: Optional[BaseException] = None):
        self.what = what
        self.payload = payload
        self.cause = cause
        super().__init__(f"unmarshal {what}: {payload!r}")


class DigestParseError(DockerEngineError):
    """Raised when a repository digest does not split into repository and digest."""

    def __init__(self, repo_digest: str):
        self.repo_digest = repo_digest
        super().__init__(f"parse the digest from the repo digest '{repo_digest}'")


__all__ = [
    "AuthenticationFailed",
    "BuildFailed",
    "CommandCancelled",
    "CommandFailed",
    "CompileFailure",
    "DaemonNotResponsive",
    "DigestParseError",
    "DockerEngineError",
    "EmptyTagsError",
    "EngineNotFound",
    "ExternalInvocationFailure",
    "InspectFailed",
    "PushFailed",
    "ResponseParseError",
    "RunFailed",
]
