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
Parsers for the output of docker inspection commands and for docker client
configuration files.

Inspection commands are invoked with a Go template wrapped in single quotes
(`-f '{{json .}}'`). Since no shell strips those quotes, docker echoes them
back around the JSON document, followed by a newline:

    '{"ServerErrors":["Cannot connect to the Docker daemon"]}'\n

strip_quoting_artifact() is the only place that knows about this shape.
"""
import json
from typing import Type, TypeVar
from pydantic import BaseModel, ValidationError
from ..MODELS.inspection import DaemonInfo, ServerPlatform, CredentialConfig
from ..errors import ResponseParseError, DigestParseError

QUOTE = "'"
DIGEST_SEPARATOR = "@"

ModelT = TypeVar("ModelT", bound=BaseModel)


def strip_quoting_artifact(output: str) -> str:
    """
    Removes surrounding whitespace, then one leading and one trailing single
    quote if present.
    """
    out = output.strip()
    if out.startswith(QUOTE):
        out = out[len(QUOTE):]
    if out.endswith(QUOTE):
        out = out[:-len(QUOTE)]
    return out


def _parse_json(model: Type[ModelT], payload: str, what: str) -> ModelT:
    try:
        return model.model_validate_json(payload)
    except ValidationError as e:
        raise ResponseParseError(what, payload, e) from e


def parse_daemon_info(output: str) -> DaemonInfo:
    """
    Parses the output of `docker info -f '{{json .}}'`.

    Raises:
        ResponseParseError: If the output is not a JSON object.
    """
    return _parse_json(DaemonInfo, strip_quoting_artifact(output), "docker info message")


def parse_server_platform(output: str) -> ServerPlatform:
    """
    Parses the output of `docker version -f '{{json .Server}}'`.

    Raises:
        ResponseParseError: If the output is not a JSON object.
    """
    return _parse_json(ServerPlatform, strip_quoting_artifact(output), "docker platform")


def parse_repo_digest(output: str) -> str:
    """
    Extracts the digest from the output of
    `docker inspect --format '{{json (index .RepoDigests 0)}}'`, e.g.
    `"123456789012.dkr.ecr.us-west-2.amazonaws.com/repo@sha256:abcd"`.

    Returns:
        str: The digest, e.g. `sha256:abcd`.

    Raises:
        DigestParseError: Unless the value holds exactly one `@`.
    """
    repo_digest = output.strip().strip("\"'")
    parts = repo_digest.split(DIGEST_SEPARATOR)
    if len(parts) != 2:
        raise DigestParseError(repo_digest)
    return parts[1]


def parse_credential_config(content: bytes) -> CredentialConfig:
    """
    Parses a docker client configuration file such as ~/.docker/config.json.

    Raises:
        ValueError: If the content is not a JSON object with the expected
            credential fields, including input nested too deeply to decode.
    """
    try:
        data = json.loads(content)
    except RecursionError as e:
        raise ValueError("docker configuration is nested too deeply") from e
    if not isinstance(data, dict):
        raise ValueError("docker configuration must be a JSON object")
    return CredentialConfig.model_validate(data)
