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
Models describing what to build and what to run.
"""
import os
from typing import List, Dict, Optional
from pydantic import BaseModel, Field, model_validator

# Pause containers own the network namespace that the other containers of a
# task join.
PAUSE_CONTAINER_PREFIX = "pause"


def is_pause_container(container_name: Optional[str]) -> bool:
    return (container_name or "").startswith(PAUSE_CONTAINER_PREFIX)


def image_name(uri: str, tag: str) -> str:
    """
    Returns the reference of an image in a repository, e.g. `repo:latest`.
    """
    return f"{uri}:{tag}"


class BuildIntent(BaseModel):
    """
    Everything needed to build one image and tag it into a repository.
    Tags may be empty here; compiling the build arguments rejects it.
    """
    uri: str = Field(min_length=1)
    tags: List[str] = []
    dockerfile: str = Field(min_length=1)

    context: Optional[str] = None
    target: Optional[str] = None
    cache_from: List[str] = []
    platform: Optional[str] = None

    args: Dict[str, str] = {}
    labels: Dict[str, str] = {}

    @property
    def context_dir(self) -> str:
        """
        The build context directory. Defaults to the Dockerfile's directory.
        """
        if self.context:
            return self.context
        return os.path.dirname(self.dockerfile) or "."

    @property
    def image_names(self) -> List[str]:
        return [image_name(self.uri, tag) for tag in self.tags]


class RunIntent(BaseModel):
    """
    A single container to start with `docker run`.
    """
    image_uri: str = Field(min_length=1)
    container_name: Optional[str] = None

    # {host: container}
    container_ports: Dict[str, str] = {}
    command: List[str] = []

    env_vars: Dict[str, str] = {}
    # Rendered the same way as env_vars on the command line.
    secrets: Dict[str, str] = {}

    container_network: Optional[str] = None

    @model_validator(mode="after")
    def _require_network(self) -> "RunIntent":
        if not is_pause_container(self.container_name) and not self.container_network:
            raise ValueError("container_network is required unless running a pause container")
        return self
