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
Shapes of the JSON documents returned by docker inspection commands and
read from docker client configuration files.
"""
from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DaemonInfo(BaseModel):
    """
    The part of `docker info` we care about. An empty list of server errors
    means the daemon answered.
    """
    model_config = ConfigDict(populate_by_name=True)

    server_errors: List[str] = Field(default_factory=list, alias="ServerErrors")

    @field_validator("server_errors", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value

    @property
    def healthy(self) -> bool:
        return not self.server_errors


class ServerPlatform(BaseModel):
    """
    The `.Server` section of `docker version`.
    """
    model_config = ConfigDict(populate_by_name=True)

    os: str = Field(default="", alias="Os")
    arch: str = Field(default="", alias="Arch")


class CredentialConfig(BaseModel):
    """
    Credential settings of a docker client configuration file.

    Sample:
        {
            "credsStore": "ecr-login",
            "credHelpers": {
                "123456789012.dkr.ecr.us-west-2.amazonaws.com": "ecr-login"
            }
        }
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    creds_store: Optional[str] = Field(default=None, alias="credsStore")
    cred_helpers: Dict[str, str] = Field(default_factory=dict, alias="credHelpers")

    @field_validator("cred_helpers", mode="before")
    @classmethod
    def _drop_nulls(cls, value):
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v is not None}
        return value

    def helper_for(self, registry: str) -> Optional[str]:
        return self.cred_helpers.get(registry)
