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
Detection of the Amazon ECR credential helper in docker client configuration.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from ..MODELS.engine_config import EngineConfig
from ..PARSERS.engine_output import parse_credential_config

logger = logging.getLogger(__name__)

# Value of `credsStore` or of a `credHelpers` entry selecting docker-credential-ecr-login.
CRED_STORE_ECR_LOGIN = "ecr-login"

CONFIG_PATHS = (
    os.path.join(".docker", "config.json"),
    ".dockercfg",
)


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of a detection. `reason` says why, `path` names the
    configuration file that decided, if any.
    """
    enabled: bool
    reason: str
    path: Optional[str] = None


class CredentialHelperDetector:
    """
    Finds out whether docker authenticates to a registry through the ECR
    credential helper, either globally or for that registry only.
    """
    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig.from_environment()

    def detect(self, uri: str) -> DetectionResult:
        """
        Inspects the docker configuration files in the home directory. The
        first file that can be read and parsed decides the answer.

        Args:
            uri (str): Repository URI, e.g.
                `123456789012.dkr.ecr.us-west-2.amazonaws.com/app`.
        """
        registry = uri.split("/")[0]
        if not self.config.home_path:
            return DetectionResult(False, "home directory is unknown")
        if not registry:
            return DetectionResult(False, "no registry host in uri")

        for rel_path in CONFIG_PATHS:
            path = os.path.join(self.config.home_path, rel_path)
            try:
                with open(path, "rb") as f:
                    content = f.read()
            except OSError as e:
                logger.debug("Skipping docker config %s: %s", path, e)
                continue

            try:
                cred = parse_credential_config(content)
            except ValueError as e:
                logger.debug("Skipping malformed docker config %s: %s", path, e)
                continue

            if cred.creds_store == CRED_STORE_ECR_LOGIN:
                return DetectionResult(True, "credsStore is ecr-login", path)
            if cred.helper_for(registry) == CRED_STORE_ECR_LOGIN:
                return DetectionResult(True, f"credHelpers selects ecr-login for {registry}", path)
            return DetectionResult(False, "ecr-login is not configured", path)

        return DetectionResult(False, "no readable docker config")

    def is_credential_helper_enabled(self, uri: str) -> bool:
        """
        True if ecr-login is the credential store or the credential helper of
        the registry in `uri`. Never raises; any problem reading the
        configuration yields False.
        """
        return self.detect(uri).enabled
