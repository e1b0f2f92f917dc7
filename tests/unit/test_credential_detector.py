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
Unit tests for the ECR credential helper detector.
"""
import json

import pytest

from conftest import make_config
from dockerengine.MANAGERS.credential_detector import CredentialHelperDetector, CRED_STORE_ECR_LOGIN

REGISTRY = "123456789012.dkr.ecr.us-west-2.amazonaws.com"
URI = f"{REGISTRY}/app"


def write_config(home, rel_path, content):
    path = home / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, dict):
        content = json.dumps(content)
    path.write_text(content)
    return path


@pytest.fixture
def detector(tmp_path):
    return CredentialHelperDetector(make_config(home_path=str(tmp_path)))


class TestCredentialHelperDetector:
    """Tests for CredentialHelperDetector."""

    def test_no_home(self):
        """Test that an unknown home directory means disabled."""
        detector = CredentialHelperDetector(make_config(home_path=""))
        result = detector.detect(URI)
        assert not result.enabled
        assert "home" in result.reason

    def test_no_config_files(self, detector):
        result = detector.detect(URI)
        assert not result.enabled
        assert result.path is None
        assert not detector.is_credential_helper_enabled(URI)

    def test_global_creds_store(self, tmp_path, detector):
        """Test that ecr-login as credsStore applies to every registry."""
        path = write_config(tmp_path, ".docker/config.json", {"credsStore": CRED_STORE_ECR_LOGIN})
        result = detector.detect(URI)
        assert result.enabled
        assert result.path == str(path)
        assert detector.is_credential_helper_enabled("docker.io/library/nginx")

    def test_registry_cred_helper(self, tmp_path, detector):
        """Test that a per-registry helper only applies to that registry."""
        write_config(tmp_path, ".docker/config.json",
                     {"credsStore": "desktop", "credHelpers": {REGISTRY: "ecr-login"}})
        assert detector.is_credential_helper_enabled(URI)
        assert detector.is_credential_helper_enabled(REGISTRY)
        assert not detector.is_credential_helper_enabled("public.ecr.aws/app")

    def test_other_helper(self, tmp_path, detector):
        write_config(tmp_path, ".docker/config.json", {"credHelpers": {REGISTRY: "desktop"}})
        assert not detector.is_credential_helper_enabled(URI)

    def test_legacy_dockercfg(self, tmp_path, detector):
        """Test that ~/.dockercfg is read when config.json is missing."""
        path = write_config(tmp_path, ".dockercfg", {"credsStore": "ecr-login"})
        result = detector.detect(URI)
        assert result.enabled
        assert result.path == str(path)

    def test_malformed_config_falls_through(self, tmp_path, detector):
        """Test that an unparseable config.json is skipped."""
        write_config(tmp_path, ".docker/config.json", "{not json")
        write_config(tmp_path, ".dockercfg", {"credsStore": "ecr-login"})
        assert detector.is_credential_helper_enabled(URI)

    def test_unreadable_config_falls_through(self, tmp_path, detector):
        """Test that a config.json that cannot be read is skipped."""
        (tmp_path / ".docker" / "config.json").mkdir(parents=True)
        write_config(tmp_path, ".dockercfg", {"credsStore": "ecr-login"})
        assert detector.is_credential_helper_enabled(URI)

    def test_first_parsed_file_decides(self, tmp_path, detector):
        """Test that files are not merged: a parsed config.json wins."""
        path = write_config(tmp_path, ".docker/config.json", {"auths": {}})
        write_config(tmp_path, ".dockercfg", {"credsStore": "ecr-login"})
        result = detector.detect(URI)
        assert not result.enabled
        assert result.path == str(path)

    @pytest.mark.parametrize("content", ["", "[]", "null", '{"credHelpers": 1}', "[" * 200000],
                             ids=["empty", "list", "null", "bad-helpers", "deep-nesting"])
    def test_never_raises(self, tmp_path, detector, content):
        write_config(tmp_path, ".docker/config.json", content)
        assert detector.is_credential_helper_enabled(URI) is False

    def test_null_cred_helpers(self, tmp_path, detector):
        """Test that null credHelpers do not hide a global ecr-login store."""
        write_config(tmp_path, ".docker/config.json", '{"credsStore": "ecr-login", "credHelpers": null}')
        assert detector.is_credential_helper_enabled(URI)

    def test_null_helper_entry(self, tmp_path, detector):
        """Test that a null helper for another registry is ignored."""
        write_config(tmp_path, ".docker/config.json",
                     {"credHelpers": {"public.ecr.aws": None, REGISTRY: "ecr-login"}})
        assert detector.is_credential_helper_enabled(URI)

    def test_empty_uri(self, tmp_path, detector):
        write_config(tmp_path, ".docker/config.json", {"credHelpers": {"": "ecr-login"}})
        assert not detector.is_credential_helper_enabled("")
