"""Tests for settings resolution (env → Keychain → YAML)."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from keystone_mcp import config
from keystone_mcp.config import Settings, get_settings

_ENV_VARS = (
    "KEYSTONE_URL",
    "KEYSTONE_USERNAME",
    "KEYSTONE_PASSWORD",
    "KEYSTONE_TENANT_ID",
    "KEYSTONE_TENANT_NAME",
    "KEYSTONE_SSL_VERIFY",
    "KEYSTONE_TIMEOUT",
)


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_CONFIG_FILE", tmp_path / "config.yaml")
    get_settings.cache_clear()
    with patch("keystone_mcp.config.retrieve_secret", return_value=None):
        yield tmp_path
    get_settings.cache_clear()


def test_env_vars(monkeypatch):
    monkeypatch.setenv("KEYSTONE_URL", "https://keystone.test:5000/v2.0/")
    monkeypatch.setenv("KEYSTONE_USERNAME", "me")
    monkeypatch.setenv("KEYSTONE_PASSWORD", "swordfish")
    monkeypatch.setenv("KEYSTONE_TENANT_NAME", "demo")
    monkeypatch.setenv("KEYSTONE_SSL_VERIFY", "false")
    monkeypatch.setenv("KEYSTONE_TIMEOUT", "12.5")

    s = get_settings()
    assert s.keystone_url == "https://keystone.test:5000/v2.0"
    assert s.username == "me"
    assert s.tenant_name == "demo"
    assert s.ssl_verify is False
    assert s.timeout == 12.5


def test_yaml_fallback(isolated, monkeypatch):
    (isolated / "config.yaml").write_text(
        "keystone_url: https://yaml.test/v2.0\n"
        "username: yamluser\n"
        "tenant_id: fc394f2ab2df4114bde39905f800dc57\n"
        "timeout: 7\n"
    )
    monkeypatch.setenv("KEYSTONE_USERNAME", "envuser")

    s = get_settings()
    assert s.keystone_url == "https://yaml.test/v2.0"
    assert s.username == "envuser"
    assert s.tenant_id == "fc394f2ab2df4114bde39905f800dc57"
    assert s.ssl_verify is True
    assert s.timeout == 7.0


def test_keychain_between_env_and_yaml(isolated):
    (isolated / "config.yaml").write_text("keystone_url: https://yaml.test/v2.0\n")
    secrets = {"keystone-url": "https://keychain.test/v2.0", "keystone-password": "fromkeychain"}
    with patch("keystone_mcp.config.retrieve_secret", side_effect=secrets.get):
        s = get_settings()
    assert s.keystone_url == "https://keychain.test/v2.0"
    assert s.password == "fromkeychain"


def test_missing_url_raises():
    with pytest.raises(RuntimeError, match="KEYSTONE_URL"):
        get_settings()


def test_repr_hides_password():
    s = Settings(keystone_url="https://k/v2.0", username="me", password="swordfish")
    assert "swordfish" not in repr(s)


class TestAuthOptions:
    def test_uses_configured_tenant(self):
        s = Settings(keystone_url="https://k", username="me", password="pw", tenant_id="t1")
        opts = s.auth_options()
        assert opts.tenant_id == "t1"
        assert opts.tenant_name is None

    def test_explicit_tenant_replaces_configured_scope(self):
        s = Settings(keystone_url="https://k", username="me", password="pw", tenant_id="t1")
        opts = s.auth_options(tenant_name="demo")
        assert opts.tenant_id is None
        assert opts.tenant_name == "demo"

    def test_missing_credentials_stay_unset(self):
        opts = Settings(keystone_url="https://k").auth_options()
        assert opts.username is None
        assert opts.password is None
