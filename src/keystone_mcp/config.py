"""
Configuration loading for Keystone MCP.

Priority order (highest → lowest):
  1. Environment variables (KEYSTONE_URL, KEYSTONE_USERNAME, KEYSTONE_PASSWORD, …)
  2. macOS Keychain (keystone-mcp / keystone-url, keystone-username, keystone-password)
  3. ~/.config/keystone-mcp/config.yaml

KEYSTONE_URL is the v2.0 identity root, e.g. https://cloud.example.com:5000/v2.0
Tokens are requested at <KEYSTONE_URL>/tokens.

Never write secrets back to any file from this module.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
import yaml

from keystone_mcp.keychain import retrieve_secret
from keystone_mcp.models import AuthOptions

log = structlog.get_logger(__name__)

_CONFIG_FILE = Path.home() / ".config" / "keystone-mcp" / "config.yaml"

_KEYCHAIN_URL_ACCOUNT = "keystone-url"
_KEYCHAIN_USERNAME_ACCOUNT = "keystone-username"
_KEYCHAIN_PASSWORD_ACCOUNT = "keystone-password"


class Settings:
    """Runtime configuration resolved at startup."""

    def __init__(
        self,
        keystone_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        tenant_id: Optional[str] = None,
        tenant_name: Optional[str] = None,
        ssl_verify: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.keystone_url = keystone_url.rstrip("/")
        self.username = username
        self.password = password
        self.tenant_id = tenant_id
        self.tenant_name = tenant_name
        self.ssl_verify = ssl_verify
        self.timeout = timeout

    def auth_options(
        self,
        tenant_id: Optional[str] = None,
        tenant_name: Optional[str] = None,
    ) -> AuthOptions:
        """Build the credential bundle for a token request.

        An explicit tenant replaces the configured tenant scope entirely.
        """
        if not (tenant_id or tenant_name):
            tenant_id, tenant_name = self.tenant_id, self.tenant_name
        return AuthOptions(
            username=self.username,
            password=self.password,
            tenant_id=tenant_id,
            tenant_name=tenant_name,
        )

    def __repr__(self) -> str:
        return (
            f"Settings(url={self.keystone_url!r}, username={self.username!r}, "
            f"tenant_id={self.tenant_id!r}, tenant_name={self.tenant_name!r}, "
            f"ssl_verify={self.ssl_verify}, timeout={self.timeout})"
        )


def _load_yaml_config() -> dict:
    """Load optional YAML config file, returning an empty dict if absent."""
    if _CONFIG_FILE.exists():
        with _CONFIG_FILE.open() as f:
            data = yaml.safe_load(f) or {}
        log.info("config.yaml_loaded", path=str(_CONFIG_FILE))
        return data
    return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Resolve and return the global Settings singleton.

    Raises ``RuntimeError`` if the identity URL cannot be found in any source.
    Missing credentials are not an error here; the token request rejects them.
    """
    yaml_cfg = _load_yaml_config()

    url = (
        os.environ.get("KEYSTONE_URL")
        or retrieve_secret(_KEYCHAIN_URL_ACCOUNT)
        or yaml_cfg.get("keystone_url")
    )
    if not url:
        raise RuntimeError(
            "Keystone URL not found. Set KEYSTONE_URL env var, store it in Keychain "
            "(account 'keystone-url'), or add 'keystone_url' to "
            f"{_CONFIG_FILE}"
        )

    username = (
        os.environ.get("KEYSTONE_USERNAME")
        or retrieve_secret(_KEYCHAIN_USERNAME_ACCOUNT)
        or yaml_cfg.get("username")
    )
    password = (
        os.environ.get("KEYSTONE_PASSWORD")
        or retrieve_secret(_KEYCHAIN_PASSWORD_ACCOUNT)
        or yaml_cfg.get("password")
    )

    tenant_id = os.environ.get("KEYSTONE_TENANT_ID") or yaml_cfg.get("tenant_id")
    tenant_name = os.environ.get("KEYSTONE_TENANT_NAME") or yaml_cfg.get("tenant_name")

    ssl_verify_raw = (
        os.environ.get("KEYSTONE_SSL_VERIFY")
        or str(yaml_cfg.get("ssl_verify", "true"))
    )
    ssl_verify = ssl_verify_raw.lower() not in ("false", "0", "no")

    timeout = float(
        os.environ.get("KEYSTONE_TIMEOUT")
        or yaml_cfg.get("timeout", 30.0)
    )

    settings = Settings(
        keystone_url=url,
        username=username,
        password=password,
        tenant_id=tenant_id,
        tenant_name=tenant_name,
        ssl_verify=ssl_verify,
        timeout=timeout,
    )
    log.info("config.resolved", settings=repr(settings))
    return settings
