"""
macOS Keychain integration for Keystone credentials.

Secrets are read through the `security` CLI tool (built into macOS), so the
identity password never has to live in the process environment or on disk.
"""
from __future__ import annotations

import subprocess
from typing import Optional

import structlog

log = structlog.get_logger(__name__)

_SERVICE = "keystone-mcp"


def _run_security(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["/usr/bin/security", *args],
        capture_output=True,
        text=True,
        check=False,
    )


def store_secret(account: str, value: str) -> None:
    """Store *value* under *account*, replacing any existing entry."""
    _run_security("delete-generic-password", "-s", _SERVICE, "-a", account)

    result = _run_security(
        "add-generic-password",
        "-s", _SERVICE,
        "-a", account,
        "-w", value,
    )
    if result.returncode != 0:
        raise RuntimeError(
            f"Keychain store failed for account '{account}': {result.stderr.strip()}"
        )
    log.info("keychain.stored", account=account)


def retrieve_secret(account: str) -> Optional[str]:
    """Return the secret stored under *account*, or ``None`` if there is none."""
    try:
        result = _run_security("find-generic-password", "-s", _SERVICE, "-a", account, "-w")
    except FileNotFoundError:
        # not on macOS
        log.debug("keychain.unavailable", account=account)
        return None
    if result.returncode != 0:
        log.debug("keychain.not_found", account=account)
        return None
    value = result.stdout.strip()
    log.info("keychain.retrieved", account=account)
    return value or None


def delete_secret(account: str) -> bool:
    result = _run_security("delete-generic-password", "-s", _SERVICE, "-a", account)
    deleted = result.returncode == 0
    log.info("keychain.deleted", account=account, success=deleted)
    return deleted
