"""
Identity v2 token creation.

Request:
  POST <identity root>/tokens
  {"auth": {"tenantId"?: ..., "tenantName"?: ...,
            "passwordCredentials": {"username": ..., "password": ...}}}

Only password credentials are supported. Options that identity v2 cannot
express (API key, user ID, domain scope) are rejected before anything is
sent, as are missing credentials.

``create`` never raises for request or transport problems: the error is
stored on the returned ``CreateResult`` and re-raised by whichever
``extract_*`` method the caller uses.
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Optional

import httpx
import structlog
from pydantic import ValidationError

from keystone_mcp.client import KeystoneClient
from keystone_mcp.errors import (
    APIKeyProvidedError,
    AuthOptionsError,
    DomainIDProvidedError,
    DomainNameProvidedError,
    KeystoneAPIError,
    PasswordRequiredError,
    TokenDecodeError,
    UserIDProvidedError,
    UsernameRequiredError,
)
from keystone_mcp.models import AuthOptions, ServiceCatalog, Token

log = structlog.get_logger(__name__)

CREATE_PATH = "tokens"

# Checked in order; the first match is raised.
_RULES: tuple[tuple[Callable[[AuthOptions], bool], type[AuthOptionsError]], ...] = (
    (lambda o: o.api_key is not None, APIKeyProvidedError),
    (lambda o: o.user_id is not None, UserIDProvidedError),
    (lambda o: o.domain_id is not None, DomainIDProvidedError),
    (lambda o: o.domain_name is not None, DomainNameProvidedError),
    (lambda o: o.username is None, UsernameRequiredError),
    (lambda o: o.password is None, PasswordRequiredError),
)


def build_request(options: AuthOptions) -> dict[str, Any]:
    """Return the JSON body for a token request.

    Raises the ``AuthOptionsError`` subclass for the first rule *options*
    violate.
    """
    for violates, error in _RULES:
        if violates(options):
            raise error()

    auth: dict[str, Any] = {}
    if options.tenant_id is not None:
        auth["tenantId"] = options.tenant_id
    if options.tenant_name is not None:
        auth["tenantName"] = options.tenant_name
    auth["passwordCredentials"] = {
        "username": options.username,
        "password": options.password,
    }
    return {"auth": auth}


class CreateResult:
    """Outcome of a token request, decoded on demand.

    Holds a private copy of either the decoded response body or the ``err``
    that stopped the request. Extraction never modifies that state, so each
    ``extract_*`` method may be called any number of times.
    """

    __slots__ = ("_body", "_err")

    def __init__(self, body: Any = None, err: Optional[BaseException] = None) -> None:
        self._body = copy.deepcopy(body)
        self._err = err

    @property
    def err(self) -> Optional[BaseException]:
        return self._err

    def __repr__(self) -> str:
        if self._err is not None:
            return f"CreateResult(err={self._err!r})"
        return "CreateResult(body=...)"

    def _access(self) -> dict[str, Any]:
        if self._err is not None:
            # fresh traceback each time so the stored error does not grow
            raise self._err.with_traceback(None)
        access = self._body.get("access") if isinstance(self._body, dict) else None
        if not isinstance(access, dict):
            raise TokenDecodeError("token response has no 'access' object")
        return access

    def extract_token(self) -> Token:
        """Return the issued token with its tenant."""
        token = self._access().get("token")
        if not isinstance(token, dict):
            raise TokenDecodeError("token response has no 'access.token' object")
        try:
            return Token.model_validate(token)
        except ValidationError as e:
            raise TokenDecodeError(f"malformed 'access.token': {e}") from e

    def extract_service_catalog(self) -> ServiceCatalog:
        """Return the service catalog in server order (empty if absent)."""
        entries = self._access().get("serviceCatalog")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise TokenDecodeError("'access.serviceCatalog' is not a list")
        try:
            return ServiceCatalog.model_validate({"entries": entries})
        except ValidationError as e:
            raise TokenDecodeError(f"malformed 'access.serviceCatalog': {e}") from e


async def create(client: KeystoneClient, options: AuthOptions) -> CreateResult:
    """Request a token with *options*. Problems end up in ``CreateResult.err``."""
    try:
        request = build_request(options)
    except AuthOptionsError as e:
        log.warning("tokens.rejected", reason=type(e).__name__)
        return CreateResult(err=e)

    log.info(
        "tokens.create",
        username=options.username,
        tenant_id=options.tenant_id,
        tenant_name=options.tenant_name,
    )
    try:
        body = await client.post(CREATE_PATH, request)
    except (KeystoneAPIError, httpx.HTTPError) as e:
        log.warning("tokens.create_failed", error=str(e))
        return CreateResult(err=e)
    return CreateResult(body=body)
