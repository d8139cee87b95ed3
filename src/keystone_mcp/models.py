"""
Pydantic models for Keystone v2 credentials, token responses and MCP tool inputs.

Response models accept the wire field names (``publicURL``, ``expires``, …)
through aliases and expose snake_case attributes. Every value model is frozen.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class AuthOptions(BaseModel):
    """Credential bundle for a token request.

    ``None`` means "not provided"; empty strings are normalised to ``None``.
    Only some combinations are valid for identity v2, see
    ``keystone_mcp.tokens.build_request``.
    """

    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None
    domain_id: Optional[str] = None
    domain_name: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def empty_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v == "":
            return None
        return v

    def __repr__(self) -> str:
        shown = {
            k: ("***" if k in ("password", "api_key") else v)
            for k, v in self.model_dump(exclude_none=True).items()
        }
        return f"AuthOptions({shown!r})"

    __str__ = __repr__


# ---------------------------------------------------------------------------
# Token response
# ---------------------------------------------------------------------------


class Tenant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    description: str = ""
    enabled: bool = False

    @field_validator("id", "name", "description", mode="before")
    @classmethod
    def null_is_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v


class Token(BaseModel):
    """An issued token. Only ever built from a successful token response."""

    model_config = ConfigDict(frozen=True)

    id: str
    expires_at: datetime = Field(..., alias="expires")
    tenant: Tenant = Field(default_factory=Tenant)

    @field_validator("tenant", mode="before")
    @classmethod
    def unscoped(cls, v: object) -> object:
        return {} if v is None else v

    @field_validator("expires_at")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    region: str = ""
    public_url: str = Field(default="", alias="publicURL")
    internal_url: str = Field(default="", alias="internalURL")
    admin_url: str = Field(default="", alias="adminURL")

    @field_validator("*", mode="before")
    @classmethod
    def null_is_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    def url_for(self, availability: str) -> str:
        return {
            "public": self.public_url,
            "internal": self.internal_url,
            "admin": self.admin_url,
        }[availability]


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = ""
    endpoints: list[Endpoint] = Field(default_factory=list)

    @field_validator("name", "type", mode="before")
    @classmethod
    def null_is_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator("endpoints", mode="before")
    @classmethod
    def null_endpoints(cls, v: object) -> object:
        return [] if v is None else v


class ServiceCatalog(BaseModel):
    """Catalog entries in the order the identity service returned them."""

    model_config = ConfigDict(frozen=True)

    entries: list[CatalogEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# MCP tool input schemas
# ---------------------------------------------------------------------------

_SAFE_NAME_RE = re.compile(r"^[\w\-. ]{1,255}$")


def _require_safe_name(v: Optional[str]) -> Optional[str]:
    if v is not None and not _SAFE_NAME_RE.match(v):
        raise ValueError("value contains illegal characters or is too long")
    return v


class AuthenticateInput(BaseModel):
    """Optional tenant scope overriding the configured one."""
    tenant_id: Optional[str] = Field(default=None, description="Tenant ID to scope the token to", max_length=255)
    tenant_name: Optional[str] = Field(default=None, description="Tenant name to scope the token to", max_length=255)

    @field_validator("tenant_id", "tenant_name")
    @classmethod
    def sanitize(cls, v: Optional[str]) -> Optional[str]:
        return _require_safe_name(v)


class EndpointInput(AuthenticateInput):
    """Input for locating one endpoint URL in the service catalog."""
    service_type: str = Field(..., description="Catalog service type (e.g. 'compute')", min_length=1, max_length=255)
    name: Optional[str] = Field(default=None, description="Catalog service name", max_length=255)
    region: Optional[str] = Field(default=None, description="Endpoint region", max_length=255)
    availability: Literal["public", "internal", "admin"] = Field(
        default="public",
        description="Which endpoint URL to return",
    )

    @field_validator("service_type", "name", "region")
    @classmethod
    def sanitize_names(cls, v: Optional[str]) -> Optional[str]:
        return _require_safe_name(v)
