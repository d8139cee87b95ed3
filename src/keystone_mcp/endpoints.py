"""Locate a service URL in an identity v2 service catalog."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from keystone_mcp.errors import EndpointNotFoundError, MultipleEndpointsFoundError
from keystone_mcp.models import Endpoint, ServiceCatalog


class EndpointOpts(BaseModel):
    """Which catalog endpoint to pick.

    ``type`` is required; ``name`` and ``region`` narrow the match when set.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1)
    name: Optional[str] = None
    region: Optional[str] = None
    availability: Literal["public", "internal", "admin"] = "public"


def _matching(catalog: ServiceCatalog, opts: EndpointOpts) -> list[Endpoint]:
    found = []
    for entry in catalog.entries:
        if entry.type != opts.type:
            continue
        if opts.name and entry.name != opts.name:
            continue
        for endpoint in entry.endpoints:
            if opts.region and endpoint.region != opts.region:
                continue
            found.append(endpoint)
    return found


def locate_endpoint(catalog: ServiceCatalog, opts: EndpointOpts) -> str:
    """Return the single endpoint URL matching *opts*, ending in ``/``.

    Raises ``EndpointNotFoundError`` when nothing matches (or the match has
    no URL for the requested availability) and
    ``MultipleEndpointsFoundError`` when the match is ambiguous.
    """
    found = _matching(catalog, opts)
    if not found:
        raise EndpointNotFoundError(
            f"no {opts.availability} endpoint for service type {opts.type!r}"
            + (f" named {opts.name!r}" if opts.name else "")
            + (f" in region {opts.region!r}" if opts.region else "")
        )
    if len(found) > 1:
        regions = sorted({e.region for e in found})
        raise MultipleEndpointsFoundError(
            f"{len(found)} endpoints match service type {opts.type!r} "
            f"(regions: {', '.join(regions)}); narrow by name or region"
        )

    url = found[0].url_for(opts.availability)
    if not url:
        raise EndpointNotFoundError(
            f"endpoint for {opts.type!r} has no {opts.availability} URL"
        )
    return url.rstrip("/") + "/"
