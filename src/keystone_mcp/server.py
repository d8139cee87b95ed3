"""
Keystone identity v2 MCP Server, main entry point.

Exposes the following MCP tools:

  1. authenticate: request a token and report its expiry and tenant
  2. list_services: list the service catalog returned with the token
  3. get_endpoint: resolve one service URL from the catalog

Every tool call requests a fresh token with the configured credentials;
nothing is cached between calls.

Run:
    python -m keystone_mcp.server
    # or via the installed script:
    keystone-mcp
"""
from __future__ import annotations

import json
import logging
import sys

import httpx
import structlog
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from keystone_mcp import tokens
from keystone_mcp.client import KeystoneClient
from keystone_mcp.config import Settings, get_settings
from keystone_mcp.endpoints import EndpointOpts, locate_endpoint
from keystone_mcp.errors import KeystoneAPIError, KeystoneError
from keystone_mcp.models import AuthenticateInput, EndpointInput

# ---------------------------------------------------------------------------
# Logging setup: structured JSON to stderr, never to stdout (MCP uses stdout)
# ---------------------------------------------------------------------------

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer(),
    ],
)

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------

app = Server("keystone-mcp")

_TENANT_PROPERTIES = {
    "tenant_id": {"type": "string", "description": "Tenant ID to scope the token to (overrides config)"},
    "tenant_name": {"type": "string", "description": "Tenant name to scope the token to (overrides config)"},
}


def _ok(data: object) -> list[types.TextContent]:
    """Wrap a result as a JSON TextContent response."""
    return [types.TextContent(type="text", text=json.dumps(data, indent=2, default=str))]


def _err(message: str) -> list[types.TextContent]:
    """Wrap an error message as a TextContent response."""
    return [types.TextContent(type="text", text=json.dumps({"error": message}))]


def _mask(token_id: str) -> str:
    return token_id[:4] + "…" if len(token_id) > 4 else "…"


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

@app.list_tools()
async def list_tools() -> list[types.Tool]:
    """Advertise all available tools to the MCP client."""
    return [
        types.Tool(
            name="authenticate",
            description=(
                "Request an identity v2 token with the configured username and password. "
                "Returns the (masked) token ID, its expiry in UTC, and the scoped tenant."
            ),
            inputSchema={"type": "object", "properties": dict(_TENANT_PROPERTIES), "required": []},
        ),
        types.Tool(
            name="list_services",
            description=(
                "List the service catalog returned with a fresh token: each service's "
                "name, type, and the regions it has endpoints in."
            ),
            inputSchema={"type": "object", "properties": dict(_TENANT_PROPERTIES), "required": []},
        ),
        types.Tool(
            name="get_endpoint",
            description=(
                "Resolve a single service URL from the catalog by service type, "
                "optionally narrowed by service name and region."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_TENANT_PROPERTIES,
                    "service_type": {"type": "string", "description": "Service type (e.g. 'compute', 'object-store')"},
                    "name": {"type": "string", "description": "Service name as listed in the catalog"},
                    "region": {"type": "string", "description": "Endpoint region"},
                    "availability": {
                        "type": "string",
                        "enum": ["public", "internal", "admin"],
                        "description": "Which URL to return (default 'public')",
                    },
                },
                "required": ["service_type"],
            },
        ),
    ]


# ---------------------------------------------------------------------------
# Tool dispatcher
# ---------------------------------------------------------------------------

@app.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    """Dispatch MCP tool calls to the appropriate identity handler."""
    log.info("tool.called", tool=name)

    try:
        settings = get_settings()
    except RuntimeError as e:
        return _err(f"Configuration error: {e}")

    try:
        async with KeystoneClient(settings) as client:
            return await _dispatch(name, arguments or {}, client, settings)
    except KeystoneAPIError as e:
        log.error("keystone.api_error", tool=name, status=e.status_code, error=str(e))
        return _err(str(e))
    except KeystoneError as e:
        log.warning("tool.keystone_error", tool=name, error=str(e))
        return _err(str(e))
    except httpx.HTTPError as e:
        log.error("keystone.connection_error", tool=name, error=str(e))
        return _err(f"Connection error: {type(e).__name__}: {e}")
    except ValidationError as e:
        log.warning("tool.validation_error", tool=name, errors=e.errors())
        return _err(f"Input validation error: {e}")
    except Exception as e:
        log.exception("tool.unexpected_error", tool=name)
        return _err(f"Unexpected error: {type(e).__name__}: {e}")


async def _dispatch(
    name: str,
    arguments: dict,
    client: KeystoneClient,
    settings: Settings,
) -> list[types.TextContent]:
    """Route tool name to implementation."""

    # ── authenticate ────────────────────────────────────────────────────────
    if name == "authenticate":
        inp = AuthenticateInput(**arguments)
        result = await tokens.create(
            client, settings.auth_options(tenant_id=inp.tenant_id, tenant_name=inp.tenant_name)
        )
        token = result.extract_token()
        return _ok({
            "token_id": _mask(token.id),
            "expires_at": token.expires_at.isoformat(),
            "tenant": token.tenant.model_dump(),
        })

    # ── list_services ───────────────────────────────────────────────────────
    if name == "list_services":
        inp = AuthenticateInput(**arguments)
        result = await tokens.create(
            client, settings.auth_options(tenant_id=inp.tenant_id, tenant_name=inp.tenant_name)
        )
        catalog = result.extract_service_catalog()
        summary = [
            {
                "name": entry.name,
                "type": entry.type,
                "regions": sorted({e.region for e in entry.endpoints if e.region}),
                "endpoints": len(entry.endpoints),
            }
            for entry in catalog.entries
        ]
        return _ok(summary)

    # ── get_endpoint ────────────────────────────────────────────────────────
    if name == "get_endpoint":
        inp = EndpointInput(**arguments)
        opts = EndpointOpts(
            type=inp.service_type,
            name=inp.name,
            region=inp.region,
            availability=inp.availability,
        )
        result = await tokens.create(
            client, settings.auth_options(tenant_id=inp.tenant_id, tenant_name=inp.tenant_name)
        )
        url = locate_endpoint(result.extract_service_catalog(), opts)
        return _ok({"service_type": opts.type, "availability": opts.availability, "url": url})

    return _err(f"Unknown tool: {name!r}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _serve() -> None:
    log.info("server.starting", name="keystone-mcp")
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def main() -> None:
    import asyncio
    asyncio.run(_serve())


if __name__ == "__main__":
    main()
