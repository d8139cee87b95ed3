"""Shared fixtures: settings for a fake identity root and a sample token response."""
from __future__ import annotations

import copy

import pytest

from keystone_mcp.config import Settings

BASE_URL = "https://keystone.test:5000/v2.0/"
TOKENS_URL = BASE_URL + "tokens"

TOKEN_RESPONSE = {
    "access": {
        "token": {
            "issued_at": "2014-01-30T15:30:58.000000Z",
            "expires": "2014-01-31T15:30:58Z",
            "id": "aaaabbbbccccdddd",
            "tenant": {
                "description": "There are many tenants. This one is yours.",
                "enabled": True,
                "id": "fc394f2ab2df4114bde39905f800dc57",
                "name": "test",
            },
        },
        "serviceCatalog": [
            {
                "endpoints": [
                    {"publicURL": "http://something0:1234/v2/", "region": "region0"},
                    {"publicURL": "http://something1:1234/v2/", "region": "region1"},
                ],
                "type": "something",
                "name": "inscrutablewalrus",
            },
            {
                "endpoints": [
                    {"publicURL": "http://else0:4321/v3/", "region": "region0"},
                ],
                "type": "else",
                "name": "arbitrarypenguin",
            },
        ],
    }
}


def make_settings(**kwargs) -> Settings:
    base = dict(
        keystone_url="https://keystone.test:5000/v2.0",
        username="me",
        password="swordfish",
        ssl_verify=False,
        timeout=5.0,
    )
    base.update(kwargs)
    return Settings(**base)


@pytest.fixture
def token_response() -> dict:
    return copy.deepcopy(TOKEN_RESPONSE)
