"""Tests for service catalog endpoint location."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from keystone_mcp.endpoints import EndpointOpts, locate_endpoint
from keystone_mcp.errors import EndpointNotFoundError, MultipleEndpointsFoundError
from keystone_mcp.models import CatalogEntry, Endpoint, ServiceCatalog

CATALOG = ServiceCatalog(
    entries=[
        CatalogEntry(
            name="nova",
            type="compute",
            endpoints=[
                Endpoint(
                    region="RegionOne",
                    publicURL="https://compute.example.com/v2/abc",
                    internalURL="http://10.0.0.5:8774/v2/abc/",
                    adminURL="http://10.0.0.5:8774/v2/abc/",
                ),
                Endpoint(region="RegionTwo", publicURL="https://compute2.example.com/v2/abc"),
            ],
        ),
        CatalogEntry(
            name="swift",
            type="object-store",
            endpoints=[Endpoint(region="RegionOne", publicURL="https://swift.example.com/v1/AUTH_abc")],
        ),
        CatalogEntry(
            name="cinder",
            type="volume",
            endpoints=[Endpoint(region="RegionOne", publicURL="https://volume.example.com/v1/abc")],
        ),
        CatalogEntry(
            name="cinderv2",
            type="volume",
            endpoints=[Endpoint(region="RegionOne", publicURL="https://volume.example.com/v2/abc")],
        ),
    ]
)


class TestLocateEndpoint:
    def test_single_match_gets_trailing_slash(self):
        url = locate_endpoint(CATALOG, EndpointOpts(type="object-store"))
        assert url == "https://swift.example.com/v1/AUTH_abc/"

    def test_region_narrows_match(self):
        url = locate_endpoint(CATALOG, EndpointOpts(type="compute", region="RegionTwo"))
        assert url == "https://compute2.example.com/v2/abc/"

    def test_name_narrows_match(self):
        url = locate_endpoint(CATALOG, EndpointOpts(type="volume", name="cinderv2"))
        assert url == "https://volume.example.com/v2/abc/"

    def test_internal_availability(self):
        opts = EndpointOpts(type="compute", region="RegionOne", availability="internal")
        assert locate_endpoint(CATALOG, opts) == "http://10.0.0.5:8774/v2/abc/"

    def test_ambiguous_match_raises(self):
        with pytest.raises(MultipleEndpointsFoundError, match="RegionOne, RegionTwo"):
            locate_endpoint(CATALOG, EndpointOpts(type="compute"))

    def test_ambiguous_across_entries_raises(self):
        with pytest.raises(MultipleEndpointsFoundError):
            locate_endpoint(CATALOG, EndpointOpts(type="volume"))

    def test_unknown_type_raises(self):
        with pytest.raises(EndpointNotFoundError, match="network"):
            locate_endpoint(CATALOG, EndpointOpts(type="network"))

    def test_unknown_region_raises(self):
        with pytest.raises(EndpointNotFoundError, match="RegionNine"):
            locate_endpoint(CATALOG, EndpointOpts(type="compute", region="RegionNine"))

    def test_missing_availability_url_raises(self):
        opts = EndpointOpts(type="object-store", availability="admin")
        with pytest.raises(EndpointNotFoundError, match="admin"):
            locate_endpoint(CATALOG, opts)

    def test_empty_catalog(self):
        with pytest.raises(EndpointNotFoundError):
            locate_endpoint(ServiceCatalog(), EndpointOpts(type="compute"))


class TestEndpointOpts:
    def test_requires_type(self):
        with pytest.raises(ValidationError):
            EndpointOpts(type="")

    def test_rejects_unknown_availability(self):
        with pytest.raises(ValidationError):
            EndpointOpts(type="compute", availability="private")
