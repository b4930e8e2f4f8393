"""
Unit tests for HttpPostalLookup.

Upstream APIs are replaced with httpx.MockTransport handlers.
"""

import asyncio

import httpx
import pytest

from src.adapters.postal.http import HttpPostalLookup, parse_india_response, parse_malaysia_response
from src.domain.exceptions import PostalCodeNotFound, UnsupportedCountry, UpstreamLookupFailure
from src.domain.ports import PostalAddress

INDIA_SUCCESS = [
    {
        "Message": "Number of pincode(s) found:1",
        "Status": "Success",
        "PostOffice": [{"State": "Delhi", "District": "Central Delhi", "Country": "India"}],
    }
]
INDIA_ERROR = [{"Message": "No records found", "Status": "Error", "PostOffice": None}]
MALAYSIA_SUCCESS = {
    "post code": "24000",
    "country": "Malaysia",
    "places": [{"place name": "Kemaman", "state": "Terengganu"}],
}


def lookup_with(handler) -> HttpPostalLookup:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpPostalLookup(client=client)


class TestIndia:
    def test_success(self) -> None:
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, json=INDIA_SUCCESS)

        address = asyncio.run(lookup_with(handler).lookup("110001", "India"))

        assert address == PostalAddress(state="Delhi", district="Central Delhi", country="India")
        assert requested == ["https://api.postalpincode.in/pincode/110001"]

    def test_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=INDIA_ERROR)

        with pytest.raises(PostalCodeNotFound):
            asyncio.run(lookup_with(handler).lookup("999999", "India"))


class TestMalaysia:
    def test_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/MY/24000"
            return httpx.Response(200, json=MALAYSIA_SUCCESS)

        address = asyncio.run(lookup_with(handler).lookup("24000", "Malaysia"))

        assert address.state == "Terengganu"
        assert address.district == "Kemaman"
        assert address.country == "Malaysia"

    def test_404_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={})

        with pytest.raises(PostalCodeNotFound):
            asyncio.run(lookup_with(handler).lookup("00000", "Malaysia"))


class TestFailures:
    def test_unsupported_country(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(UnsupportedCountry) as exc_info:
            asyncio.run(lookup_with(handler).lookup("12345", "Thailand"))
        assert exc_info.value.user_message == "Auto-fill not supported for Thailand"

    def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(UpstreamLookupFailure):
            asyncio.run(lookup_with(handler).lookup("110001", "India"))

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(UpstreamLookupFailure):
            asyncio.run(lookup_with(handler).lookup("24000", "Malaysia"))

    def test_invalid_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(UpstreamLookupFailure):
            asyncio.run(lookup_with(handler).lookup("110001", "India"))


class TestParsers:
    def test_india_malformed(self) -> None:
        with pytest.raises(UpstreamLookupFailure):
            parse_india_response([])

    def test_malaysia_empty_places(self) -> None:
        with pytest.raises(PostalCodeNotFound):
            parse_malaysia_response({"places": []})
