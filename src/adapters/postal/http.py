"""
HTTP postal lookup adapter - Implements PostalLookup protocol.

Resolves a postal code to state and district for the two countries with
address auto-fill. Each upstream has its own URL and response shape:

- India: api.postalpincode.in returns a list whose first element carries
  ``Status`` and a ``PostOffice`` list.
- Malaysia: api.zippopotam.us returns an object with a ``places`` list and
  answers 404 for unknown codes.

Every other country fails with UnsupportedCountry.
"""

import logging

import httpx

from src.domain.exceptions import PostalCodeNotFound, UnsupportedCountry, UpstreamLookupFailure
from src.domain.ports import PostalAddress

logger = logging.getLogger(__name__)

INDIA_URL = "https://api.postalpincode.in/pincode/{code}"
MALAYSIA_URL = "https://api.zippopotam.us/MY/{code}"


def parse_india_response(data) -> PostalAddress:
    try:
        entry = data[0]
        if entry.get("Status") == "Success" and entry.get("PostOffice"):
            post_office = entry["PostOffice"][0]
            return PostalAddress(
                state=post_office["State"],
                district=post_office["District"],
                country=post_office.get("Country", "India"),
            )
    except (IndexError, KeyError, TypeError, AttributeError) as e:
        raise UpstreamLookupFailure(f"Unexpected pincode response: {e}") from e
    raise PostalCodeNotFound()


def parse_malaysia_response(data) -> PostalAddress:
    try:
        places = data.get("places") or []
        if places:
            place = places[0]
            return PostalAddress(
                state=place["state"],
                district=place["place name"],
                country=data.get("country", "Malaysia"),
            )
    except (KeyError, TypeError, AttributeError) as e:
        raise UpstreamLookupFailure(f"Unexpected postal code response: {e}") from e
    raise PostalCodeNotFound()


class HttpPostalLookup:
    """
    Implements PostalLookup protocol via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    An AsyncClient may be injected; otherwise one is opened per lookup.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def lookup(self, code: str, country: str) -> PostalAddress:
        code = code.strip()
        if country == "India":
            data = await self._fetch(INDIA_URL.format(code=code))
            address = parse_india_response(data)
        elif country == "Malaysia":
            data = await self._fetch(MALAYSIA_URL.format(code=code))
            address = parse_malaysia_response(data)
        else:
            raise UnsupportedCountry(country)

        logger.info("Resolved %s postal code %s to %s, %s", country, code, address.district, address.state)
        return address

    async def _fetch(self, url: str):
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Postal lookup request failed: %s", e)
            raise UpstreamLookupFailure(str(e)) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise PostalCodeNotFound()

        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Postal lookup returned %s", response.status_code)
            raise UpstreamLookupFailure(str(e)) from e
        except ValueError as e:
            logger.warning("Postal lookup returned invalid JSON: %s", e)
            raise UpstreamLookupFailure(str(e)) from e
