"""Resource-directory search (211-style community resource API)."""

import asyncio
import logging
from typing import Any

import httpx

from relief_sources.data import RawResult, ResourceSource, Usage
from relief_sources.errors import UpstreamConfigError

DIRECTORY_API_URL = "https://api.211.org/resources/v2/search/keyword"

# AIRS/211 taxonomy: disaster services, disaster relief, emergency shelter.
DEFAULT_TAXONOMY_CODES = ("TH-2600", "TH-2600.1500", "BH-1800.8500")

logger = logging.getLogger(__name__)


def _first(item: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-empty value among ``keys``."""
    for key in keys:
        value = item.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class DirectorySearcher:
    """Search a community resource directory by taxonomy code and ZIP.

    Issues one request per taxonomy code, concurrently, each restricted to a
    fixed radius around the ZIP and capped at ``max_results``. Non-2xx
    responses are errors; the search fails only if every request failed.

    Args:
        api_key: Directory API key. A missing key is reported as
            ``UpstreamConfigError`` when ``search`` is called.
        base_url: Search endpoint.
        taxonomy_codes: Taxonomy codes to query.
        radius_mi: Search radius in miles.
        max_results: Result cap per taxonomy code.
        timeout: HTTP timeout in seconds.
    """

    source = ResourceSource.DIRECTORY

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DIRECTORY_API_URL,
        taxonomy_codes: tuple[str, ...] | list[str] = DEFAULT_TAXONOMY_CODES,
        radius_mi: float = 30.0,
        max_results: int = 25,
        timeout: float = 20.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._taxonomy_codes = tuple(taxonomy_codes)
        self._radius_mi = radius_mi
        self._max_results = max_results
        self._timeout = timeout

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        if not self._api_key:
            raise UpstreamConfigError("Directory API key not configured")

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            tasks = [
                self._search_single(client, code, postal_code) for code in self._taxonomy_codes
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        seen_ids: set[str] = set()
        raw_results: list[RawResult] = []
        failures: list[BaseException] = []
        successful_requests = 0

        for code, result in zip(self._taxonomy_codes, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Directory query for {code} failed. Error: {result}")
                failures.append(result)
                continue
            successful_requests += 1
            for raw in result:
                if raw.source_id and raw.source_id in seen_ids:
                    continue
                seen_ids.add(raw.source_id)
                raw_results.append(raw)

        if failures and successful_requests == 0:
            raise failures[0]

        return (raw_results, Usage(directory_requests=successful_requests))

    async def _search_single(
        self,
        client: httpx.AsyncClient,
        taxonomy_code: str,
        postal_code: str,
    ) -> list[RawResult]:
        """Execute a single directory query for one taxonomy code."""
        params: dict[str, str | int | float] = {
            "keyword": taxonomy_code,
            "keywordIsTaxonomyCode": "true",
            "location": postal_code,
            "distance": self._radius_mi,
            "top": self._max_results,
            "orderBy": "distance",
        }
        headers = {"Api-Key": str(self._api_key), "Accept": "application/json"}
        response = await client.get(self._base_url, params=params, headers=headers)
        response.raise_for_status()
        data = response.json()

        if isinstance(data, list):
            items = data
        else:
            items = _first(data, "results", "value", "data") or []

        raw_results: list[RawResult] = []
        for item in items[: self._max_results]:
            if isinstance(item, dict):
                raw = self._parse_item(item, taxonomy_code)
                if raw is not None:
                    raw_results.append(raw)
        return raw_results

    def _parse_item(self, item: dict[str, Any], taxonomy_code: str) -> RawResult | None:
        """Map one directory entry to a ``RawResult``; ``None`` if it has no name."""
        name = _first(item, "name", "serviceName", "organizationName")
        if not name:
            return None

        address = _first(item, "address", "physicalAddress")
        street = city = state = None
        if isinstance(address, dict):
            street = _first(address, "street", "address1", "streetAddress")
            city = _first(address, "city")
            state = _first(address, "state", "stateProvince")
        elif isinstance(address, str):
            street = address
        city = city or _first(item, "city")
        state = state or _first(item, "state")

        taxonomy = _first(item, "taxonomyTerm", "taxonomyName", "category")
        categories = tuple(str(c) for c in (taxonomy if isinstance(taxonomy, list) else [taxonomy]) if c)

        return RawResult(
            name=str(name),
            source=self.source,
            source_id=str(_first(item, "id", "serviceId", "resourceId") or ""),
            description=_first(item, "description", "serviceDescription"),
            categories=categories or (taxonomy_code,),
            phone=_first(item, "phone", "phoneNumber"),
            website=_first(item, "website", "url"),
            email=_first(item, "email"),
            address=street,
            city=city,
            state=state,
            postal_code=_first(item, "postalCode", "zip"),
            latitude=_as_float(_first(item, "latitude", "lat")),
            longitude=_as_float(_first(item, "longitude", "lng", "lon")),
            distance_mi=_as_float(_first(item, "distance", "distanceMiles")),
            hours=_first(item, "hours", "hoursOfOperation"),
        )
