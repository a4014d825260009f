"""Nearby emergency and recovery resources via the Google Places API (v1)."""

import asyncio
import logging
from typing import Any, Literal

import httpx

from relief_sources.data import Coordinates, RawResult, ResourceCategory, ResourceSource, Usage
from relief_sources.errors import UpstreamConfigError
from relief_sources.geo import haversine_miles, miles_to_meters
from relief_sources.geocode.base import Geocoder

PLACES_URL = "https://places.googleapis.com/v1/places:searchNearby"
PLACES_FIELD_MASK = ",".join(
    [
        "places.displayName",
        "places.formattedAddress",
        "places.location",
        "places.types",
        "places.id",
        "places.businessStatus",
        "places.nationalPhoneNumber",
        "places.googleMapsUri",
        "places.websiteUri",
    ]
)

DEFAULT_PLACE_TYPES = (
    "hospital",
    "police",
    "fire_station",
    "community_center",
    "local_government_office",
)
# Place types searched by the recovery profile.
RECOVERY_PLACE_TYPES = (
    "roofing_contractor",
    "painter",
    "plumber",
    "electrician",
    "moving_company",
    "hardware_store",
    "home_goods_store",
    "car_rental",
    "self_storage",
)
# searchNearby accepts several includedTypes per call; keep batches small.
MAX_TYPES_PER_REQUEST = 5
# searchNearby rejects radii above 50 km.
MAX_RADIUS_METERS = 50000.0

_GENERIC_TYPES = {"point_of_interest", "establishment"}

PlacesProfile = Literal["emergency", "recovery"]

logger = logging.getLogger(__name__)


def chunk(items: list[str], size: int) -> list[list[str]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def categorize_place(place_types: list[str], name: str) -> list[str]:
    """Derive category tags from Places types and name keywords."""
    categories: list[str] = []
    lower_name = name.lower()
    types = set(place_types)

    if types & {"hospital", "urgent_care", "emergency_room"}:
        categories.append(ResourceCategory.MEDICAL_EMERGENCY)
    if types & {"police", "fire_station"}:
        categories.append(ResourceCategory.EMERGENCY_RESPONDER)
    if "community_center" in types:
        categories.append(ResourceCategory.COMMUNITY_CENTER)
    if "local_government_office" in types:
        categories.append(ResourceCategory.LOCAL_GOVERNMENT_OFFICE)
    if "food" in lower_name:
        categories.append(ResourceCategory.FOOD)
    if "shelter" in lower_name:
        categories.append(ResourceCategory.SHELTER)
    return [str(c) for c in categories]


def categorize_recovery_place(place_types: list[str]) -> list[str]:
    """Derive recovery-service tags from Places types."""
    categories: list[str] = []
    types = set(place_types)

    if types & {"contractor", "roofing_contractor", "general_contractor"}:
        categories.append(ResourceCategory.CONTRACTOR)
    if "painter" in types:
        categories.append(ResourceCategory.PAINTER)
    if "plumber" in types:
        categories.append(ResourceCategory.PLUMBER)
    if "electrician" in types:
        categories.append(ResourceCategory.ELECTRICIAN)
    if types & {"moving_company", "car_rental", "self_storage"}:
        categories.append(ResourceCategory.MOVING)
    if types & {"hardware_store", "home_goods_store"}:
        categories.append(ResourceCategory.TOOLS)
    return [str(c) for c in categories]


def split_address(formatted_address: str) -> tuple[str, str | None, str | None]:
    """Split a formatted address into ("street, city", city, state).

    ``"123 Main St, Kerrville, TX 78028, USA"`` becomes
    ``("123 Main St, Kerrville", "Kerrville", "TX")``.
    """
    parts = [p.strip() for p in formatted_address.split(",") if p.strip()]
    if len(parts) < 2:
        return (formatted_address.strip(), None, None)
    city = parts[1]
    state = None
    if len(parts) >= 3:
        state_zip = parts[2].split()
        if state_zip and len(state_zip[0]) == 2 and state_zip[0].isalpha():
            state = state_zip[0].upper()
    return (f"{parts[0]}, {parts[1]}", city, state)


class PlacesSearcher:
    """Search for nearby resources with the Places ``searchNearby`` API.

    Geocodes the ZIP, then issues one request per batch of place types
    (batches run concurrently). Results are tagged with categories, their
    great-circle distance from the ZIP centroid, and dropped when farther
    than ``max_distance_mi``.

    The ``emergency`` profile looks for responders, hospitals and public
    offices and reports as ``maps``. The ``recovery`` profile looks for
    repair, moving and storage businesses, tags them with recovery categories
    and reports as ``maps-recovery``, so its rows are cached separately.

    Args:
        api_key: Google Maps API key. A missing key is reported as
            ``UpstreamConfigError`` when ``search`` is called.
        geocoder: Geocoder used to find the ZIP centroid.
        profile: ``"emergency"`` or ``"recovery"``.
        place_types: Places types to search for (defaults to the profile's
            types).
        max_distance_mi: Search radius and distance cutoff, in miles.
        max_results_per_request: ``maxResultCount`` per request (max 20).
        timeout: HTTP timeout in seconds.
    """

    source = ResourceSource.MAPS

    def __init__(
        self,
        *,
        api_key: str | None,
        geocoder: Geocoder,
        profile: PlacesProfile = "emergency",
        place_types: tuple[str, ...] | list[str] | None = None,
        max_distance_mi: float = 30.0,
        max_results_per_request: int = 20,
        timeout: float = 20.0,
    ) -> None:
        self._api_key = api_key
        self._geocoder = geocoder
        if profile == "recovery":
            self.source = ResourceSource.MAPS_RECOVERY
            default_types = RECOVERY_PLACE_TYPES
        else:
            default_types = DEFAULT_PLACE_TYPES
        self._profile = profile
        self._place_types = list(place_types or default_types)
        self._max_distance_mi = max_distance_mi
        self._max_results = min(max(max_results_per_request, 1), 20)
        self._timeout = timeout

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        if not self._api_key:
            raise UpstreamConfigError("Google Maps API key not configured")

        center = await self._geocoder.geocode(postal_code)
        usage = Usage(geocode_requests=1)

        batches = chunk(self._place_types, MAX_TYPES_PER_REQUEST)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            tasks = [self._search_batch(client, types, center) for types in batches]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        seen_ids: set[str] = set()
        raw_results: list[RawResult] = []
        failures: list[BaseException] = []
        out_of_range = 0

        for types, result in zip(batches, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Places request for {','.join(types)} failed. Error: {result}")
                failures.append(result)
                continue
            usage.places_requests += 1
            for raw in result:
                if raw.distance_mi is not None and raw.distance_mi > self._max_distance_mi:
                    out_of_range += 1
                    continue
                if raw.source_id and raw.source_id in seen_ids:
                    continue
                seen_ids.add(raw.source_id)
                raw_results.append(raw)

        if failures and usage.places_requests == 0:
            raise failures[0]

        logger.info(
            f"Places search for {postal_code}: {len(raw_results)} results "
            f"({out_of_range} beyond {self._max_distance_mi} mi)"
        )
        return (raw_results, usage)

    async def _search_batch(
        self,
        client: httpx.AsyncClient,
        place_types: list[str],
        center: Coordinates,
    ) -> list[RawResult]:
        """Execute one ``searchNearby`` request for a batch of place types."""
        body = {
            "includedTypes": place_types,
            "maxResultCount": self._max_results,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": center.lat, "longitude": center.lng},
                    "radius": min(miles_to_meters(self._max_distance_mi), MAX_RADIUS_METERS),
                }
            },
        }
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": str(self._api_key),
            "X-Goog-FieldMask": PLACES_FIELD_MASK,
        }
        response = await client.post(PLACES_URL, json=body, headers=headers)
        response.raise_for_status()
        data = response.json()

        raw_results: list[RawResult] = []
        for place in data.get("places") or []:
            raw = self._parse_place(place, center)
            if raw is not None:
                raw_results.append(raw)
        return raw_results

    def _parse_place(self, place: dict[str, Any], center: Coordinates) -> RawResult | None:
        """Map a Places result to a ``RawResult``; ``None`` if it has no location."""
        location = place.get("location") or {}
        try:
            point = Coordinates(lat=float(location["latitude"]), lng=float(location["longitude"]))
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Skipping place without location: {place.get('id')}")
            return None

        name = (place.get("displayName") or {}).get("text") or "Unknown Place"
        place_types: list[str] = place.get("types") or []
        specific_types = ", ".join([t for t in place_types if t not in _GENERIC_TYPES][:2])
        if self._profile == "recovery":
            categories = categorize_recovery_place(place_types)
            description = ", ".join(categories) or specific_types.replace("_", " ")
        else:
            categories = categorize_place(place_types, name)
            description = specific_types.replace("_", " ") or ", ".join(categories)

        place_id = place.get("id") or ""
        street, city, state = split_address(place.get("formattedAddress") or "")
        website = place.get("websiteUri") or place.get("googleMapsUri")
        if not website and place_id:
            website = f"https://maps.google.com/maps/place/?q=place_id:{place_id}"

        return RawResult(
            name=name,
            source=self.source,
            source_id=place_id,
            description=description or None,
            categories=tuple(categories),
            phone=place.get("nationalPhoneNumber") or None,
            website=website,
            address=street or None,
            city=city,
            state=state,
            latitude=point.lat,
            longitude=point.lng,
            distance_mi=haversine_miles(center, point),
        )
