"""ZIP code geocoding via the Google Geocoding API."""

import logging

import httpx

from relief_sources.data import Coordinates
from relief_sources.errors import GeocodeError, UpstreamConfigError

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

logger = logging.getLogger(__name__)


class GoogleGeocoder:
    """Resolve ZIP codes to a centroid using the Google Geocoding API.

    Args:
        api_key: Google Maps API key. A missing key is reported as
            ``UpstreamConfigError`` when ``geocode`` is called.
        timeout: HTTP timeout in seconds.
    """

    def __init__(self, *, api_key: str | None, timeout: float = 10.0) -> None:
        self._api_key = api_key
        self._timeout = timeout

    async def geocode(self, postal_code: str) -> Coordinates:
        if not self._api_key:
            raise UpstreamConfigError("Google Maps API key not configured")

        params = {"address": postal_code, "key": self._api_key}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(GEOCODE_URL, params=params)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise GeocodeError(f"Geocoding failed: {e}") from e
            data = response.json()

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise GeocodeError(f"Could not geocode {postal_code} (status: {status})")

        try:
            location = results[0]["geometry"]["location"]
            coords = Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodeError(f"Malformed geocoding result for {postal_code}") from e

        logger.info(f"Geocoded {postal_code} to {coords.lat}, {coords.lng}")
        return coords
