"""Tests for GoogleGeocoder."""

from unittest.mock import MagicMock

import httpx
import pytest

from relief_sources.data import Coordinates
from relief_sources.errors import AdapterFailure, GeocodeError, UpstreamConfigError
from relief_sources.geocode.google import GEOCODE_URL, GoogleGeocoder


def _mock_response(data: dict) -> MagicMock:
    response = MagicMock()
    response.json.return_value = data
    response.raise_for_status = MagicMock()
    return response


class TestGoogleGeocoder:
    """Tests for GoogleGeocoder."""

    @pytest.fixture
    def geocoder(self) -> GoogleGeocoder:
        return GoogleGeocoder(api_key="test-key")

    async def test_geocode_returns_coordinates(
        self, geocoder: GoogleGeocoder, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[dict] = []

        async def mock_get(self, url, **kwargs):
            calls.append({"url": url, **kwargs})
            return _mock_response(
                {
                    "status": "OK",
                    "results": [{"geometry": {"location": {"lat": 30.05, "lng": -99.14}}}],
                }
            )

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        coords = await geocoder.geocode("78028")

        assert coords == Coordinates(lat=30.05, lng=-99.14)
        assert calls[0]["url"] == GEOCODE_URL
        assert calls[0]["params"] == {"address": "78028", "key": "test-key"}

    async def test_zero_results_raises(
        self, geocoder: GoogleGeocoder, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(*args, **kwargs):
            return _mock_response({"status": "ZERO_RESULTS", "results": []})

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(GeocodeError, match="ZERO_RESULTS"):
            await geocoder.geocode("00000")

    async def test_ok_with_empty_results_raises(
        self, geocoder: GoogleGeocoder, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_get(*args, **kwargs):
            return _mock_response({"status": "OK", "results": []})

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(GeocodeError):
            await geocoder.geocode("78028")

    async def test_http_error_raises_geocode_error(
        self, geocoder: GoogleGeocoder, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        request = httpx.Request("GET", GEOCODE_URL)
        error_response = httpx.Response(500, request=request)

        async def mock_get(*args, **kwargs):
            response = MagicMock()
            response.raise_for_status = MagicMock(
                side_effect=httpx.HTTPStatusError("500", request=request, response=error_response)
            )
            return response

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        with pytest.raises(GeocodeError):
            await geocoder.geocode("78028")

    async def test_missing_key_raises_config_error(self) -> None:
        geocoder = GoogleGeocoder(api_key=None)
        with pytest.raises(UpstreamConfigError):
            await geocoder.geocode("78028")

    def test_geocode_error_is_adapter_failure(self) -> None:
        assert issubclass(GeocodeError, AdapterFailure)
