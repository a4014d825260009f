"""Tests for PlacesSearcher."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from relief_sources.data import Coordinates, ResourceSource
from relief_sources.errors import GeocodeError, UpstreamConfigError
from relief_sources.search.places import (
    PLACES_FIELD_MASK,
    PLACES_URL,
    RECOVERY_PLACE_TYPES,
    PlacesSearcher,
    categorize_place,
    categorize_recovery_place,
    chunk,
    split_address,
)

CENTER = Coordinates(lat=30.05, lng=-99.14)


@pytest.fixture
def geocoder() -> MagicMock:
    mock = MagicMock()
    mock.geocode = AsyncMock(return_value=CENTER)
    return mock


@pytest.fixture
def places_data() -> dict:
    """Sample searchNearby response."""
    return {
        "places": [
            {
                "id": "p1",
                "displayName": {"text": "Peterson Regional Medical Center"},
                "formattedAddress": "551 Hill Country Dr, Kerrville, TX 78028, USA",
                "location": {"latitude": 30.06, "longitude": -99.13},
                "types": ["hospital", "point_of_interest", "establishment"],
                "nationalPhoneNumber": "(830) 896-4200",
                "websiteUri": "https://www.petersonhealth.com/",
            },
            {
                "id": "p2",
                "displayName": {"text": "Far Away Hospital"},
                "formattedAddress": "1 Far Rd, Abilene, TX 79601, USA",
                "location": {"latitude": 31.5, "longitude": -99.14},
                "types": ["hospital"],
            },
            {
                "id": "p3",
                "formattedAddress": "910 Main St, Kerrville, TX 78028, USA",
                "location": {"latitude": 30.04, "longitude": -99.15},
                "types": ["community_center"],
                "googleMapsUri": "https://maps.google.com/?cid=3",
            },
            {
                "id": "p4",
                "displayName": {"text": "No Location"},
                "types": ["police"],
            },
        ]
    }


def _mock_post(data: dict, calls: list[dict] | None = None):
    async def mock_post(self, url, **kwargs):
        if calls is not None:
            calls.append({"url": url, **kwargs})
        response = MagicMock()
        response.json.return_value = data
        response.raise_for_status = MagicMock()
        return response

    return mock_post


class TestPlacesSearcher:
    """Tests for PlacesSearcher."""

    async def test_search_returns_nearby_places(
        self, geocoder: MagicMock, places_data: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(httpx.AsyncClient, "post", _mock_post(places_data))
        searcher = PlacesSearcher(api_key="test-key", geocoder=geocoder)

        results, usage = await searcher.search("78028")

        assert [r.source_id for r in results] == ["p1", "p3"]
        hospital = results[0]
        assert hospital.source == ResourceSource.MAPS
        assert hospital.name == "Peterson Regional Medical Center"
        assert hospital.categories == ("medical_emergency",)
        assert hospital.description == "hospital"
        assert hospital.address == "551 Hill Country Dr, Kerrville"
        assert hospital.city == "Kerrville"
        assert hospital.state == "TX"
        assert hospital.phone == "(830) 896-4200"
        assert hospital.website == "https://www.petersonhealth.com/"
        assert 0 < hospital.distance_mi < 1

        unnamed = results[1]
        assert unnamed.name == "Unknown Place"
        assert unnamed.categories == ("community_center",)
        assert unnamed.website == "https://maps.google.com/?cid=3"

        assert usage.geocode_requests == 1
        assert usage.places_requests == 1
        geocoder.geocode.assert_awaited_once_with("78028")

    async def test_search_batches_place_types(
        self, geocoder: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(httpx.AsyncClient, "post", _mock_post({"places": []}, calls))
        types = ["hospital", "police", "fire_station", "community_center", "library", "school"]
        searcher = PlacesSearcher(api_key="test-key", geocoder=geocoder, place_types=types)

        results, usage = await searcher.search("78028")

        assert results == []
        assert len(calls) == 2
        assert sorted(len(c["json"]["includedTypes"]) for c in calls) == [1, 5]
        assert all(c["url"] == PLACES_URL for c in calls)
        assert all(c["headers"]["X-Goog-FieldMask"] == PLACES_FIELD_MASK for c in calls)
        circle = calls[0]["json"]["locationRestriction"]["circle"]
        assert circle["center"] == {"latitude": 30.05, "longitude": -99.14}
        assert circle["radius"] == pytest.approx(48280.32)
        assert usage.places_requests == 2

    async def test_geocode_failure_propagates(
        self, geocoder: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        geocoder.geocode = AsyncMock(side_effect=GeocodeError("Could not geocode 00000"))
        post = AsyncMock()
        monkeypatch.setattr(httpx.AsyncClient, "post", post)
        searcher = PlacesSearcher(api_key="test-key", geocoder=geocoder)

        with pytest.raises(GeocodeError):
            await searcher.search("00000")
        post.assert_not_called()

    async def test_all_batches_failing_raises(
        self, geocoder: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def mock_post(*args, **kwargs):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(httpx.AsyncClient, "post", mock_post)
        searcher = PlacesSearcher(api_key="test-key", geocoder=geocoder)

        with pytest.raises(httpx.ConnectError):
            await searcher.search("78028")

    async def test_missing_key_raises_config_error(self, geocoder: MagicMock) -> None:
        searcher = PlacesSearcher(api_key=None, geocoder=geocoder)
        with pytest.raises(UpstreamConfigError):
            await searcher.search("78028")
        geocoder.geocode.assert_not_called()

    async def test_recovery_profile(
        self, geocoder: MagicMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        data = {
            "places": [
                {
                    "id": "r1",
                    "displayName": {"text": "Hill Country Roofing"},
                    "formattedAddress": "120 Water St, Kerrville, TX 78028, USA",
                    "location": {"latitude": 30.06, "longitude": -99.13},
                    "types": ["roofing_contractor", "point_of_interest"],
                },
                {
                    "id": "r2",
                    "displayName": {"text": "Kerrville Ace Hardware"},
                    "location": {"latitude": 30.04, "longitude": -99.15},
                    "types": ["hardware_store", "home_goods_store", "store"],
                },
            ]
        }
        calls: list[dict] = []
        monkeypatch.setattr(httpx.AsyncClient, "post", _mock_post(data, calls))
        searcher = PlacesSearcher(
            api_key="test-key", geocoder=geocoder, profile="recovery", max_distance_mi=25
        )

        results, usage = await searcher.search("78028")

        assert searcher.source == ResourceSource.MAPS_RECOVERY
        sent = sorted(t for c in calls for t in c["json"]["includedTypes"])
        assert sent == sorted(RECOVERY_PLACE_TYPES)
        assert [r.source_id for r in results] == ["r1", "r2"]
        roofer, hardware = results
        assert roofer.source == ResourceSource.MAPS_RECOVERY
        assert roofer.categories == ("contractor",)
        assert roofer.description == "contractor"
        assert hardware.categories == ("tools",)
        assert usage.places_requests == 2

    def test_emergency_profile_is_default(self, geocoder: MagicMock) -> None:
        searcher = PlacesSearcher(api_key="test-key", geocoder=geocoder)
        assert searcher.source == ResourceSource.MAPS


def test_categorize_place_by_type() -> None:
    assert categorize_place(["police"], "Kerrville Police Department") == ["emergency_responder"]
    assert categorize_place(["fire_station", "local_government_office"], "Station 1") == [
        "emergency_responder",
        "local_government_office",
    ]


def test_categorize_place_by_name_keywords() -> None:
    assert categorize_place([], "Christian Food Shelter") == ["food", "shelter"]
    assert categorize_place(["point_of_interest"], "City Park") == []


def test_categorize_recovery_place() -> None:
    assert categorize_recovery_place(["general_contractor", "painter"]) == [
        "contractor",
        "painter",
    ]
    assert categorize_recovery_place(["self_storage"]) == ["moving"]
    assert categorize_recovery_place(["plumber", "electrician"]) == ["plumber", "electrician"]
    assert categorize_recovery_place(["hospital"]) == []


def test_split_address() -> None:
    assert split_address("123 Main St, Kerrville, TX 78028, USA") == (
        "123 Main St, Kerrville",
        "Kerrville",
        "TX",
    )
    assert split_address("Somewhere") == ("Somewhere", None, None)


def test_chunk() -> None:
    assert chunk(["a", "b", "c"], 2) == [["a", "b"], ["c"]]
    assert chunk([], 5) == []
