"""Core data models for relief resource aggregation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class ResourceSource(StrEnum):
    """External sources a resource record can come from."""

    DIRECTORY = "directory"
    MAPS = "maps"
    LLM_SEARCH_A = "llm-search-a"
    LLM_SEARCH_B = "llm-search-b"
    MAPS_RECOVERY = "maps-recovery"


class ResourceCategory(StrEnum):
    """Category tags shared by all adapters.

    Adapters may emit free-text categories too; these are the tags the
    built-in categorization and the LLM prompts use.
    """

    EMERGENCY_RESPONDER = "emergency_responder"
    MEDICAL_EMERGENCY = "medical_emergency"
    EMERGENCY_SHELTER = "emergency_shelter"
    FOOD = "food"
    SHELTER = "shelter"
    COMMUNITY_CENTER = "community_center"
    LOCAL_GOVERNMENT_OFFICE = "local_government_office"
    FINANCIAL_ASSISTANCE = "financial_assistance"
    DISASTER_RECOVERY_CENTER = "disaster_recovery_center"
    # Recovery services
    CONTRACTOR = "contractor"
    PAINTER = "painter"
    PLUMBER = "plumber"
    ELECTRICIAN = "electrician"
    MOVING = "moving"
    TOOLS = "tools"


RECOVERY_CATEGORIES = frozenset(
    {
        ResourceCategory.CONTRACTOR,
        ResourceCategory.PAINTER,
        ResourceCategory.PLUMBER,
        ResourceCategory.ELECTRICIAN,
        ResourceCategory.MOVING,
        ResourceCategory.TOOLS,
    }
)


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class RawResult:
    """A candidate resource as emitted by one adapter, before normalization."""

    name: str
    source: ResourceSource
    source_id: str
    description: str | None = None
    categories: tuple[str, ...] = ()
    phone: str | None = None
    website: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    distance_mi: float | None = None
    hours: str | None = None
    last_verified_at: datetime | None = None


@dataclass(frozen=True)
class ResourceRecord:
    """A normalized disaster-relief resource, as stored and returned to clients."""

    name: str
    source: ResourceSource
    source_id: str
    postal_code: str
    last_seen_at: datetime
    categories: tuple[str, ...] = ()
    description: str | None = None
    phone: str | None = None
    website: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    distance_mi: float | None = None
    hours: str | None = None
    last_verified_at: datetime | None = None

    @property
    def category(self) -> str:
        return ", ".join(self.categories)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape returned by the HTTP API."""
        return {
            "name": self.name,
            "category": self.category,
            "categories": list(self.categories),
            "description": self.description,
            "phone": self.phone,
            "website": self.website,
            "email": self.email,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance_mi": self.distance_mi,
            "source": str(self.source),
            "source_id": self.source_id,
            "hours": self.hours,
            "last_seen_at": self.last_seen_at.isoformat(),
            "last_verified_at": (
                self.last_verified_at.isoformat() if self.last_verified_at else None
            ),
        }


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single LLM API call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    web_searches: int = 0


@dataclass
class Usage:
    """Accumulated external API usage across adapters."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    geocode_requests: int = 0
    directory_requests: int = 0
    places_requests: int = 0
    perplexity_requests: int = 0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    @property
    def web_searches(self) -> int:
        return sum(c.web_searches for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            geocode_requests=self.geocode_requests + other.geocode_requests,
            directory_requests=self.directory_requests + other.directory_requests,
            places_requests=self.places_requests + other.places_requests,
            perplexity_requests=self.perplexity_requests + other.perplexity_requests,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.geocode_requests += other.geocode_requests
        self.directory_requests += other.directory_requests
        self.places_requests += other.places_requests
        self.perplexity_requests += other.perplexity_requests
        return self


@dataclass
class AggregationResult:
    """Outcome of one aggregation request, with provenance."""

    resources: list[ResourceRecord] = field(default_factory=list)
    cached: bool = False
    cached_at: datetime | None = None
    errors: list[str] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)

    def to_response(self) -> dict[str, Any]:
        """Build the response body: ``cachedAt`` and ``errors`` only when set."""
        body: dict[str, Any] = {
            "resources": [r.to_dict() for r in self.resources],
            "cached": self.cached,
        }
        if self.cached_at is not None:
            body["cachedAt"] = self.cached_at.isoformat()
        if self.errors:
            body["errors"] = list(self.errors)
        return body
