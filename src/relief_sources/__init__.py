"""Relief Sources: aggregate disaster-relief resources near a US ZIP code."""

from relief_sources.config import ReliefConfig, create_from_config, load_config
from relief_sources.data import (
    AggregationResult,
    APICallUsage,
    Coordinates,
    RawResult,
    ResourceCategory,
    ResourceRecord,
    ResourceSource,
    Usage,
)
from relief_sources.errors import (
    AdapterFailure,
    GeocodeError,
    InvalidInput,
    PersistenceFailure,
    ReliefSourcesError,
    UpstreamConfigError,
)
from relief_sources.geo import haversine_miles
from relief_sources.geocode import Geocoder, GoogleGeocoder
from relief_sources.normalize import (
    DedupNormalizer,
    ResourceNormalizer,
    parse_llm_content,
    parse_resource_text,
)
from relief_sources.pipeline import Pipeline, ResourcePipeline
from relief_sources.postal import validate_postal_code
from relief_sources.run_logger import RunLogger
from relief_sources.search import (
    ClaudeSearcher,
    DirectorySearcher,
    PerplexitySearcher,
    PlacesSearcher,
    ResourceSearcher,
)
from relief_sources.store import MemoryResourceStore, ResourceStore, SQLAlchemyResourceStore

__all__ = [
    # Models
    "APICallUsage",
    "AggregationResult",
    "Coordinates",
    "RawResult",
    "ResourceCategory",
    "ResourceRecord",
    "ResourceSource",
    "Usage",
    # Errors
    "AdapterFailure",
    "GeocodeError",
    "InvalidInput",
    "PersistenceFailure",
    "ReliefSourcesError",
    "UpstreamConfigError",
    # Functions
    "haversine_miles",
    "parse_llm_content",
    "parse_resource_text",
    "validate_postal_code",
    # Protocols
    "Geocoder",
    "Pipeline",
    "ResourceNormalizer",
    "ResourceSearcher",
    "ResourceStore",
    # Geocoders
    "GoogleGeocoder",
    # Searchers
    "ClaudeSearcher",
    "DirectorySearcher",
    "PerplexitySearcher",
    "PlacesSearcher",
    # Normalizers
    "DedupNormalizer",
    # Stores
    "MemoryResourceStore",
    "SQLAlchemyResourceStore",
    # Pipelines
    "ResourcePipeline",
    # Logging
    "RunLogger",
    # Config
    "ReliefConfig",
    "create_from_config",
    "load_config",
]
