"""Pydantic configuration models for relief_sources components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from relief_sources.search.directory import DEFAULT_TAXONOMY_CODES, DIRECTORY_API_URL
from relief_sources.search.places import PlacesProfile

# ============================================================
# Searcher Configs
# ============================================================


class DirectorySearcherConfig(BaseModel):
    """Configuration for DirectorySearcher (211-style resource directory)."""

    type: Literal["directory"] = "directory"
    base_url: str = DIRECTORY_API_URL
    taxonomy_codes: list[str] = Field(default_factory=lambda: list(DEFAULT_TAXONOMY_CODES))
    radius_mi: float = Field(default=30.0, gt=0)
    max_results: int = Field(default=25, ge=1)
    timeout_seconds: float = Field(default=20.0, gt=0)

    model_config = {"frozen": True}


class PlacesSearcherConfig(BaseModel):
    """Configuration for PlacesSearcher (geocode + nearby places).

    ``place_types`` defaults to the profile's own list when omitted.
    """

    type: Literal["places"] = "places"
    profile: PlacesProfile = "emergency"
    place_types: list[str] | None = None
    max_distance_mi: float = Field(default=30.0, gt=0)
    max_results_per_request: int = Field(default=20, ge=1, le=20)
    timeout_seconds: float = Field(default=20.0, gt=0)
    geocode_timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = {"frozen": True}


class ClaudeSearcherConfig(BaseModel):
    """Configuration for ClaudeSearcher."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    max_searches: int = Field(default=0, ge=0)
    max_tokens: int = Field(default=2048, ge=1)
    prompt_template: str | None = None

    model_config = {"frozen": True}


class PerplexitySearcherConfig(BaseModel):
    """Configuration for PerplexitySearcher."""

    type: Literal["perplexity"] = "perplexity"
    model: str = "sonar"
    output_format: Literal["prose", "json"] = "prose"
    max_tokens: int = Field(default=800, ge=1)
    timeout_seconds: float = Field(default=60.0, gt=0)

    model_config = {"frozen": True}


SearcherConfig = Annotated[
    DirectorySearcherConfig | PlacesSearcherConfig | ClaudeSearcherConfig | PerplexitySearcherConfig,
    Field(discriminator="type"),
]


# ============================================================
# Store Configs
# ============================================================


class MemoryStoreConfig(BaseModel):
    """Process-local store; nothing is persisted."""

    type: Literal["memory"] = "memory"

    model_config = {"frozen": True}


class SQLAlchemyStoreConfig(BaseModel):
    """SQL-backed store.

    ``database_url`` falls back to the ``DATABASE_URL`` environment variable,
    then to a local SQLite file.
    """

    type: Literal["sqlalchemy"] = "sqlalchemy"
    database_url: str | None = None
    echo: bool = False
    create_schema: bool = True

    model_config = {"frozen": True}


StoreConfig = Annotated[
    MemoryStoreConfig | SQLAlchemyStoreConfig,
    Field(discriminator="type"),
]


# ============================================================
# Pipeline Config
# ============================================================


class PipelineConfig(BaseModel):
    """Configuration for ResourcePipeline."""

    searchers: list[SearcherConfig] = Field(default_factory=list)
    freshness_hours: float = Field(default=24.0, gt=0)
    adapter_timeout_seconds: float = Field(default=30.0, gt=0)
    merge_categories: bool = True
    max_description_length: int = Field(default=280, ge=1)

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-request run logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class ReliefConfig(BaseModel):
    """Root configuration for relief_sources.

    ``recovery`` configures the optional recovery-services pipeline; it
    shares the store and run logger with the main pipeline.
    """

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    recovery: PipelineConfig | None = None
    store: StoreConfig = Field(default_factory=MemoryStoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
