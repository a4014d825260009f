"""Configuration module for relief_sources."""

from relief_sources.config.credentials import Credentials
from relief_sources.config.factory import (
    create_from_config,
    create_pipeline,
    create_recovery_pipeline,
    create_searcher,
    create_store,
    prepare_storage,
)
from relief_sources.config.loader import get_default_config_path, load_config
from relief_sources.config.models import (
    ClaudeSearcherConfig,
    DirectorySearcherConfig,
    LoggingConfig,
    MemoryStoreConfig,
    PerplexitySearcherConfig,
    PipelineConfig,
    PlacesSearcherConfig,
    ReliefConfig,
    SearcherConfig,
    SQLAlchemyStoreConfig,
    StoreConfig,
)

__all__ = [
    "ClaudeSearcherConfig",
    "Credentials",
    "DirectorySearcherConfig",
    "LoggingConfig",
    "MemoryStoreConfig",
    "PerplexitySearcherConfig",
    "PipelineConfig",
    "PlacesSearcherConfig",
    "ReliefConfig",
    "SQLAlchemyStoreConfig",
    "SearcherConfig",
    "StoreConfig",
    "create_from_config",
    "create_pipeline",
    "create_recovery_pipeline",
    "create_searcher",
    "create_store",
    "get_default_config_path",
    "load_config",
    "prepare_storage",
]
