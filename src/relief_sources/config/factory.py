"""Factory functions to create components from configuration."""

from datetime import timedelta
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine

from relief_sources.config.credentials import Credentials
from relief_sources.config.models import (
    ClaudeSearcherConfig,
    DirectorySearcherConfig,
    MemoryStoreConfig,
    PerplexitySearcherConfig,
    PipelineConfig,
    PlacesSearcherConfig,
    ReliefConfig,
    SearcherConfig,
    SQLAlchemyStoreConfig,
    StoreConfig,
)
from relief_sources.geocode.google import GoogleGeocoder
from relief_sources.normalize.dedup import DedupNormalizer
from relief_sources.pipeline.aggregate import ResourcePipeline
from relief_sources.run_logger import RunLogger
from relief_sources.search.base import ResourceSearcher
from relief_sources.search.claude import ClaudeSearcher
from relief_sources.search.directory import DirectorySearcher
from relief_sources.search.perplexity import PerplexitySearcher
from relief_sources.search.places import PlacesSearcher
from relief_sources.store.base import ResourceStore
from relief_sources.store.database import SQLAlchemyResourceStore
from relief_sources.store.engine import create_engine, create_session_maker, init_schema
from relief_sources.store.memory import MemoryResourceStore

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///relief_sources.db"


def create_searcher(config: SearcherConfig, credentials: Credentials) -> ResourceSearcher:
    """Create a resource searcher from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, DirectorySearcherConfig):
        return DirectorySearcher(
            api_key=credentials.directory_api_key,
            base_url=config.base_url,
            taxonomy_codes=config.taxonomy_codes,
            radius_mi=config.radius_mi,
            max_results=config.max_results,
            timeout=config.timeout_seconds,
        )
    if isinstance(config, PlacesSearcherConfig):
        geocoder = GoogleGeocoder(
            api_key=credentials.maps_api_key,
            timeout=config.geocode_timeout_seconds,
        )
        return PlacesSearcher(
            api_key=credentials.maps_api_key,
            geocoder=geocoder,
            profile=config.profile,
            place_types=config.place_types,
            max_distance_mi=config.max_distance_mi,
            max_results_per_request=config.max_results_per_request,
            timeout=config.timeout_seconds,
        )
    if isinstance(config, ClaudeSearcherConfig):
        return ClaudeSearcher(
            api_key=credentials.claude_api_key,
            model=config.model,
            max_searches=config.max_searches,
            max_tokens=config.max_tokens,
            prompt_template=config.prompt_template,
        )
    if isinstance(config, PerplexitySearcherConfig):
        return PerplexitySearcher(
            api_key=credentials.perplexity_api_key,
            model=config.model,
            output_format=config.output_format,
            max_tokens=config.max_tokens,
            timeout=config.timeout_seconds,
        )
    msg = f"Unknown searcher config type: {type(config)}"
    raise ValueError(msg)


def create_store(
    config: StoreConfig, credentials: Credentials
) -> tuple[ResourceStore, AsyncEngine | None]:
    """Create a resource store from config.

    Returns:
        Tuple of (store, engine). engine is None for the in-memory store.
    """
    if isinstance(config, MemoryStoreConfig):
        return (MemoryResourceStore(), None)
    if isinstance(config, SQLAlchemyStoreConfig):
        url = config.database_url or credentials.database_url or DEFAULT_DATABASE_URL
        engine = create_engine(url, echo=config.echo)
        return (SQLAlchemyResourceStore(create_session_maker(engine)), engine)
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_pipeline(
    config: PipelineConfig,
    store: ResourceStore,
    credentials: Credentials,
    run_logger: RunLogger | None = None,
) -> ResourcePipeline:
    """Create the aggregation pipeline from config."""
    return ResourcePipeline(
        searchers=[create_searcher(s, credentials) for s in config.searchers],
        normalizer=DedupNormalizer(
            merge_categories=config.merge_categories,
            max_description_length=config.max_description_length,
        ),
        store=store,
        freshness_window=timedelta(hours=config.freshness_hours),
        adapter_timeout=config.adapter_timeout_seconds,
        run_logger=run_logger,
    )


def create_recovery_pipeline(
    config: ReliefConfig,
    store: ResourceStore,
    credentials: Credentials,
    run_logger: RunLogger | None = None,
) -> ResourcePipeline | None:
    """Create the recovery-services pipeline, or None when not configured.

    It shares the main pipeline's store; its searchers report their own
    sources, so the two pipelines never serve each other's cached rows.
    """
    if config.recovery is None:
        return None
    return create_pipeline(config.recovery, store, credentials, run_logger=run_logger)


def create_from_config(
    config: ReliefConfig,
    *,
    credentials: Credentials | None = None,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[ResourcePipeline, RunLogger | None, AsyncEngine | None]:
    """Create a complete pipeline from root config.

    Args:
        config: Root configuration.
        credentials: API keys and database URL (read from the environment
            when omitted).
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (pipeline, run_logger, engine).
        run_logger is None if logging is disabled; engine is None unless the
        store is SQL-backed.
    """
    credentials = credentials or Credentials.from_env()

    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    store, engine = create_store(config.store, credentials)
    pipeline = create_pipeline(config.pipeline, store, credentials, run_logger=run_logger)
    return (pipeline, run_logger, engine)


async def prepare_storage(config: ReliefConfig, engine: AsyncEngine | None) -> None:
    """Create the cache schema when the store is SQL-backed and asks for it."""
    if engine is None:
        return
    if isinstance(config.store, SQLAlchemyStoreConfig) and config.store.create_schema:
        await init_schema(engine)
