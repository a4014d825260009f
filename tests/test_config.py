"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from relief_sources.config import (
    ClaudeSearcherConfig,
    Credentials,
    DirectorySearcherConfig,
    MemoryStoreConfig,
    PerplexitySearcherConfig,
    PipelineConfig,
    PlacesSearcherConfig,
    ReliefConfig,
    SQLAlchemyStoreConfig,
    create_from_config,
    create_pipeline,
    create_recovery_pipeline,
    create_searcher,
    create_store,
    get_default_config_path,
    load_config,
    prepare_storage,
)
from relief_sources.data import ResourceSource
from relief_sources.pipeline.aggregate import ResourcePipeline
from relief_sources.run_logger import RunLogger
from relief_sources.search.claude import ClaudeSearcher
from relief_sources.search.directory import DirectorySearcher
from relief_sources.search.perplexity import PerplexitySearcher
from relief_sources.search.places import PlacesSearcher
from relief_sources.store.database import SQLAlchemyResourceStore
from relief_sources.store.memory import MemoryResourceStore

CREDENTIALS = Credentials(
    maps_api_key="maps-key",
    directory_api_key="directory-key",
    claude_api_key="claude-key",
    perplexity_api_key="pplx-key",
)


def _load(yaml_content: str) -> ReliefConfig:
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        f.flush()
        return load_config(Path(f.name))


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_directory_searcher_config_defaults(self) -> None:
        config = DirectorySearcherConfig()
        assert config.type == "directory"
        assert config.radius_mi == 30.0
        assert config.max_results == 25
        assert config.taxonomy_codes

    def test_places_searcher_config_defaults(self) -> None:
        config = PlacesSearcherConfig()
        assert config.type == "places"
        assert config.max_distance_mi == 30.0
        assert config.max_results_per_request == 20
        assert config.profile == "emergency"
        assert config.place_types is None

    def test_places_profile_is_validated(self) -> None:
        assert PlacesSearcherConfig(profile="recovery").profile == "recovery"
        with pytest.raises(ValidationError):
            PlacesSearcherConfig(profile="retail")  # type: ignore[arg-type]

    def test_places_max_results_is_capped(self) -> None:
        with pytest.raises(ValidationError):
            PlacesSearcherConfig(max_results_per_request=50)

    def test_claude_searcher_config_defaults(self) -> None:
        config = ClaudeSearcherConfig()
        assert config.type == "claude"
        assert config.model == "claude-haiku-4-5-20251001"
        assert config.max_searches == 0
        assert config.prompt_template is None

    def test_perplexity_searcher_config_defaults(self) -> None:
        config = PerplexitySearcherConfig()
        assert config.type == "perplexity"
        assert config.model == "sonar"
        assert config.output_format == "prose"

    def test_perplexity_output_format_is_validated(self) -> None:
        with pytest.raises(ValidationError):
            PerplexitySearcherConfig(output_format="xml")  # type: ignore[arg-type]

    def test_pipeline_config_defaults(self) -> None:
        config = PipelineConfig()
        assert config.searchers == []
        assert config.freshness_hours == 24.0
        assert config.adapter_timeout_seconds == 30.0
        assert config.merge_categories is True

    def test_relief_config_defaults(self) -> None:
        config = ReliefConfig()
        assert isinstance(config.store, MemoryStoreConfig)
        assert config.logging.enabled is False
        assert config.logging.log_dir == "logs"
        assert config.recovery is None

    def test_configs_are_frozen(self) -> None:
        config = PipelineConfig()
        with pytest.raises(ValidationError):
            config.freshness_hours = 1  # type: ignore[misc]


class TestConfigLoader:
    """Tests for YAML config loading."""

    def test_load_config_searchers_by_type(self) -> None:
        config = _load(
            """
pipeline:
  freshness_hours: 6
  searchers:
    - type: directory
      radius_mi: 10
    - type: places
      place_types: [hospital]
    - type: claude
      max_searches: 2
    - type: perplexity
      output_format: json
store:
  type: sqlalchemy
  database_url: "sqlite+aiosqlite:///:memory:"
"""
        )

        searchers = config.pipeline.searchers
        assert config.pipeline.freshness_hours == 6
        assert isinstance(searchers[0], DirectorySearcherConfig)
        assert searchers[0].radius_mi == 10
        assert isinstance(searchers[1], PlacesSearcherConfig)
        assert searchers[1].place_types == ["hospital"]
        assert isinstance(searchers[2], ClaudeSearcherConfig)
        assert searchers[2].max_searches == 2
        assert isinstance(searchers[3], PerplexitySearcherConfig)
        assert searchers[3].output_format == "json"
        assert isinstance(config.store, SQLAlchemyStoreConfig)
        assert config.store.database_url == "sqlite+aiosqlite:///:memory:"

    def test_load_recovery_section(self) -> None:
        config = _load(
            """
recovery:
  freshness_hours: 12
  searchers:
    - type: places
      profile: recovery
      place_types: [plumber, electrician]
"""
        )

        assert config.pipeline == PipelineConfig()
        assert config.recovery is not None
        assert config.recovery.freshness_hours == 12
        places = config.recovery.searchers[0]
        assert isinstance(places, PlacesSearcherConfig)
        assert places.profile == "recovery"
        assert places.place_types == ["plumber", "electrician"]

    def test_unknown_searcher_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _load("pipeline:\n  searchers:\n    - type: gnews\n")

    def test_empty_file_gives_defaults(self) -> None:
        config = _load("")
        assert config == ReliefConfig()

    def test_get_default_config_path(self) -> None:
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert "configs" in str(path)
        assert path.exists()

    def test_load_default_config(self) -> None:
        config = load_config(get_default_config_path())
        assert isinstance(config, ReliefConfig)
        assert [s.type for s in config.pipeline.searchers] == [
            "directory",
            "places",
            "claude",
            "perplexity",
        ]
        assert config.recovery is not None
        recovery = config.recovery.searchers
        assert len(recovery) == 1
        assert isinstance(recovery[0], PlacesSearcherConfig)
        assert recovery[0].profile == "recovery"
        assert recovery[0].max_distance_mi == 25
        assert isinstance(config.store, SQLAlchemyStoreConfig)


class TestCredentials:
    """Tests for reading credentials from the environment."""

    def test_from_env(self) -> None:
        credentials = Credentials.from_env(
            {
                "MAPS_API_KEY": "maps",
                "DIRECTORY_API_KEY": "dir",
                "CLAUDE_API_KEY": "claude",
                "PERPLEXITY_API_KEY": "pplx",
                "DATABASE_URL": "postgresql+asyncpg://u:p@db/relief",
            }
        )
        assert credentials.maps_api_key == "maps"
        assert credentials.directory_api_key == "dir"
        assert credentials.claude_api_key == "claude"
        assert credentials.perplexity_api_key == "pplx"
        assert credentials.database_url == "postgresql+asyncpg://u:p@db/relief"

    def test_anthropic_key_fallback(self) -> None:
        credentials = Credentials.from_env({"ANTHROPIC_API_KEY": "sk-ant"})
        assert credentials.claude_api_key == "sk-ant"

    def test_blank_values_are_unset(self) -> None:
        credentials = Credentials.from_env({"MAPS_API_KEY": "  ", "CLAUDE_API_KEY": ""})
        assert credentials.maps_api_key is None
        assert credentials.claude_api_key is None

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERPLEXITY_API_KEY", "from-env")
        assert Credentials.from_env().perplexity_api_key == "from-env"


class TestFactoryFunctions:
    """Tests for component factory functions."""

    def test_create_searcher_directory(self) -> None:
        searcher = create_searcher(DirectorySearcherConfig(radius_mi=5), CREDENTIALS)
        assert isinstance(searcher, DirectorySearcher)

    def test_create_searcher_places(self) -> None:
        searcher = create_searcher(PlacesSearcherConfig(), CREDENTIALS)
        assert isinstance(searcher, PlacesSearcher)

    def test_create_searcher_claude(self) -> None:
        searcher = create_searcher(ClaudeSearcherConfig(model="test-model"), CREDENTIALS)
        assert isinstance(searcher, ClaudeSearcher)

    def test_create_searcher_perplexity(self) -> None:
        searcher = create_searcher(PerplexitySearcherConfig(), CREDENTIALS)
        assert isinstance(searcher, PerplexitySearcher)

    def test_create_searcher_without_keys(self) -> None:
        searcher = create_searcher(ClaudeSearcherConfig(), Credentials())
        assert isinstance(searcher, ClaudeSearcher)

    def test_create_searcher_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown searcher config type"):
            create_searcher(MemoryStoreConfig(), CREDENTIALS)  # type: ignore[arg-type]

    def test_create_store_memory(self) -> None:
        store, engine = create_store(MemoryStoreConfig(), CREDENTIALS)
        assert isinstance(store, MemoryResourceStore)
        assert engine is None

    async def test_create_store_sqlalchemy(self) -> None:
        config = SQLAlchemyStoreConfig(database_url="sqlite+aiosqlite:///:memory:")
        store, engine = create_store(config, CREDENTIALS)
        try:
            assert isinstance(store, SQLAlchemyResourceStore)
            assert isinstance(engine, AsyncEngine)
        finally:
            assert engine is not None
            await engine.dispose()

    async def test_create_store_uses_database_url_credential(self) -> None:
        credentials = Credentials(database_url="sqlite+aiosqlite:///:memory:")
        _, engine = create_store(SQLAlchemyStoreConfig(), credentials)
        assert engine is not None
        try:
            assert engine.url.database == ":memory:"
        finally:
            await engine.dispose()

    def test_create_pipeline(self) -> None:
        config = PipelineConfig(
            searchers=[DirectorySearcherConfig(), PerplexitySearcherConfig()],
            adapter_timeout_seconds=5,
        )
        pipeline = create_pipeline(config, MemoryResourceStore(), CREDENTIALS)
        assert isinstance(pipeline, ResourcePipeline)
        assert [type(s) for s in pipeline.searchers] == [DirectorySearcher, PerplexitySearcher]

    def test_create_from_config(self) -> None:
        pipeline, run_logger, engine = create_from_config(ReliefConfig(), credentials=CREDENTIALS)
        assert isinstance(pipeline, ResourcePipeline)
        assert run_logger is None
        assert engine is None

    def test_create_from_config_log_override(self, tmp_path: Path) -> None:
        _, run_logger, _ = create_from_config(
            ReliefConfig(),
            credentials=CREDENTIALS,
            log_override=True,
            log_dir_override=str(tmp_path),
        )
        assert isinstance(run_logger, RunLogger)
        assert run_logger.enabled

    async def test_prepare_storage_creates_schema(self) -> None:
        config = ReliefConfig(
            store=SQLAlchemyStoreConfig(database_url="sqlite+aiosqlite:///:memory:")
        )
        pipeline, _, engine = create_from_config(config, credentials=CREDENTIALS)
        try:
            await prepare_storage(config, engine)
            result = await pipeline.aggregate("78028")
            assert result.resources == []
        finally:
            assert engine is not None
            await engine.dispose()

    async def test_prepare_storage_without_engine(self) -> None:
        await prepare_storage(ReliefConfig(), None)

    def test_create_searcher_places_recovery_profile(self) -> None:
        searcher = create_searcher(PlacesSearcherConfig(profile="recovery"), CREDENTIALS)
        assert isinstance(searcher, PlacesSearcher)
        assert searcher.source == ResourceSource.MAPS_RECOVERY

    def test_create_recovery_pipeline(self) -> None:
        config = ReliefConfig(
            recovery=PipelineConfig(searchers=[PlacesSearcherConfig(profile="recovery")])
        )
        store = MemoryResourceStore()
        pipeline = create_recovery_pipeline(config, store, CREDENTIALS)

        assert isinstance(pipeline, ResourcePipeline)
        assert pipeline.store is store
        assert [s.source for s in pipeline.searchers] == [ResourceSource.MAPS_RECOVERY]

    def test_create_recovery_pipeline_not_configured(self) -> None:
        assert create_recovery_pipeline(ReliefConfig(), MemoryResourceStore(), CREDENTIALS) is None
