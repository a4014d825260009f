"""Tests for protocol compliance."""

from datetime import UTC, datetime

from relief_sources.data import RawResult, ResourceSource, Usage
from relief_sources.geocode.google import GoogleGeocoder
from relief_sources.normalize.dedup import DedupNormalizer
from relief_sources.pipeline.aggregate import ResourcePipeline
from relief_sources.search.claude import ClaudeSearcher
from relief_sources.search.directory import DirectorySearcher
from relief_sources.search.perplexity import PerplexitySearcher
from relief_sources.search.places import PlacesSearcher
from relief_sources.store.memory import MemoryResourceStore


def test_searchers_declare_distinct_sources() -> None:
    """Every built-in searcher exposes ``source`` and ``search``."""
    geocoder = GoogleGeocoder(api_key="test")
    searchers = [
        DirectorySearcher(api_key="test"),
        PlacesSearcher(api_key="test", geocoder=geocoder),
        ClaudeSearcher(api_key="test"),
        PerplexitySearcher(api_key="test"),
    ]
    for searcher in searchers:
        assert callable(searcher.search)
    assert [s.source for s in searchers] == [
        ResourceSource.DIRECTORY,
        ResourceSource.MAPS,
        ResourceSource.LLM_SEARCH_A,
        ResourceSource.LLM_SEARCH_B,
    ]


class MockSearcher:
    """A minimal implementation to verify protocol requirements."""

    source = ResourceSource.DIRECTORY

    async def search(self, postal_code: str) -> tuple[list[RawResult], Usage]:
        return (
            [RawResult(name="Mock Shelter", source=self.source, source_id="mock-1")],
            Usage(),
        )


async def test_mock_searcher_plugs_into_pipeline() -> None:
    """Any class with the right attribute and method satisfies the protocol."""
    pipeline = ResourcePipeline(
        searchers=[MockSearcher()],
        normalizer=DedupNormalizer(),
        store=MemoryResourceStore(),
    )
    result = await pipeline.aggregate("78028", now=datetime(2026, 3, 1, tzinfo=UTC))
    assert [r.name for r in result.resources] == ["Mock Shelter"]
