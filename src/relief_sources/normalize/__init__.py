"""Normalization, deduplication and LLM answer parsing."""

from relief_sources.normalize.base import ResourceNormalizer
from relief_sources.normalize.dedup import DedupNormalizer, dedup_key
from relief_sources.normalize.ids import stable_source_id
from relief_sources.normalize.llm import parse_json_resources, parse_llm_content
from relief_sources.normalize.prose import parse_resource_text

__all__ = [
    "DedupNormalizer",
    "ResourceNormalizer",
    "dedup_key",
    "parse_json_resources",
    "parse_llm_content",
    "parse_resource_text",
    "stable_source_id",
]
