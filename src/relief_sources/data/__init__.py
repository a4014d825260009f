"""Data models for relief resource aggregation."""

from relief_sources.data.models import (
    AggregationResult,
    APICallUsage,
    Coordinates,
    RawResult,
    ResourceCategory,
    ResourceRecord,
    ResourceSource,
    Usage,
)

__all__ = [
    "APICallUsage",
    "AggregationResult",
    "Coordinates",
    "RawResult",
    "ResourceCategory",
    "ResourceRecord",
    "ResourceSource",
    "Usage",
]
