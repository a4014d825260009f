"""Pipeline module for per-ZIP resource aggregation."""

from relief_sources.pipeline.aggregate import (
    DEFAULT_ADAPTER_TIMEOUT,
    DEFAULT_FRESHNESS_WINDOW,
    ResourcePipeline,
)
from relief_sources.pipeline.base import Pipeline

__all__ = [
    "DEFAULT_ADAPTER_TIMEOUT",
    "DEFAULT_FRESHNESS_WINDOW",
    "Pipeline",
    "ResourcePipeline",
]
