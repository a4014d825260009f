"""Pipeline protocol for per-ZIP resource aggregation."""

from typing import Protocol

from relief_sources.data import AggregationResult


class Pipeline(Protocol):
    """Interface for end-to-end resource aggregation."""

    async def aggregate(self, postal_code: str) -> AggregationResult:
        """Return disaster-relief resources for a ZIP code.

        Args:
            postal_code: A US ZIP code (5-digit or ZIP+4).

        Returns:
            Aggregated resources with cache provenance and per-source errors.

        Raises:
            InvalidInput: If the ZIP code is malformed.
        """
        ...
