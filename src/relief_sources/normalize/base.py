from datetime import datetime
from typing import Protocol

from relief_sources.data import RawResult, ResourceRecord


class ResourceNormalizer(Protocol):
    """Interface for mapping adapter output to canonical records."""

    def normalize(
        self,
        raw_results: list[RawResult],
        *,
        postal_code: str,
        now: datetime | None = None,
    ) -> list[ResourceRecord]:
        """Map, validate and deduplicate raw results.

        Args:
            raw_results: Concatenated output of all adapters.
            postal_code: ZIP the results were gathered for.
            now: Timestamp stamped as ``last_seen_at`` (defaults to now, UTC).

        Returns:
            Deduplicated records, in first-seen order.
        """
        ...
