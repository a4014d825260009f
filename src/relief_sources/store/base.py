from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from relief_sources.data import ResourceRecord, ResourceSource


class ResourceStore(Protocol):
    """Interface for the per-ZIP resource cache."""

    async def find_fresh(
        self,
        postal_code: str,
        *,
        since: datetime,
        sources: Collection[ResourceSource] | None = None,
    ) -> list[ResourceRecord]:
        """Return non-archived records for a ZIP seen at or after ``since``.

        Args:
            postal_code: ZIP the records were gathered for.
            since: Oldest acceptable ``last_seen_at``.
            sources: Only return records from these sources (all when None).

        Returns:
            Matching records, newest first.
        """
        ...

    async def upsert(self, records: list[ResourceRecord]) -> int:
        """Insert or update records keyed by (source, source_id).

        Returns:
            Number of rows written.

        Raises:
            PersistenceFailure: If the write fails.
        """
        ...
