from collections.abc import Collection
from datetime import datetime

from relief_sources.data import ResourceRecord, ResourceSource


class MemoryResourceStore:
    """Process-local store, keyed by (source, source_id).

    Useful for tests and one-off CLI runs; nothing survives the process.
    """

    def __init__(self, records: list[ResourceRecord] | None = None) -> None:
        self._rows: dict[tuple[ResourceSource, str], ResourceRecord] = {}
        for record in records or []:
            self._rows[(record.source, record.source_id)] = record

    def __len__(self) -> int:
        return len(self._rows)

    async def find_fresh(
        self,
        postal_code: str,
        *,
        since: datetime,
        sources: Collection[ResourceSource] | None = None,
    ) -> list[ResourceRecord]:
        rows = [
            r
            for r in self._rows.values()
            if r.postal_code == postal_code
            and r.last_seen_at >= since
            and (sources is None or r.source in sources)
        ]
        return sorted(rows, key=lambda r: r.last_seen_at, reverse=True)

    async def upsert(self, records: list[ResourceRecord]) -> int:
        keys = set()
        for record in records:
            key = (record.source, record.source_id)
            self._rows[key] = record
            keys.add(key)
        return len(keys)
