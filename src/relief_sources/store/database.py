import logging
from collections.abc import Collection
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from relief_sources.data import ResourceRecord, ResourceSource
from relief_sources.errors import PersistenceFailure
from relief_sources.store.tables import ResourceTable

logger = logging.getLogger(__name__)

_CONFLICT_KEYS = ["source", "source_id"]
_UPDATABLE_COLUMNS = (
    "name",
    "categories",
    "description",
    "phone",
    "website",
    "email",
    "address",
    "city",
    "state",
    "postal_code",
    "latitude",
    "longitude",
    "distance_mi",
    "hours",
    "last_seen_at",
    "last_verified_at",
    "is_archived",
)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back out.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_row(record: ResourceRecord) -> dict:
    return {
        "source": str(record.source),
        "source_id": record.source_id,
        "name": record.name,
        "categories": list(record.categories),
        "description": record.description,
        "phone": record.phone,
        "website": record.website,
        "email": record.email,
        "address": record.address,
        "city": record.city,
        "state": record.state,
        "postal_code": record.postal_code,
        "latitude": record.latitude,
        "longitude": record.longitude,
        "distance_mi": record.distance_mi,
        "hours": record.hours,
        "last_seen_at": record.last_seen_at,
        "last_verified_at": record.last_verified_at,
        "is_archived": False,
    }


def _to_record(row: ResourceTable) -> ResourceRecord:
    categories = row.categories if isinstance(row.categories, list) else []
    return ResourceRecord(
        name=row.name,
        source=ResourceSource(row.source),
        source_id=row.source_id,
        postal_code=row.postal_code,
        last_seen_at=_as_utc(row.last_seen_at),
        categories=tuple(categories),
        description=row.description,
        phone=row.phone,
        website=row.website,
        email=row.email,
        address=row.address,
        city=row.city,
        state=row.state,
        latitude=row.latitude,
        longitude=row.longitude,
        distance_mi=row.distance_mi,
        hours=row.hours,
        last_verified_at=_as_utc(row.last_verified_at),
    )


class SQLAlchemyResourceStore:
    """Resource cache backed by a SQL database (PostgreSQL or SQLite).

    Rows are unique on (source, source_id); writes are upserts so repeated
    aggregation of the same ZIP refreshes rows instead of duplicating them.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        """Initialize the store.

        Args:
            session_maker: Factory for async sessions bound to the target engine.
        """
        self._session_maker = session_maker

    async def find_fresh(
        self,
        postal_code: str,
        *,
        since: datetime,
        sources: Collection[ResourceSource] | None = None,
    ) -> list[ResourceRecord]:
        stmt = (
            select(ResourceTable)
            .where(
                ResourceTable.postal_code == postal_code,
                ResourceTable.is_archived.is_(False),
                ResourceTable.last_seen_at >= since,
            )
            .order_by(ResourceTable.last_seen_at.desc(), ResourceTable.id)
        )
        if sources is not None:
            stmt = stmt.where(ResourceTable.source.in_([str(s) for s in sources]))
        try:
            async with self._session_maker() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Cache read failed for {postal_code}: {e}") from e

        return [_to_record(row) for row in rows]

    async def upsert(self, records: list[ResourceRecord]) -> int:
        if not records:
            return 0

        # A single ON CONFLICT statement may not touch the same key twice.
        rows_by_key = {(str(r.source), r.source_id): _to_row(r) for r in records}
        rows = list(rows_by_key.values())

        try:
            async with self._session_maker() as session:
                insert = self._insert_for(session.bind.dialect.name)
                stmt = insert(ResourceTable).values(rows)
                set_ = {col: stmt.excluded[col] for col in _UPDATABLE_COLUMNS}
                set_["updated_at"] = func.now()
                stmt = stmt.on_conflict_do_update(index_elements=_CONFLICT_KEYS, set_=set_)
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Cache write failed: {e}") from e

        logger.info(f"Upserted {len(rows)} resources")
        return len(rows)

    @staticmethod
    def _insert_for(dialect_name: str):
        if dialect_name == "postgresql":
            return postgresql.insert
        if dialect_name == "sqlite":
            return sqlite.insert
        raise PersistenceFailure(f"Unsupported database dialect: {dialect_name}")
