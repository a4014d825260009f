"""Deterministic normalization and deduplication of adapter results."""

import logging
import math
from dataclasses import replace
from datetime import UTC, datetime

from relief_sources.data import RawResult, ResourceRecord
from relief_sources.geo import is_valid_coordinate, round_half_up
from relief_sources.normalize.ids import stable_source_id

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 280


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def _truncate(text: str | None, limit: int) -> str | None:
    if text is None or len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def dedup_key(name: str, latitude: float | None, longitude: float | None) -> tuple[str, int, int]:
    """Case-insensitive name plus coordinates rounded to whole degrees.

    Missing coordinates count as 0, so two unlocated records with the same
    name collapse as well.
    """
    return (
        name.lower(),
        round_half_up(latitude or 0.0),
        round_half_up(longitude or 0.0),
    )


class DedupNormalizer:
    """Normalize raw results into ``ResourceRecord`` and merge duplicates.

    Records colliding on ``dedup_key``, or sharing (source, source_id) with an
    earlier record, keep the first-seen record's identity and fields; later
    duplicates only contribute their category tags when ``merge_categories``
    is set. The output never holds two records with the same
    (source, source_id).

    Args:
        merge_categories: Union category tags of merged duplicates.
        max_description_length: Descriptions are truncated to this length.
    """

    def __init__(
        self,
        *,
        merge_categories: bool = True,
        max_description_length: int = MAX_DESCRIPTION_LENGTH,
    ) -> None:
        self._merge_categories = merge_categories
        self._max_description = max_description_length

    def normalize(
        self,
        raw_results: list[RawResult],
        *,
        postal_code: str,
        now: datetime | None = None,
    ) -> list[ResourceRecord]:
        seen_at = now or datetime.now(tz=UTC)
        merged: dict[tuple[str, int, int], ResourceRecord] = {}
        key_by_identity: dict[tuple[str, str], tuple[str, int, int]] = {}
        dropped = 0

        for raw in raw_results:
            record = self._to_record(raw, postal_code=postal_code, seen_at=seen_at)
            if record is None:
                dropped += 1
                continue
            identity = (str(record.source), record.source_id)
            key = key_by_identity.get(identity) or dedup_key(
                record.name, record.latitude, record.longitude
            )
            existing = merged.get(key)
            if existing is None:
                merged[key] = record
                key_by_identity[identity] = key
            elif self._merge_categories:
                extra = tuple(c for c in record.categories if c not in existing.categories)
                if extra:
                    merged[key] = replace(existing, categories=existing.categories + extra)

        records = list(merged.values())
        logger.info(
            f"Normalized {len(raw_results)} raw results into {len(records)} records "
            f"({dropped} dropped)"
        )
        return records

    def _to_record(
        self,
        raw: RawResult,
        *,
        postal_code: str,
        seen_at: datetime,
    ) -> ResourceRecord | None:
        name = _clean(raw.name)
        if not name:
            return None

        latitude, longitude = raw.latitude, raw.longitude
        if not is_valid_coordinate(latitude, longitude):
            latitude = longitude = None

        distance = raw.distance_mi
        if distance is not None and (not math.isfinite(distance) or distance < 0):
            distance = None

        categories: list[str] = []
        for category in raw.categories:
            tag = _clean(category)
            if tag and tag not in categories:
                categories.append(tag)

        return ResourceRecord(
            name=name,
            source=raw.source,
            source_id=_clean(raw.source_id) or stable_source_id(postal_code, name),
            postal_code=postal_code,
            last_seen_at=seen_at,
            categories=tuple(categories),
            description=_truncate(_clean(raw.description), self._max_description),
            phone=_clean(raw.phone),
            website=_clean(raw.website),
            email=_clean(raw.email),
            address=_clean(raw.address),
            city=_clean(raw.city),
            state=_clean(raw.state),
            latitude=latitude,
            longitude=longitude,
            distance_mi=round(distance, 2) if distance is not None else None,
            hours=_clean(raw.hours),
            last_verified_at=raw.last_verified_at,
        )

