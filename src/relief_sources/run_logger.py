"""Run logger for recording per-request aggregation stages to JSON files."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from relief_sources.data import ResourceRecord, Usage


class StageRecord(BaseModel):
    """Record of a single pipeline stage execution."""

    stage: str
    component: str
    input: Any = None
    output: Any = None
    usage: dict[str, Any] | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """Record of one aggregation request."""

    run_id: str
    pipeline_type: str
    postal_code: str
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = []
    cached: bool = False
    errors: list[str] = []
    final_resource_count: int = 0
    total_usage: dict[str, Any] | None = None


def _serialize(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Handles dataclasses, Pydantic models, enums, datetimes, lists, dicts, and
    primitives. For Usage objects, includes computed property summaries.
    """
    if obj is None:
        return None
    if isinstance(obj, Usage):
        return {
            "api_calls": [_serialize(c) for c in obj.api_calls],
            "geocode_requests": obj.geocode_requests,
            "directory_requests": obj.directory_requests,
            "places_requests": obj.places_requests,
            "perplexity_requests": obj.perplexity_requests,
            "input_tokens": obj.input_tokens,
            "output_tokens": obj.output_tokens,
            "web_searches": obj.web_searches,
        }
    if isinstance(obj, ResourceRecord):
        return obj.to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _serialize(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, list | tuple):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    return obj


class RunLogger:
    """Builds run records for aggregation requests and writes one JSON file per run.

    Each call to :meth:`start_run` returns its own record, so concurrent
    requests served by the same pipeline do not interleave. When
    ``enabled=False``, all methods are no-ops.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def start_run(self, pipeline_type: str, postal_code: str) -> RunRecord | None:
        """Create a new run record.

        Args:
            pipeline_type: Type of pipeline (e.g. "aggregate").
            postal_code: The requested ZIP code.

        Returns:
            The record to pass to later calls, or None if logging is disabled.
        """
        if not self._enabled:
            return None

        return RunRecord(
            run_id=str(uuid.uuid4()),
            pipeline_type=pipeline_type,
            postal_code=postal_code,
            started_at=datetime.now(tz=UTC).isoformat(),
        )

    def log_stage(
        self,
        record: RunRecord | None,
        *,
        stage: str,
        component: str,
        input_data: Any,
        output_data: Any,
        usage: Usage | None,
        duration_seconds: float,
    ) -> None:
        """Append a stage record to a run.

        Args:
            record: Run record returned by :meth:`start_run`.
            stage: Stage name (e.g. "cache_lookup", "search").
            component: Component class name.
            input_data: Stage input (will be serialized).
            output_data: Stage output (will be serialized).
            usage: Usage object for this stage (None for non-API stages).
            duration_seconds: Wall-clock time for this stage.
        """
        if not self._enabled or record is None:
            return

        record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=_serialize(input_data),
                output=_serialize(output_data),
                usage=_serialize(usage) if usage is not None else None,
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish_run(
        self,
        record: RunRecord | None,
        resources: list[ResourceRecord],
        usage: Usage | None,
        *,
        cached: bool = False,
        errors: list[str] | None = None,
    ) -> Path | None:
        """Write the run record to a JSON file.

        Args:
            record: Run record returned by :meth:`start_run`.
            resources: Final list of resources returned to the caller.
            usage: Total accumulated usage.
            cached: Whether the response was served from the cache.
            errors: Per-source error messages.

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if not self._enabled or record is None:
            return None

        record.completed_at = datetime.now(tz=UTC).isoformat()
        record.cached = cached
        record.errors = list(errors or [])
        record.final_resource_count = len(resources)
        record.total_usage = _serialize(usage) if usage is not None else None

        self._log_dir.mkdir(parents=True, exist_ok=True)

        # run_2026-02-12T14-30-00_78028_1a2b3c4d.json
        ts = record.started_at.replace(":", "-")
        ts = ts.split(".")[0].split("+")[0]
        filename = f"run_{ts}_{record.postal_code}_{record.run_id[:8]}.json"
        filepath = self._log_dir / filename

        filepath.write_text(record.model_dump_json(indent=2))
        self._last_log_path = filepath
        return filepath
