"""Cache-first, fan-out aggregation pipeline."""

import asyncio
import logging
import time
from datetime import UTC, datetime, timedelta

from relief_sources.data import AggregationResult, RawResult, ResourceRecord, Usage
from relief_sources.errors import ReliefSourcesError
from relief_sources.normalize.base import ResourceNormalizer
from relief_sources.postal import validate_postal_code
from relief_sources.run_logger import RunLogger, RunRecord
from relief_sources.search.base import ResourceSearcher
from relief_sources.store.base import ResourceStore

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_WINDOW = timedelta(hours=24)
DEFAULT_ADAPTER_TIMEOUT = 30.0


class ResourcePipeline:
    """Pipeline that serves a ZIP from cache or fans out to every searcher.

    Flow:
    1. Validate the ZIP code (the only fatal error)
    2. Return fresh cached rows from this pipeline's sources if any exist
    3. Run all searchers in parallel, each under its own timeout
    4. Normalize and deduplicate the combined results
    5. Upsert into the store; write failures are logged, not returned

    Args:
        searchers: Source adapters to query on a cache miss.
        normalizer: Maps raw adapter output to deduplicated records.
        store: Resource cache.
        freshness_window: Maximum age of cached rows served without refetching.
        adapter_timeout: Seconds each searcher may run before it is cancelled.
        run_logger: Optional RunLogger for per-request stage logging.
    """

    def __init__(
        self,
        searchers: list[ResourceSearcher],
        normalizer: ResourceNormalizer,
        store: ResourceStore,
        freshness_window: timedelta = DEFAULT_FRESHNESS_WINDOW,
        adapter_timeout: float = DEFAULT_ADAPTER_TIMEOUT,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._searchers = searchers
        self._normalizer = normalizer
        self._store = store
        self._freshness_window = freshness_window
        self._adapter_timeout = adapter_timeout
        self._run_logger = run_logger

    @property
    def searchers(self) -> list[ResourceSearcher]:
        return list(self._searchers)

    @property
    def store(self) -> ResourceStore:
        return self._store

    async def aggregate(
        self, postal_code: str, *, now: datetime | None = None
    ) -> AggregationResult:
        """Aggregate resources for a ZIP code.

        Args:
            postal_code: A US ZIP code (5-digit or ZIP+4); surrounding whitespace
                is ignored.
            now: Reference time for freshness and ``last_seen_at`` (defaults to
                now, UTC).

        Returns:
            AggregationResult with resources, cache provenance, errors and usage.

        Raises:
            InvalidInput: If the ZIP code is malformed. Nothing else escapes.
        """
        postal_code = validate_postal_code(postal_code)
        now = now or datetime.now(UTC)

        run = self._start_run(postal_code)

        # Step 1: Cache lookup
        t0 = time.monotonic()
        cached = await self._lookup_cache(postal_code, since=now - self._freshness_window)
        self._log_stage(
            run,
            stage="cache_lookup",
            component=type(self._store).__name__,
            input_data={"postal_code": postal_code, "since": now - self._freshness_window},
            output_data={"resource_count": len(cached)},
            usage=None,
            duration_seconds=time.monotonic() - t0,
        )

        if cached:
            cached_at = max(r.last_seen_at for r in cached)
            logger.info(f"Cache hit for {postal_code}: {len(cached)} resources")
            result = AggregationResult(resources=cached, cached=True, cached_at=cached_at)
            self._finish_run(run, result)
            return result

        # Step 2: Search with all searchers in parallel
        total_usage = Usage()
        errors: list[str] = []
        raw_results: list[RawResult] = []

        search_tasks = [self._run_searcher(searcher, postal_code) for searcher in self._searchers]
        search_results = await asyncio.gather(*search_tasks)

        for searcher, (results, usage, error, duration) in zip(
            self._searchers, search_results, strict=True
        ):
            if error is not None:
                logger.warning(f"Error during search: {error}")
                errors.append(error)
            else:
                raw_results.extend(results)
                total_usage += usage

            self._log_stage(
                run,
                stage="search",
                component=type(searcher).__name__,
                input_data={"postal_code": postal_code, "source": searcher.source},
                output_data={"result_count": len(results), "error": error},
                usage=usage,
                duration_seconds=duration,
            )

        # Step 3: Normalize and deduplicate
        t0 = time.monotonic()
        records = self._normalizer.normalize(raw_results, postal_code=postal_code, now=now)
        self._log_stage(
            run,
            stage="normalization",
            component=type(self._normalizer).__name__,
            input_data={"result_count": len(raw_results)},
            output_data=records,
            usage=None,
            duration_seconds=time.monotonic() - t0,
        )

        # Step 4: Persist
        t0 = time.monotonic()
        written = await self._persist(records)
        self._log_stage(
            run,
            stage="persistence",
            component=type(self._store).__name__,
            input_data={"resource_count": len(records)},
            output_data={"written": written},
            usage=None,
            duration_seconds=time.monotonic() - t0,
        )

        logger.info(
            f"Aggregated {len(records)} resources for {postal_code} "
            f"({len(raw_results)} raw, {len(errors)} source errors)"
        )
        result = AggregationResult(resources=records, errors=errors, usage=total_usage)
        self._finish_run(run, result)
        return result

    async def _run_searcher(
        self, searcher: ResourceSearcher, postal_code: str
    ) -> tuple[list[RawResult], Usage, str | None, float]:
        """Run one searcher under the adapter timeout.

        Returns:
            Tuple of (results, usage, error message or None, duration).
        """
        t0 = time.monotonic()
        try:
            results, usage = await asyncio.wait_for(
                searcher.search(postal_code), timeout=self._adapter_timeout
            )
        except TimeoutError:
            message = f"timed out after {self._adapter_timeout:g}s"
            return [], Usage(), f"{searcher.source}: {message}", time.monotonic() - t0
        except Exception as e:
            message = str(e) or type(e).__name__
            return [], Usage(), f"{searcher.source}: {message}", time.monotonic() - t0
        return results, usage, None, time.monotonic() - t0

    async def _lookup_cache(self, postal_code: str, *, since: datetime) -> list[ResourceRecord]:
        try:
            return await self._store.find_fresh(
                postal_code, since=since, sources={s.source for s in self._searchers}
            )
        except Exception as e:
            logger.warning(f"Cache lookup failed for {postal_code}, treating as miss. Error: {e}")
            return []

    async def _persist(self, records: list[ResourceRecord]) -> int:
        if not records:
            return 0
        try:
            return await self._store.upsert(records)
        except ReliefSourcesError as e:
            logger.error(f"Failed to persist {len(records)} resources. Error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected store error while persisting resources: {e}")
        return 0

    def _start_run(self, postal_code: str) -> RunRecord | None:
        if not self._run_logger:
            return None
        return self._run_logger.start_run("aggregate", postal_code)

    def _log_stage(self, run: RunRecord | None, **kwargs) -> None:
        if self._run_logger:
            self._run_logger.log_stage(run, **kwargs)

    def _finish_run(self, run: RunRecord | None, result: AggregationResult) -> None:
        if self._run_logger:
            self._run_logger.finish_run(
                run,
                result.resources,
                result.usage,
                cached=result.cached,
                errors=result.errors,
            )
