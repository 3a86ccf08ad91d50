"""
Relay for Home Assistant long-term statistics.

Buffers timestamped readings per statistic in memory, and on a periodic
timer rolls them up into hourly summaries and POSTs them to the Home
Assistant statistics API with Bearer token authentication. Also registers
statistic metadata and queries the history endpoint.

Delivery is at-least-once: when a submission fails (non-2xx status, timeout,
connection error,
unencodable payload) the original readings are put back into the queue and are
aggregated again, together with any newer readings, on the next cycle. The
queue lives in memory only and is lost on process exit.

No public operation raises on network or HTTP failures; every failure is
logged and the caller gets a falsy or empty result instead.

Operations:
- register_statistic(metadata) / register_all_statistics(): upsert metadata.
- record_statistic(statistic_id, reading): enqueue a reading.
- record_energy/record_financial/record_optimization(...): timestamped wrappers.
- flush(): drain, aggregate and submit all pending readings.
- get_statistics(...): query the history endpoint.
- get_energy_statistics(period): totals and self-consumption for a period.
- start() / stop(): periodic flush lifecycle, with a final flush on stop.

CHANGELOG:
- 2026-10-19: Re-queue readings whose payload fails to encode (STORY-111)
- 2026-10-16: Update HealthWriter after each flush (STORY-109)
- 2026-10-15: Add history query and energy rollup (STORY-108)
- 2026-10-14: Re-queue raw readings on failed submission (STORY-106)
- 2026-10-12: Initial creation (STORY-105)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

import httpx
from pydantic import TypeAdapter, ValidationError

from relay.src.aggregation import aggregate_by_hour
from relay.src.catalog import STATISTICS, statistic_id
from relay.src.config import RelaySettings
from relay.src.models import (
    EnergyRollup,
    StatisticEntry,
    StatisticMetadata,
    StatisticReading,
)

if TYPE_CHECKING:
    from relay.src.health import HealthWriter

logger = logging.getLogger(__name__)

Period = Literal["hour", "day", "week", "month"]
RollupPeriod = Literal["day", "week", "month"]

_ENTRIES_ADAPTER = TypeAdapter(dict[str, StatisticEntry])

_ROLLUP_LOOKBACK: dict[str, timedelta | None] = {
    "day": None,  # since midnight UTC
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


def self_consumption_ratio(solar_production: float, grid_export: float) -> float:
    """Return the share of solar production consumed on site, in percent.

    Defined as zero when nothing was produced.
    """
    if solar_production <= 0:
        return 0.0
    return (solar_production - grid_export) / solar_production * 100


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class StatisticsRelay:
    """Buffers readings and relays hourly summaries to Home Assistant.

    ``base_url`` and ``token`` fall back to :class:`RelaySettings` (the
    HA_BASE_URL / HA_TOKEN / SUPERVISOR_TOKEN environment) when omitted.

    Args:
        base_url: Base URL of the Home Assistant REST API.
        token: Bearer token for the Home Assistant API.
        flush_interval_s: Seconds between periodic flushes.
        request_timeout_s: Timeout for each HTTP request.
        health: HealthWriter rewritten after every non-empty flush, or None.

    Usage::

        relay = StatisticsRelay(base_url="http://ha.local:8123", token="tok")
        await relay.register_all_statistics()
        relay.start()
        relay.record_energy(solar_production=0.4, grid_export=0.1)
        ...
        await relay.stop()
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        flush_interval_s: float = 60.0,
        request_timeout_s: float = 10.0,
        health: HealthWriter | None = None,
    ) -> None:
        if base_url is None or token is None:
            settings = RelaySettings()
            base_url = settings.ha_base_url if base_url is None else base_url
            token = settings.ha_token if token is None else token
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._flush_interval_s = flush_interval_s
        self._request_timeout_s = request_timeout_s
        self._health = health
        self._queue: dict[str, list[StatisticReading]] = {}
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    @classmethod
    def from_settings(
        cls,
        settings: RelaySettings,
        health: HealthWriter | None = None,
    ) -> StatisticsRelay:
        """Build a relay from loaded settings."""
        return cls(
            base_url=settings.ha_base_url,
            token=settings.ha_token,
            flush_interval_s=settings.flush_interval_s,
            request_timeout_s=settings.request_timeout_s,
            health=health,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        """True while the periodic flush task is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the periodic flush task on the running event loop.

        Calling start() on a running relay is a no-op.
        """
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._flush_loop(self._stop_event))
        logger.info(
            "Statistics relay started (flush_interval=%ss)", self._flush_interval_s
        )

    async def stop(self) -> None:
        """Stop the periodic flush task, then flush whatever is still queued."""
        if self._task is not None:
            assert self._stop_event is not None
            self._stop_event.set()
            await self._task
            self._task = None
            self._stop_event = None

        logger.info("Attempting final statistics flush")
        await self.flush()
        logger.info("Statistics relay stopped")

    async def _flush_loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=self._flush_interval_s)
            if stop_event.is_set():
                break
            try:
                await self.flush()
            except Exception:
                logger.error("Flush cycle error", exc_info=True)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register_statistic(self, metadata: StatisticMetadata) -> bool:
        """Upsert one statistic's metadata in Home Assistant.

        Returns:
            ``True`` on a 2xx response, ``False`` on any failure. Failures
            are logged and not retried.
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self._base_url}/api/statistics/meta",
                    json=metadata.model_dump(mode="json"),
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "Registration failed for %s (network error): %s",
                metadata.statistic_id,
                exc,
            )
            return False

        if not _is_success(response.status_code):
            logger.warning(
                "Registration failed for %s (HTTP %d)",
                metadata.statistic_id,
                response.status_code,
            )
            return False

        logger.info("Registered statistic %s", metadata.statistic_id)
        return True

    async def register_all_statistics(
        self,
        statistics: Iterable[StatisticMetadata] | None = None,
    ) -> int:
        """Register each statistic in turn (the full catalog by default).

        Returns:
            Number of statistics registered successfully.
        """
        if statistics is None:
            statistics = STATISTICS.values()
        registered = 0
        for metadata in statistics:
            if await self.register_statistic(metadata):
                registered += 1
        return registered

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @property
    def pending(self) -> dict[str, list[StatisticReading]]:
        """Snapshot of the pending queue (statistic_id -> readings)."""
        return {key: list(values) for key, values in self._queue.items()}

    @property
    def pending_count(self) -> int:
        """Total number of readings waiting to be flushed."""
        return sum(len(values) for values in self._queue.values())

    def record_statistic(self, statistic_id: str, reading: StatisticReading) -> None:
        """Append a reading to the statistic's pending queue.

        Never blocks and never fails; the identifier is not validated.
        """
        self._queue.setdefault(statistic_id, []).append(reading)

    def _record_now(
        self,
        key: str,
        *,
        start: datetime,
        mean: float | None = None,
        sum: float | None = None,
    ) -> None:
        self.record_statistic(
            statistic_id(key),
            StatisticReading(start=start, mean=mean, sum=sum),
        )

    def record_energy(
        self,
        *,
        solar_production: float | None = None,
        grid_import: float | None = None,
        grid_export: float | None = None,
        battery_charge: float | None = None,
        battery_discharge: float | None = None,
        consumption: float | None = None,
    ) -> None:
        """Record energy amounts (kWh) as sum readings timestamped now.

        Arguments left as None are not recorded.
        """
        now = datetime.now(tz=UTC)
        values = {
            "solar_production": solar_production,
            "grid_import": grid_import,
            "grid_export": grid_export,
            "battery_charge": battery_charge,
            "battery_discharge": battery_discharge,
            "consumption": consumption,
        }
        for key, value in values.items():
            if value is not None:
                self._record_now(key, start=now, sum=value)

    def record_financial(
        self,
        *,
        savings: float | None = None,
        cost: float | None = None,
    ) -> None:
        """Record savings and electricity cost (EUR) as sum readings timestamped now."""
        now = datetime.now(tz=UTC)
        if savings is not None:
            self._record_now("savings", start=now, sum=savings)
        if cost is not None:
            self._record_now("electricity_cost", start=now, sum=cost)

    def record_optimization(
        self,
        *,
        self_consumption_ratio: float | None = None,
        decisions_count: float | None = None,
    ) -> None:
        """Record optimizer metrics timestamped now.

        The self-consumption ratio is averaged per hour; decision counts
        are summed.
        """
        now = datetime.now(tz=UTC)
        if self_consumption_ratio is not None:
            self._record_now(
                "self_consumption_ratio", start=now, mean=self_consumption_ratio
            )
        if decisions_count is not None:
            self._record_now("optimization_decisions", start=now, sum=decisions_count)

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    async def flush(self) -> int:
        """Drain the queue and submit hourly summaries per statistic.

        The queue is swapped out before the first request is issued, so
        readings recorded while the flush is in flight land in the fresh
        queue. Statistics whose submission fails get their original
        readings re-queued.

        Returns:
            Number of statistics submitted successfully.
        """
        if not self._queue:
            logger.debug("Statistics queue empty, skipping flush.")
            return 0

        drained = self._queue
        self._queue = {}

        flushed = 0
        for stat_id, readings in drained.items():
            if await self._insert_statistics(stat_id, readings):
                flushed += 1

        if self._health is not None:
            try:
                self._health.set_pending_count(self.pending_count)
                if flushed == len(drained):
                    self._health.record_flush()
            except OSError:
                logger.warning("Failed to write health file", exc_info=True)

        return flushed

    async def _insert_statistics(
        self,
        stat_id: str,
        readings: list[StatisticReading],
    ) -> bool:
        summaries = aggregate_by_hour(readings)
        payload = {
            "statistic_id": stat_id,
            "statistics": [summary.to_payload() for summary in summaries],
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self._base_url}/api/statistics",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "Flush failed for %s (network error): %s, re-queued %d readings",
                stat_id,
                exc,
                len(readings),
            )
            self._requeue(stat_id, readings)
            return False
        except ValueError as exc:
            # Raised by httpx while encoding a body it cannot serialize.
            logger.warning(
                "Flush failed for %s (unencodable payload): %s, re-queued %d readings",
                stat_id,
                exc,
                len(readings),
            )
            self._requeue(stat_id, readings)
            return False

        if not _is_success(response.status_code):
            logger.warning(
                "Flush failed for %s (HTTP %d), re-queued %d readings",
                stat_id,
                response.status_code,
                len(readings),
            )
            self._requeue(stat_id, readings)
            return False

        logger.info("Flushed %d hourly entries for %s", len(summaries), stat_id)
        return True

    def _requeue(self, stat_id: str, readings: list[StatisticReading]) -> None:
        for reading in readings:
            self.record_statistic(stat_id, reading)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def get_statistics(
        self,
        statistic_ids: list[str],
        start_time: datetime,
        end_time: datetime | None = None,
        period: Period | None = None,
    ) -> dict[str, StatisticEntry]:
        """Fetch long-term statistics from the history endpoint.

        Args:
            statistic_ids: Statistics to query.
            start_time: Start of the window.
            end_time: End of the window, or None for "until now".
            period: Bucketing period, or None for the server default.

        Returns:
            statistic_id -> StatisticEntry. Empty dict on any failure.
        """
        params = {
            "statistic_ids": ",".join(statistic_ids),
            "start_time": start_time.isoformat(),
        }
        if end_time is not None:
            params["end_time"] = end_time.isoformat()
        if period is not None:
            params["period"] = period

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self._base_url}/api/history/statistics",
                    params=params,
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.warning("Statistics query failed (network error): %s", exc)
            return {}

        if not _is_success(response.status_code):
            logger.warning("Statistics query failed (HTTP %d)", response.status_code)
            return {}

        try:
            return _ENTRIES_ADAPTER.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Statistics query returned a malformed body: %s", exc)
            return {}

    async def get_energy_statistics(
        self,
        period: RollupPeriod = "day",
        *,
        now: datetime | None = None,
    ) -> EnergyRollup:
        """Sum the energy and financial statistics over a relative period.

        ``day`` covers today since midnight UTC in hourly buckets, ``week``
        the last 7 days and ``month`` the last 30 days. A failed query
        yields an all-zero rollup.

        Raises:
            ValueError: If *period* is not day, week or month.
        """
        if period not in _ROLLUP_LOOKBACK:
            raise ValueError(
                f"Unknown rollup period '{period}' (expected day, week or month)"
            )

        if now is None:
            now = datetime.now(tz=UTC)
        lookback = _ROLLUP_LOOKBACK[period]
        if lookback is None:
            start_time = now.replace(hour=0, minute=0, second=0, microsecond=0)
        else:
            start_time = now - lookback

        stats = await self.get_statistics(
            [meta.statistic_id for meta in STATISTICS.values()],
            start_time,
            end_time=now,
            period="hour" if period == "day" else period,
        )

        def total(key: str) -> float:
            entry = stats.get(statistic_id(key))
            if entry is None:
                return 0.0
            return sum(value.sum or 0.0 for value in entry.statistics)

        solar_production = total("solar_production")
        grid_export = total("grid_export")
        return EnergyRollup(
            solar_production=solar_production,
            grid_import=total("grid_import"),
            grid_export=grid_export,
            battery_charge=total("battery_charge"),
            battery_discharge=total("battery_discharge"),
            consumption=total("consumption"),
            self_consumption=self_consumption_ratio(solar_production, grid_export),
            savings=total("savings"),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._request_timeout_s)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}
