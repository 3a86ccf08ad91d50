"""
Pydantic models for Home Assistant long-term statistics.

Covers both directions of the statistics API: metadata and hourly summaries
sent to Home Assistant, and the per-statistic series returned by the history
endpoint. Readings buffered by the relay are modelled separately from the
summaries they are rolled up into.

CHANGELOG:
- 2026-10-19: Accept partial metadata in history entries (STORY-112)
- 2026-10-15: Add EnergyRollup for the energy statistics summary (STORY-108)
- 2026-10-12: Initial creation (STORY-102)

TODO:
- None
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class StatisticMetadata(BaseModel):
    """Descriptor registered with Home Assistant before any data is inserted.

    Attributes:
        statistic_id: Identifier of the series (e.g. ``sensor.x_solar``).
        source: Integration that owns the statistic.
        name: Human readable name shown in the frontend.
        unit_of_measurement: Unit of the values (may be empty).
        has_mean: Whether summaries carry mean/min/max.
        has_sum: Whether summaries carry a cumulative sum.
    """

    model_config = ConfigDict(frozen=True)

    statistic_id: str
    source: str = "voltassistant"
    name: str
    unit_of_measurement: str
    has_mean: bool
    has_sum: bool


class StatisticReading(BaseModel):
    """A single timestamped reading waiting in the relay queue.

    Attributes:
        start: Time the reading was taken. Naive values are treated as UTC.
        mean: Averaged value (contributes to mean/min/max).
        min: Minimum reported by the caller (not used for aggregation).
        max: Maximum reported by the caller (not used for aggregation).
        sum: Cumulative value (contributes to the hourly sum).
        state: Instantaneous state (not used for aggregation).
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    mean: float | None = None
    min: float | None = None
    max: float | None = None
    sum: float | None = None
    state: float | None = None

    @field_validator("start")
    @classmethod
    def _start_in_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class HourlySummary(BaseModel):
    """Aggregated statistics for one statistic over one clock hour.

    Covers the half-open interval ``[start, end)`` where ``end`` is exactly
    one hour after ``start``.
    """

    start: datetime
    end: datetime
    mean: float | None = None
    min: float | None = None
    max: float | None = None
    sum: float | None = None

    def to_payload(self) -> dict:
        """Return the JSON-ready dict sent to Home Assistant."""
        return self.model_dump(mode="json", exclude_none=True)


class StatisticValue(BaseModel):
    """One bucket of a series returned by the history endpoint."""

    start: datetime
    end: datetime | None = None
    mean: float | None = None
    min: float | None = None
    max: float | None = None
    sum: float | None = None
    state: float | None = None
    change: float | None = None


class StatisticEntry(BaseModel):
    """Series for one statistic as returned by the history endpoint.

    ``metadata`` is kept as the raw mapping Home Assistant returns; only the
    series values are parsed.
    """

    metadata: dict[str, Any] | None = None
    statistics: list[StatisticValue] = []


class EnergyRollup(BaseModel):
    """Totals over a period for the fixed energy and financial statistics.

    Attributes:
        solar_production: Solar energy produced (kWh).
        grid_import: Energy imported from the grid (kWh).
        grid_export: Energy exported to the grid (kWh).
        battery_charge: Energy charged into the battery (kWh).
        battery_discharge: Energy discharged from the battery (kWh).
        consumption: Household consumption (kWh).
        self_consumption: Share of solar production used on site (%).
        savings: Money saved (EUR).
    """

    solar_production: float = 0.0
    grid_import: float = 0.0
    grid_export: float = 0.0
    battery_charge: float = 0.0
    battery_discharge: float = 0.0
    consumption: float = 0.0
    self_consumption: float = 0.0
    savings: float = 0.0
