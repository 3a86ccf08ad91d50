"""
Fixed catalogs of VoltAssistant statistics and sensors.

STATISTICS lists the long-term statistics the relay registers and feeds.
SENSORS lists the entities exposed to Home Assistant that the generated
dashboards reference.

CHANGELOG:
- 2026-10-13: Add sensor catalog for dashboard generation (STORY-104)
- 2026-10-12: Initial creation (STORY-102)

TODO:
- None
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from relay.src.models import StatisticMetadata

STATISTICS_SOURCE = "voltassistant"


def _statistic(
    key: str,
    name: str,
    unit: str,
    *,
    has_mean: bool = False,
    has_sum: bool = True,
) -> StatisticMetadata:
    return StatisticMetadata(
        statistic_id=f"sensor.voltassistant_{key}",
        source=STATISTICS_SOURCE,
        name=f"VoltAssistant {name}",
        unit_of_measurement=unit,
        has_mean=has_mean,
        has_sum=has_sum,
    )


# ---------------------------------------------------------------------------
# Long-term statistics
# ---------------------------------------------------------------------------

STATISTICS: dict[str, StatisticMetadata] = {
    # Energy
    "solar_production": _statistic("solar_production", "Solar Production", "kWh"),
    "grid_import": _statistic("grid_import", "Grid Import", "kWh"),
    "grid_export": _statistic("grid_export", "Grid Export", "kWh"),
    "battery_charge": _statistic("battery_charge", "Battery Charge", "kWh"),
    "battery_discharge": _statistic("battery_discharge", "Battery Discharge", "kWh"),
    "consumption": _statistic("consumption", "Consumption", "kWh"),
    # Financial
    "savings": _statistic("savings", "Savings", "€"),
    "electricity_cost": _statistic("electricity_cost", "Electricity Cost", "€"),
    # Optimization
    "self_consumption_ratio": _statistic(
        "self_consumption_ratio",
        "Self Consumption Ratio",
        "%",
        has_mean=True,
        has_sum=False,
    ),
    "optimization_decisions": _statistic(
        "optimization_decisions", "Optimization Decisions", ""
    ),
}
"""Catalog key -> statistic metadata, in registration order."""


def statistic_id(key: str) -> str:
    """Return the statistic identifier for a catalog key.

    Raises:
        KeyError: If *key* is not in STATISTICS.
    """
    return STATISTICS[key].statistic_id


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------


class SensorConfig(BaseModel):
    """An entity exposed by the add-on.

    Attributes:
        entity_id: Home Assistant entity identifier.
        name: Friendly name.
        state_class: Home Assistant state class.
        device_class: Optional device class (power, energy, monetary, ...).
        unit_of_measurement: Optional unit.
        icon: Optional Material Design icon.
    """

    model_config = ConfigDict(frozen=True)

    entity_id: str
    name: str
    state_class: Literal["measurement", "total", "total_increasing"]
    device_class: str | None = None
    unit_of_measurement: str | None = None
    icon: str | None = None


SENSORS: tuple[SensorConfig, ...] = (
    # Inverter
    SensorConfig(
        entity_id="sensor.voltassistant_battery_soc",
        name="Battery State of Charge",
        state_class="measurement",
        device_class="battery",
        unit_of_measurement="%",
        icon="mdi:battery",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_solar_power",
        name="Solar Power",
        state_class="measurement",
        device_class="power",
        unit_of_measurement="W",
        icon="mdi:solar-power",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_grid_power",
        name="Grid Power",
        state_class="measurement",
        device_class="power",
        unit_of_measurement="W",
        icon="mdi:transmission-tower",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_load_power",
        name="Load Power",
        state_class="measurement",
        device_class="power",
        unit_of_measurement="W",
        icon="mdi:home-lightning-bolt",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_battery_power",
        name="Battery Power",
        state_class="measurement",
        device_class="power",
        unit_of_measurement="W",
        icon="mdi:battery-charging",
    ),
    # Energy (for the HA energy dashboard)
    SensorConfig(
        entity_id="sensor.voltassistant_solar_energy",
        name="Solar Energy",
        state_class="total_increasing",
        device_class="energy",
        unit_of_measurement="kWh",
        icon="mdi:solar-power-variant",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_grid_import_energy",
        name="Grid Import Energy",
        state_class="total_increasing",
        device_class="energy",
        unit_of_measurement="kWh",
        icon="mdi:transmission-tower-import",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_grid_export_energy",
        name="Grid Export Energy",
        state_class="total_increasing",
        device_class="energy",
        unit_of_measurement="kWh",
        icon="mdi:transmission-tower-export",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_battery_charge_energy",
        name="Battery Charge Energy",
        state_class="total_increasing",
        device_class="energy",
        unit_of_measurement="kWh",
        icon="mdi:battery-plus",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_battery_discharge_energy",
        name="Battery Discharge Energy",
        state_class="total_increasing",
        device_class="energy",
        unit_of_measurement="kWh",
        icon="mdi:battery-minus",
    ),
    # Financial
    SensorConfig(
        entity_id="sensor.voltassistant_daily_savings",
        name="Daily Savings",
        state_class="total",
        device_class="monetary",
        unit_of_measurement="€",
        icon="mdi:piggy-bank",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_monthly_savings",
        name="Monthly Savings",
        state_class="total",
        device_class="monetary",
        unit_of_measurement="€",
        icon="mdi:cash-multiple",
    ),
    # PVPC prices
    SensorConfig(
        entity_id="sensor.voltassistant_pvpc_current_price",
        name="Current Electricity Price",
        state_class="measurement",
        device_class="monetary",
        unit_of_measurement="€/kWh",
        icon="mdi:currency-eur",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_pvpc_average_price",
        name="Average Daily Price",
        state_class="measurement",
        device_class="monetary",
        unit_of_measurement="€/kWh",
        icon="mdi:chart-line",
    ),
    # Optimization
    SensorConfig(
        entity_id="sensor.voltassistant_current_action",
        name="Current Action",
        state_class="measurement",
        icon="mdi:robot",
    ),
    SensorConfig(
        entity_id="sensor.voltassistant_self_consumption_ratio",
        name="Self Consumption Ratio",
        state_class="measurement",
        unit_of_measurement="%",
        icon="mdi:percent",
    ),
)
