"""
Lovelace dashboard and energy-dashboard configuration generators.

Every generator is a pure function returning a fresh nested dict that the
Home Assistant frontend renders as-is. Card ``type`` strings are frontend
plugin identifiers and field names follow each card's documented schema, so
both must be kept verbatim.

Custom cards used:
- custom:voltassistant-overview-card (bundled with the add-on)
- custom:power-flow-card-plus
- custom:apexcharts-card
- custom:mini-graph-card
- custom:sankey-chart-card

CHANGELOG:
- 2026-10-13: Add energy dashboard source mapping (STORY-104)
- 2026-10-13: Initial creation (STORY-104)

TODO:
- None
"""

from __future__ import annotations

from typing import Any

Card = dict[str, Any]

_BATTERY_SOC = "sensor.voltassistant_battery_soc"
_SOLAR_POWER = "sensor.voltassistant_solar_power"
_GRID_POWER = "sensor.voltassistant_grid_power"
_LOAD_POWER = "sensor.voltassistant_load_power"
_BATTERY_POWER = "sensor.voltassistant_battery_power"
_CURRENT_ACTION = "sensor.voltassistant_current_action"
_PVPC_PRICE = "sensor.voltassistant_pvpc_current_price"
_DAILY_SAVINGS = "sensor.voltassistant_daily_savings"
_SELF_CONSUMPTION = "sensor.voltassistant_self_consumption_ratio"
_SOLAR_ENERGY = "sensor.voltassistant_solar_energy"
_GRID_IMPORT_ENERGY = "sensor.voltassistant_grid_import_energy"
_GRID_EXPORT_ENERGY = "sensor.voltassistant_grid_export_energy"
_BATTERY_CHARGE_ENERGY = "sensor.voltassistant_battery_charge_energy"
_BATTERY_DISCHARGE_ENERGY = "sensor.voltassistant_battery_discharge_energy"

# Hourly price series is read client-side from the prices attribute.
_PVPC_DATA_GENERATOR = """
          const prices = hass.states['sensor.voltassistant_pvpc_prices']?.attributes?.prices || [];
          return prices.map((p, i) => [new Date().setHours(i, 0, 0, 0), p]);
        """

CUSTOM_CARDS: tuple[dict[str, Any], ...] = (
    {
        "type": "voltassistant-overview-card",
        "name": "VoltAssistant Overview Card",
        "description": "A card showing real-time VoltAssistant status",
        "preview": False,
        "documentationURL": "https://github.com/voltassistant/addon",
    },
)
"""Entries for the frontend card picker (window.customCards)."""


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


def generate_overview_card() -> Card:
    """Real-time status card bundled with the add-on."""
    return {
        "type": "custom:voltassistant-overview-card",
        "title": "VoltAssistant Overview",
        "entities": {
            "battery_soc": _BATTERY_SOC,
            "solar_power": _SOLAR_POWER,
            "grid_power": _GRID_POWER,
            "load_power": _LOAD_POWER,
            "current_action": _CURRENT_ACTION,
            "pvpc_price": _PVPC_PRICE,
        },
    }


def generate_power_flow_card() -> Card:
    return {
        "type": "custom:power-flow-card-plus",
        "entities": {
            "battery": {
                "entity": _BATTERY_SOC,
                "state_of_charge": _BATTERY_SOC,
            },
            "grid": {"entity": _GRID_POWER, "name": "Grid"},
            "solar": {"entity": _SOLAR_POWER, "name": "Solar"},
            "home": {"entity": _LOAD_POWER, "name": "Home"},
        },
        "clickable_entities": True,
        "display_zero_lines": False,
        "min_flow_rate": 0.5,
        "max_flow_rate": 6,
    }


def generate_pvpc_price_card() -> Card:
    """Column chart of today's hourly PVPC electricity prices."""
    return {
        "type": "custom:apexcharts-card",
        "header": {
            "show": True,
            "title": "PVPC Price Today",
            "show_states": True,
            "colorize_states": True,
        },
        "graph_span": "24h",
        "span": {"start": "day"},
        "series": [
            {
                "entity": _PVPC_PRICE,
                "name": "Price",
                "type": "column",
                "color": "var(--primary-color)",
                "data_generator": _PVPC_DATA_GENERATOR,
            },
        ],
        "yaxis": [
            {
                "min": 0,
                "decimals": 3,
                "apex_config": {"tickAmount": 5},
            },
        ],
    }


def generate_savings_card() -> Card:
    """Bar graph of the daily savings over the last week."""
    return {
        "type": "custom:mini-graph-card",
        "entities": [
            {"entity": _DAILY_SAVINGS, "name": "Today", "color": "#4CAF50"},
        ],
        "name": "Daily Savings",
        "hours_to_show": 168,
        "group_by": "date",
        "aggregate_func": "max",
        "show": {
            "graph": "bar",
            "average": True,
            "extrema": True,
            "legend": False,
        },
        "color_thresholds": [
            {"value": 0, "color": "#f44336"},
            {"value": 1, "color": "#ff9800"},
            {"value": 2, "color": "#4CAF50"},
        ],
    }


def generate_energy_flow_card() -> Card:
    return {
        "type": "custom:sankey-chart-card",
        "sections": [
            {
                "entities": [
                    {"entity_id": _SOLAR_ENERGY, "name": "Solar"},
                    {"entity_id": _GRID_IMPORT_ENERGY, "name": "Grid Import"},
                ],
            },
            {
                "entities": [
                    {"entity_id": _LOAD_POWER, "name": "Consumption"},
                    {"entity_id": _BATTERY_CHARGE_ENERGY, "name": "Battery Charge"},
                ],
            },
            {
                "entities": [
                    {"entity_id": _GRID_EXPORT_ENERGY, "name": "Grid Export"},
                ],
            },
        ],
    }


def generate_optimization_history_card() -> Card:
    return {
        "type": "history-graph",
        "title": "Optimization History",
        "hours_to_show": 24,
        "entities": [
            {"entity": _CURRENT_ACTION, "name": "Action"},
            {"entity": _BATTERY_SOC, "name": "Battery %"},
            {"entity": _PVPC_PRICE, "name": "Price"},
        ],
    }


def _gauge(entity: str, name: str, green: int, yellow: int) -> Card:
    return {
        "type": "gauge",
        "entity": entity,
        "name": name,
        "min": 0,
        "max": 100,
        "severity": {"green": green, "yellow": yellow, "red": 0},
    }


def generate_gauges_card() -> Card:
    """Battery and self-consumption gauges side by side."""
    return {
        "type": "horizontal-stack",
        "cards": [
            _gauge(_BATTERY_SOC, "Battery", green=50, yellow=20),
            _gauge(_SELF_CONSUMPTION, "Self Consumption", green=70, yellow=40),
        ],
    }


# ---------------------------------------------------------------------------
# Full dashboards
# ---------------------------------------------------------------------------


def generate_dashboard_config() -> dict[str, Any]:
    """Build the complete VoltAssistant Lovelace dashboard.

    Rows, top to bottom: overview and power flow, prices and savings,
    gauges, energy flow, optimization history.
    """
    return {
        "title": "VoltAssistant",
        "icon": "mdi:battery-charging-high",
        "cards": [
            {
                "type": "horizontal-stack",
                "cards": [generate_overview_card(), generate_power_flow_card()],
            },
            {
                "type": "horizontal-stack",
                "cards": [generate_pvpc_price_card(), generate_savings_card()],
            },
            generate_gauges_card(),
            generate_energy_flow_card(),
            generate_optimization_history_card(),
        ],
    }


def generate_energy_dashboard_config() -> dict[str, Any]:
    """Build the source mapping for the Home Assistant energy dashboard."""
    return {
        "energy_sources": [
            {
                "type": "grid",
                "entity": _GRID_POWER,
                "stat_energy_from": _GRID_IMPORT_ENERGY,
                "stat_energy_to": _GRID_EXPORT_ENERGY,
            },
            {
                "type": "solar",
                "entity": _SOLAR_ENERGY,
                "stat_energy_from": _SOLAR_ENERGY,
            },
            {
                "type": "battery",
                "entity": _BATTERY_POWER,
                "stat_energy_from": _BATTERY_DISCHARGE_ENERGY,
                "stat_energy_to": _BATTERY_CHARGE_ENERGY,
            },
        ],
        "device_consumption": [],
    }
