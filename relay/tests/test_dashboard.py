"""
Unit tests for dashboard generators and the sensor/statistics catalogs.

Tests verify:
- Card type strings match the frontend plugin identifiers.
- The full dashboard lays out five rows in the documented order.
- The energy dashboard maps grid, solar and battery to the energy sensors.
- Every entity referenced by a card is in the sensor catalog.
- Generators return fresh structures on every call.

CHANGELOG:
- 2026-10-13: Initial creation (STORY-104)

TODO:
- None
"""

from __future__ import annotations

from typing import Any

import pytest
from relay.src.catalog import SENSORS, STATISTICS, statistic_id
from relay.src.dashboard import (
    CUSTOM_CARDS,
    generate_dashboard_config,
    generate_energy_dashboard_config,
    generate_energy_flow_card,
    generate_gauges_card,
    generate_optimization_history_card,
    generate_overview_card,
    generate_power_flow_card,
    generate_pvpc_price_card,
    generate_savings_card,
)

_SENSOR_IDS = {s.entity_id for s in SENSORS}


def _referenced_entities(node: Any) -> set[str]:
    """Collect every sensor.* string in a nested card structure."""
    found: set[str] = set()
    if isinstance(node, dict):
        for value in node.values():
            found |= _referenced_entities(value)
    elif isinstance(node, list):
        for value in node:
            found |= _referenced_entities(value)
    elif isinstance(node, str) and node.startswith("sensor."):
        found.add(node)
    return found


class TestCardTypes:
    @pytest.mark.parametrize(
        ("generator", "card_type"),
        [
            (generate_overview_card, "custom:voltassistant-overview-card"),
            (generate_power_flow_card, "custom:power-flow-card-plus"),
            (generate_pvpc_price_card, "custom:apexcharts-card"),
            (generate_savings_card, "custom:mini-graph-card"),
            (generate_energy_flow_card, "custom:sankey-chart-card"),
            (generate_optimization_history_card, "history-graph"),
            (generate_gauges_card, "horizontal-stack"),
        ],
    )
    def test_type_string(self, generator: Any, card_type: str) -> None:
        assert generator()["type"] == card_type


class TestCards:
    def test_overview_entities(self) -> None:
        card = generate_overview_card()

        assert card["title"] == "VoltAssistant Overview"
        assert card["entities"] == {
            "battery_soc": "sensor.voltassistant_battery_soc",
            "solar_power": "sensor.voltassistant_solar_power",
            "grid_power": "sensor.voltassistant_grid_power",
            "load_power": "sensor.voltassistant_load_power",
            "current_action": "sensor.voltassistant_current_action",
            "pvpc_price": "sensor.voltassistant_pvpc_current_price",
        }

    def test_power_flow_settings(self) -> None:
        card = generate_power_flow_card()

        assert card["entities"]["battery"] == {
            "entity": "sensor.voltassistant_battery_soc",
            "state_of_charge": "sensor.voltassistant_battery_soc",
        }
        assert card["entities"]["home"]["name"] == "Home"
        assert card["clickable_entities"] is True
        assert card["display_zero_lines"] is False
        assert card["min_flow_rate"] == 0.5
        assert card["max_flow_rate"] == 6

    def test_pvpc_chart(self) -> None:
        card = generate_pvpc_price_card()

        assert card["graph_span"] == "24h"
        assert card["span"] == {"start": "day"}
        (series,) = card["series"]
        assert series["type"] == "column"
        assert "sensor.voltassistant_pvpc_prices" in series["data_generator"]
        assert card["yaxis"][0]["apex_config"] == {"tickAmount": 5}

    def test_savings_thresholds(self) -> None:
        card = generate_savings_card()

        assert card["hours_to_show"] == 168
        assert card["show"]["graph"] == "bar"
        assert [t["value"] for t in card["color_thresholds"]] == [0, 1, 2]

    def test_energy_flow_sections(self) -> None:
        sections = generate_energy_flow_card()["sections"]

        names = [[e["name"] for e in s["entities"]] for s in sections]
        assert names == [
            ["Solar", "Grid Import"],
            ["Consumption", "Battery Charge"],
            ["Grid Export"],
        ]

    def test_gauges(self) -> None:
        battery, self_consumption = generate_gauges_card()["cards"]

        assert battery["type"] == self_consumption["type"] == "gauge"
        assert battery["severity"] == {"green": 50, "yellow": 20, "red": 0}
        assert self_consumption["entity"] == "sensor.voltassistant_self_consumption_ratio"
        assert self_consumption["severity"] == {"green": 70, "yellow": 40, "red": 0}

    def test_history_graph(self) -> None:
        card = generate_optimization_history_card()

        assert card["hours_to_show"] == 24
        assert [e["name"] for e in card["entities"]] == ["Action", "Battery %", "Price"]


class TestDashboardConfig:
    def test_layout(self) -> None:
        config = generate_dashboard_config()

        assert config["title"] == "VoltAssistant"
        assert config["icon"] == "mdi:battery-charging-high"
        rows = config["cards"]
        assert len(rows) == 5
        assert rows[0] == {
            "type": "horizontal-stack",
            "cards": [generate_overview_card(), generate_power_flow_card()],
        }
        assert rows[1]["cards"] == [generate_pvpc_price_card(), generate_savings_card()]
        assert rows[2] == generate_gauges_card()
        assert rows[3] == generate_energy_flow_card()
        assert rows[4] == generate_optimization_history_card()

    def test_referenced_entities_are_catalogued(self) -> None:
        referenced = _referenced_entities(generate_dashboard_config())

        assert referenced
        assert referenced <= _SENSOR_IDS

    def test_fresh_structure_per_call(self) -> None:
        first = generate_dashboard_config()
        first["cards"][0]["cards"][0]["title"] = "changed"

        assert generate_dashboard_config()["cards"][0]["cards"][0]["title"] == (
            "VoltAssistant Overview"
        )


class TestEnergyDashboardConfig:
    def test_sources(self) -> None:
        config = generate_energy_dashboard_config()

        grid, solar, battery = config["energy_sources"]
        assert grid == {
            "type": "grid",
            "entity": "sensor.voltassistant_grid_power",
            "stat_energy_from": "sensor.voltassistant_grid_import_energy",
            "stat_energy_to": "sensor.voltassistant_grid_export_energy",
        }
        assert solar == {
            "type": "solar",
            "entity": "sensor.voltassistant_solar_energy",
            "stat_energy_from": "sensor.voltassistant_solar_energy",
        }
        assert battery["stat_energy_from"] == "sensor.voltassistant_battery_discharge_energy"
        assert battery["stat_energy_to"] == "sensor.voltassistant_battery_charge_energy"
        assert config["device_consumption"] == []

    def test_referenced_entities_are_catalogued(self) -> None:
        assert _referenced_entities(generate_energy_dashboard_config()) <= _SENSOR_IDS


class TestCatalogs:
    def test_sensor_ids_unique(self) -> None:
        assert len(_SENSOR_IDS) == len(SENSORS) == 16

    def test_energy_sensors_total_increasing(self) -> None:
        energy = [s for s in SENSORS if s.device_class == "energy"]

        assert len(energy) == 5
        assert all(s.state_class == "total_increasing" for s in energy)
        assert all(s.unit_of_measurement == "kWh" for s in energy)

    def test_statistics_flags(self) -> None:
        ratio = STATISTICS["self_consumption_ratio"]

        assert ratio.has_mean is True
        assert ratio.has_sum is False
        assert ratio.unit_of_measurement == "%"
        others = [m for k, m in STATISTICS.items() if k != "self_consumption_ratio"]
        assert all(m.has_sum and not m.has_mean for m in others)
        assert all(m.source == "voltassistant" for m in STATISTICS.values())

    def test_statistic_id_lookup(self) -> None:
        assert statistic_id("grid_import") == "sensor.voltassistant_grid_import"
        with pytest.raises(KeyError):
            statistic_id("unknown")

    def test_custom_cards(self) -> None:
        (card,) = CUSTOM_CARDS

        assert card["type"] == "voltassistant-overview-card"
        assert generate_overview_card()["type"] == f"custom:{card['type']}"
