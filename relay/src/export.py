"""
Dashboard configuration exporter — prints generated configuration as JSON.

Paste the output into the Home Assistant raw configuration editor (dashboard)
or use it to check which entities the energy dashboard expects.

Usage:
    voltassistant-export dashboard
    voltassistant-export energy --output energy.json
    voltassistant-export statistics --indent 0

CHANGELOG:
- 2026-10-19: Return copies of the custom-card descriptors (STORY-113)
- 2026-10-17: Initial creation (STORY-110)
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from relay.src.catalog import SENSORS, STATISTICS
from relay.src.dashboard import (
    CUSTOM_CARDS,
    generate_dashboard_config,
    generate_energy_dashboard_config,
)

DOCUMENTS: dict[str, Callable[[], Any]] = {
    "dashboard": generate_dashboard_config,
    "energy": generate_energy_dashboard_config,
    "sensors": lambda: [s.model_dump(exclude_none=True) for s in SENSORS],
    "statistics": lambda: [m.model_dump() for m in STATISTICS.values()],
    "custom-cards": lambda: [dict(card) for card in CUSTOM_CARDS],
}


def render(document: str, indent: int | None = 2) -> str:
    """Return the named document serialized as JSON.

    Raises:
        KeyError: If *document* is not one of DOCUMENTS.
    """
    return json.dumps(DOCUMENTS[document](), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        description="Export VoltAssistant dashboard configuration as JSON"
    )
    p.add_argument("document", choices=sorted(DOCUMENTS), help="What to export")
    p.add_argument(
        "--output", "-o", type=Path, default=None,
        help="Write to this file instead of stdout"
    )
    p.add_argument(
        "--indent", type=int, default=2,
        help="JSON indentation; 0 for compact output (default 2)"
    )
    return p.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Synchronous entrypoint."""
    args = parse_args(argv)
    text = render(args.document, indent=args.indent or None)
    if args.output is None:
        sys.stdout.write(text + "\n")
    else:
        args.output.write_text(text + "\n", encoding="utf-8")


if __name__ == "__main__":
    main()
