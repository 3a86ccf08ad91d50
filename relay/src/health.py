"""
Health file writer for the statistics relay.

Writes a JSON health file at a configurable path with two fields:
- last_flush_ts: ISO timestamp of the most recent flush in which Home
  Assistant accepted every statistic. A partially failed flush leaves it
  unchanged, so a stale value means data is piling up.
- pending_count: Readings left in the relay queue after the flush, i.e.
  re-queued failures plus readings recorded while requests were in flight.

The relay rewrites the file only after a non-empty flush; an idle relay
with nothing queued leaves it untouched. Nothing is written before the
first such flush.

CHANGELOG:
- 2026-10-19: Document when the relay rewrites the file (STORY-114)
- 2026-10-16: Initial creation (STORY-109)

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path


class HealthWriter:
    """Writes relay health status to a JSON file.

    Owned by StatisticsRelay, which calls set_pending_count() after each
    non-empty flush and record_flush() when that flush fully succeeded.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_flush_ts: str | None = None
        self._pending_count: int = 0

    def record_flush(self) -> None:
        """Stamp last_flush_ts with the current UTC time and write the file."""
        self._last_flush_ts = datetime.now(tz=UTC).isoformat()
        self._write()

    def set_pending_count(self, count: int) -> None:
        """Update the pending reading count and write health file.

        Args:
            count: Readings currently waiting in the relay queue.
        """
        self._pending_count = count
        self._write()

    def _write(self) -> None:
        data = {
            "last_flush_ts": self._last_flush_ts,
            "pending_count": self._pending_count,
        }
        self.path.write_text(json.dumps(data))
