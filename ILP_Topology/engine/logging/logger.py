from __future__ import annotations

"""JSON-lines diagnostic records for the topology engine.

Nothing is written unless the category is enabled in ``Config.log_files``.
"""

import csv
import json
from collections import Counter
from pathlib import Path
from typing import Any

from ...config import Config


class EventCounter:
    """Aggregate event counts per tick and write ``metrics.csv``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.counts: Counter[str] = Counter()

    def add(self, category: str) -> None:
        self.counts[category] += 1

    def flush(self, tick: int) -> None:
        """Append accumulated counts for ``tick`` to ``metrics.csv``."""

        if not self.counts:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        file_exists = self.path.exists()
        with self.path.open("a", newline="") as fh:
            fieldnames = ["tick", *sorted(self.counts.keys())]
            writer = csv.DictWriter(fh, fieldnames=fieldnames, extrasaction="ignore")
            if not file_exists:
                writer.writeheader()
            writer.writerow({"tick": tick, **self.counts})
        self.counts.clear()


_COUNTER: EventCounter | None = None


def _get_counter() -> EventCounter:
    global _COUNTER
    path = Path(Config.output_dir) / "metrics.csv"
    if _COUNTER is None or _COUNTER.path != path:
        _COUNTER = EventCounter(path)
    return _COUNTER


def log_record(
    category: str,
    label: str,
    *,
    tick: int | None = None,
    value: dict[str, Any] | None = None,
    path: Path | None = None,
) -> bool:
    """Append a record to ``<output_dir>/<category>_log.jsonl``.

    Returns ``True`` when a line was written. Records for disabled
    categories are dropped without touching the filesystem.
    """

    if Config.is_log_enabled("metrics"):
        _get_counter().add(label)
    if not Config.is_log_enabled(category):
        return False
    if path is None:
        path = Path(Config.output_dir) / f"{category}_log.jsonl"
    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {"label": label}
    if tick is not None:
        data["tick"] = tick
    if value is not None:
        data.update(value)
    with path.open("a") as fh:
        fh.write(json.dumps(data, default=str) + "\n")
    return True


def flush_metrics(tick: int) -> None:
    """Flush aggregated event counts for ``tick`` to disk."""

    if Config.is_log_enabled("metrics"):
        _get_counter().flush(tick)
