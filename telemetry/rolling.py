"""Per-tick counter and invariant histories for the topology control loop."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Mapping

import numpy as np


def bootstrap_interval(
    samples: Iterable[float],
    confidence: float = 0.95,
    n_boot: int = 1000,
    rng: np.random.Generator | None = None,
) -> tuple[float, float, float]:
    """Return ``(mean, lower, upper)`` for ``samples``; all ``NaN`` when empty."""

    data = np.fromiter(samples, dtype=float)
    if data.size == 0:
        nan = float("nan")
        return nan, nan, nan
    rng = rng or np.random.default_rng()
    resampled = rng.choice(data, size=(n_boot, data.size)).mean(axis=1)
    tail = 50.0 * (1.0 - confidence)
    lower, upper = np.percentile(resampled, [tail, 100.0 - tail])
    return float(data.mean()), float(lower), float(upper)


@dataclass
class TickTelemetry:
    """Bounded histories sampled once per tick.

    Counters hold raw values such as the number of active corridors.
    Invariant histories hold ``1.0`` for a tick on which the invariant held
    and ``0.0`` when it was violated.
    """

    max_points: int = 100
    counters: dict[str, deque[float]] = field(default_factory=dict)
    invariants: dict[str, deque[float]] = field(default_factory=dict)
    ticks: int = 0

    def _history(self, table: dict[str, deque[float]], key: str) -> deque[float]:
        if key not in table:
            table[key] = deque(maxlen=self.max_points)
        return table[key]

    def record(
        self,
        counters: Mapping[str, float] | None = None,
        invariants: Mapping[str, bool] | None = None,
    ) -> None:
        for key, value in (counters or {}).items():
            self._history(self.counters, key).append(float(value))
        for key, ok in (invariants or {}).items():
            self._history(self.invariants, key).append(1.0 if ok else 0.0)
        self.ticks += 1

    def intervals(
        self,
        confidence: float = 0.95,
        n_boot: int = 1000,
        rng: np.random.Generator | None = None,
    ) -> dict[str, tuple[float, float, float]]:
        """Bootstrap ``(mean, lower, upper)`` per counter."""

        rng = rng or np.random.default_rng()
        return {
            key: bootstrap_interval(history, confidence, n_boot, rng)
            for key, history in self.counters.items()
        }

    def pass_rates(self) -> dict[str, float]:
        """Fraction of retained ticks on which each invariant held."""

        return {
            key: float(np.mean(history)) if history else float("nan")
            for key, history in self.invariants.items()
        }

    def get_counters(self) -> dict[str, list[float]]:
        return {key: list(history) for key, history in self.counters.items()}

    def get_invariants(self) -> dict[str, list[float]]:
        return {key: list(history) for key, history in self.invariants.items()}
