"""ILP_Topology package initialization."""

from __future__ import annotations

from typing import Any

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .engine.topology import TopologyEngine

__all__ = ["TopologyEngine"]


def __getattr__(name: str) -> Any:  # pragma: no cover - attribute access
    """Lazily expose TopologyEngine."""

    if name == "TopologyEngine":
        from .engine.topology import TopologyEngine as _TopologyEngine

        return _TopologyEngine
    raise AttributeError(name)
