"""Pure functions deriving corridor and ledger fields from connectors.

Both the initial corridor build and the act/decide phases of the control
loop go through these helpers, so re-running them against a connector
reproduces the corridor exactly.
"""

from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np

from .model import Connector, Corridor
from .types import CorridorStatus, LiquidityStatus, RiskFlag

_INITIAL_STATUS = {
    LiquidityStatus.LIVE: CorridorStatus.ACTIVE,
    LiquidityStatus.SIMULATED: CorridorStatus.EXPERIMENTAL,
    LiquidityStatus.UNKNOWN: CorridorStatus.FOGGED,
    LiquidityStatus.DEPLETED: CorridorStatus.INACTIVE,
}


def corridor_id(connector_id: str) -> str:
    return f"corr-{connector_id}"


def initial_status(connector: Connector) -> CorridorStatus:
    """Classify a freshly derived corridor from liquidity alone."""

    return _INITIAL_STATUS[connector.liquidity]


def decide_status(
    connector: Connector,
    current: CorridorStatus,
    *,
    fog_trust: float = 0.3,
    active_trust: float = 0.7,
) -> CorridorStatus:
    """Return the corridor status implied by ``connector``.

    Rules apply in order: low trust fogs, depleted liquidity deactivates,
    an ``experimental`` flag marks experimental, and high trust with live
    liquidity activates. When no rule matches ``current`` is kept.
    """

    if connector.trust_score < fog_trust:
        return CorridorStatus.FOGGED
    if connector.liquidity is LiquidityStatus.DEPLETED:
        return CorridorStatus.INACTIVE
    if RiskFlag.EXPERIMENTAL in connector.risk_flags:
        return CorridorStatus.EXPERIMENTAL
    if connector.trust_score >= active_trust and connector.liquidity is LiquidityStatus.LIVE:
        return CorridorStatus.ACTIVE
    return current


def thickness(liquidity_depth: float, reference: float = 100_000_000.0) -> float:
    """Liquidity depth normalised by ``reference`` and clamped to ``[0, 1]``."""

    if reference <= 0:
        raise ValueError("reference must be positive")
    return float(np.clip(liquidity_depth / reference, 0.0, 1.0))


def glow(trust_score: float, success_rate: float | None, default: float = 0.9) -> float:
    """Visual intensity: trust scaled by success rate."""

    rate = default if success_rate is None else success_rate
    return trust_score * rate


def success_rate(connector: Connector) -> float | None:
    """Observed success fraction, absent when the connector reports no uptime."""

    if connector.uptime_percent is None:
        return None
    return connector.uptime_percent / 100.0


def ledger_mass(connection_count: int, base: float = 30.0, per_connector: float = 15.0) -> float:
    return base + connection_count * per_connector


def derive_corridor(
    connector: Connector,
    *,
    reference: float = 100_000_000.0,
    rng: np.random.Generator | None = None,
) -> Corridor:
    """Build the corridor for ``connector``.

    Volume and transaction counts are simulated placeholders drawn from
    ``rng``; every other field is a function of the connector.
    """

    rng = rng or np.random.default_rng()
    rate = success_rate(connector)
    return Corridor(
        id=corridor_id(connector.id),
        connector_id=connector.id,
        from_ledger=connector.source,
        to_ledger=connector.target,
        status=initial_status(connector),
        thickness=thickness(connector.liquidity_depth, reference),
        glow=connector.trust_score,
        risk_fog=list(connector.risk_flags),
        volume_24h=float(rng.random() * connector.liquidity_depth * 0.1),
        tx_count_24h=int(rng.integers(0, 10000)),
        avg_settlement_time_ms=connector.latency_ms,
        success_rate=rate,
    )


def link_alternatives(corridors: Iterable[Corridor]) -> None:
    """Fill ``alternative_corridors`` with other corridors on the same ledger pair."""

    groups: dict[frozenset[str], list[Corridor]] = {}
    for corr in corridors:
        groups.setdefault(frozenset((corr.from_ledger, corr.to_ledger)), []).append(corr)
    for members in groups.values():
        for corr in members:
            corr.alternative_corridors = [c.id for c in members if c.id != corr.id]


def count_connections(connectors: Iterable[Connector]) -> Mapping[str, int]:
    """Return incident connector counts per ledger id."""

    counts: dict[str, int] = {}
    for conn in connectors:
        counts[conn.source] = counts.get(conn.source, 0) + 1
        if conn.target != conn.source:
            counts[conn.target] = counts.get(conn.target, 0) + 1
    return counts
