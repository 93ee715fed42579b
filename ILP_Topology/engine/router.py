"""Two-tier route computation: a direct corridor, else one relay via the hub.

This is deliberately not a general shortest-path search. Only ``active``
corridors are considered and the first match in corridor order wins, so the
result is deterministic for a given state.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Mapping

from ..graph.model import Connector, Corridor, Route, RouteHop, utc_now
from ..graph.types import CorridorStatus


def find_active_corridor(
    corridors: Iterable[Corridor], from_ledger: str, to_ledger: str
) -> Corridor | None:
    """Return the first ``active`` corridor from ``from_ledger`` to ``to_ledger``."""

    for corr in corridors:
        if (
            corr.status is CorridorStatus.ACTIVE
            and corr.from_ledger == from_ledger
            and corr.to_ledger == to_ledger
        ):
            return corr
    return None


def _hop(corr: Corridor, conn: Connector) -> RouteHop:
    return RouteHop(
        corridor_id=corr.id,
        connector_id=conn.id,
        from_ledger=corr.from_ledger,
        to_ledger=corr.to_ledger,
        estimated_fee_bps=conn.fee_bps,
        estimated_latency_ms=conn.latency_ms,
    )


def new_route_id() -> str:
    return f"route-{uuid.uuid4().hex[:12]}"


def calculate_route(
    corridors: Iterable[Corridor],
    connectors: Mapping[str, Connector],
    from_ledger: str,
    to_ledger: str,
    amount: float = 0.0,
    *,
    hub: str,
    route_id: str | None = None,
) -> Route | None:
    """Compute a route from ``from_ledger`` to ``to_ledger``.

    Parameters
    ----------
    corridors:
        Corridor snapshot to search.
    connectors:
        Mapping of connector id to :class:`Connector` supplying fee, latency,
        trust and depth for each hop.
    amount:
        Recorded on the route; it does not influence path selection.
    hub:
        Ledger id used for the two-hop relay.

    Returns
    -------
    Route or None
        ``None`` when neither a direct nor a hub relay path exists.
    """

    corridors = list(corridors)
    direct = find_active_corridor(corridors, from_ledger, to_ledger)
    if direct is not None:
        conn = connectors.get(direct.connector_id)
        if conn is not None:
            return Route(
                id=route_id or new_route_id(),
                from_ledger=from_ledger,
                to_ledger=to_ledger,
                hops=(_hop(direct, conn),),
                total_fee_bps=conn.fee_bps,
                total_latency_ms=conn.latency_ms,
                risk_score=1.0 - conn.trust_score,
                liquidity_available=conn.liquidity_depth,
                amount=amount,
                created_at=utc_now(),
            )

    inbound = find_active_corridor(corridors, from_ledger, hub)
    outbound = find_active_corridor(corridors, hub, to_ledger)
    if inbound is None or outbound is None:
        return None
    first = connectors.get(inbound.connector_id)
    second = connectors.get(outbound.connector_id)
    if first is None or second is None:
        return None
    return Route(
        id=route_id or new_route_id(),
        from_ledger=from_ledger,
        to_ledger=to_ledger,
        hops=(_hop(inbound, first), _hop(outbound, second)),
        total_fee_bps=first.fee_bps + second.fee_bps,
        total_latency_ms=first.latency_ms + second.latency_ms,
        risk_score=1.0 - first.trust_score * second.trust_score,
        liquidity_available=min(first.liquidity_depth, second.liquidity_depth),
        amount=amount,
        created_at=utc_now(),
    )
