from __future__ import annotations

"""Graph state container: the single owner of every topology entity."""

from collections import deque
from dataclasses import fields
from typing import Any, Deque, Dict, Iterable, List, Mapping, Sequence

import networkx as nx
import numpy as np

from ..graph import derive
from ..graph.model import (
    Claim,
    Connector,
    Corridor,
    FeynmanSummary,
    Ledger,
    LensConfig,
    Observation,
    OODAState,
    Route,
    utc_now,
)
from ..graph.types import (
    CorridorStatus,
    LedgerDomain,
    LedgerType,
    Lens,
    LiquidityStatus,
    OODAPhase,
    RiskFlag,
    SettlementMechanism,
    SettlementType,
)

_LEDGER_DERIVED = {"id", "mass", "position"}
_CONNECTOR_FIXED = {"id", "source", "target", "claims", "observations"}


def _coerce_flags(values: Iterable[Any]) -> List[RiskFlag]:
    return [RiskFlag(v) for v in values]


class GraphState:
    """Container for ledgers, connectors, corridors and routes.

    Entities live in id-keyed dictionaries and reference one another only by
    id. Every field change goes through a method on this class; readers get
    the live objects and must treat them as read-only.
    """

    def __init__(
        self,
        ledgers: Iterable[Ledger],
        connectors: Iterable[Connector],
        *,
        hub: str,
        lens_defaults: Mapping[str, Mapping[str, Any]] | None = None,
        active_lens: Lens | str = Lens.TRUST,
        route_history_size: int = 20,
        thickness_reference: float = 100_000_000.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.ledgers: Dict[str, Ledger] = {}
        for ledger in ledgers:
            if ledger.id in self.ledgers:
                raise ValueError(f"duplicate ledger id: {ledger.id}")
            self.ledgers[ledger.id] = ledger
        self.connectors: Dict[str, Connector] = {}
        for conn in connectors:
            if conn.id in self.connectors:
                raise ValueError(f"duplicate connector id: {conn.id}")
            for end in (conn.source, conn.target):
                if end not in self.ledgers:
                    raise ValueError(f"connector {conn.id} references unknown ledger {end}")
            self.connectors[conn.id] = conn

        self.hub = hub
        rng = rng or np.random.default_rng()
        self.corridors: Dict[str, Corridor] = {}
        for conn in self.connectors.values():
            corr = derive.derive_corridor(conn, reference=thickness_reference, rng=rng)
            self.corridors[corr.id] = corr
        derive.link_alternatives(self.corridors.values())

        self.routes: Dict[str, Route] = {}
        self.active_route: Route | None = None
        self.route_history: Deque[Route] = deque(maxlen=route_history_size)

        self.ooda = OODAState(
            last_orientation=f"{self._ledger_name(hub)} positioned as settlement hub",
        )
        self.feynman = FeynmanSummary(
            summary=(
                "The Interledger network routes value between ledgers through "
                f"connectors. {self._ledger_name(hub)} serves as the settlement "
                "hub, while bridges and corridors enable cross-ledger transfers "
                "with varying levels of trust and risk."
            ),
        )
        self.active_lens = Lens(active_lens)
        defaults = lens_defaults or {}
        self.lens_configs: Dict[Lens, LensConfig] = {
            lens: LensConfig(lens=lens).merged(dict(defaults.get(lens.value, {})))
            for lens in Lens
        }
        self.last_updated = utc_now()

    def _ledger_name(self, ledger_id: str) -> str:
        ledger = self.ledgers.get(ledger_id)
        return ledger.name if ledger else ledger_id

    # ---- read accessors ----

    def get_ledgers(self) -> List[Ledger]:
        return list(self.ledgers.values())

    def get_ledger(self, ledger_id: str) -> Ledger | None:
        return self.ledgers.get(ledger_id)

    def get_connectors(self) -> List[Connector]:
        return list(self.connectors.values())

    def get_connector(self, connector_id: str) -> Connector | None:
        return self.connectors.get(connector_id)

    def get_corridors(self) -> List[Corridor]:
        return list(self.corridors.values())

    def get_corridor(self, corridor_id: str) -> Corridor | None:
        return self.corridors.get(corridor_id)

    def get_route(self, route_id: str) -> Route | None:
        return self.routes.get(route_id)

    def connector_for(self, corridor: Corridor) -> Connector | None:
        return self.connectors.get(corridor.connector_id)

    def filter_connectors(
        self, min_trust: float = 0.0, risk_flags: Sequence[RiskFlag | str] = ()
    ) -> List[Connector]:
        """Connectors with ``trust_score >= min_trust`` carrying any of ``risk_flags``.

        An empty ``risk_flags`` accepts every connector.
        """

        wanted = set(_coerce_flags(risk_flags))
        return [
            c
            for c in self.connectors.values()
            if c.trust_score >= min_trust
            and (not wanted or wanted.intersection(c.risk_flags))
        ]

    def filter_corridors(
        self, status: Sequence[CorridorStatus | str] = (), min_volume: float = 0.0
    ) -> List[Corridor]:
        wanted = {CorridorStatus(s) for s in status}
        return [
            c
            for c in self.corridors.values()
            if (not wanted or c.status in wanted) and c.volume_24h >= min_volume
        ]

    def to_networkx(self) -> nx.MultiDiGraph:
        """Return a ``MultiDiGraph`` of ledgers keyed by id and connectors as edges."""

        g = nx.MultiDiGraph()
        for lid, ledger in self.ledgers.items():
            g.add_node(lid, domain=ledger.domain.value, type=ledger.type.value)
        for cid, conn in self.connectors.items():
            corr = self.corridors.get(derive.corridor_id(cid))
            g.add_edge(
                conn.source,
                conn.target,
                key=cid,
                trust=conn.trust_score,
                fee_bps=conn.fee_bps,
                latency_ms=conn.latency_ms,
                status=corr.status.value if corr else None,
            )
        return g

    # ---- mutation ----

    def update_connector(self, connector_id: str, **changes: Any) -> Connector | None:
        """Apply ``changes`` to a connector and return it, or ``None`` if missing.

        Endpoints, claims and observations cannot be replaced here; use
        :meth:`add_observation` and :meth:`verify_claim` for the latter two.
        """

        conn = self.connectors.get(connector_id)
        if conn is None:
            return None
        allowed = {f.name for f in fields(Connector)} - _CONNECTOR_FIXED
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"cannot update connector fields: {sorted(unknown)}")
        values = dict(changes)
        if "trust_score" in values:
            trust = float(values["trust_score"])
            if not 0.0 <= trust <= 1.0:
                raise ValueError("trust_score must lie in [0, 1]")
            values["trust_score"] = trust
        if "liquidity" in values:
            values["liquidity"] = LiquidityStatus(values["liquidity"])
        if "settlement" in values:
            values["settlement"] = SettlementMechanism(values["settlement"])
        if "risk_flags" in values:
            values["risk_flags"] = _coerce_flags(values["risk_flags"])
        for key, value in values.items():
            setattr(conn, key, value)
        return conn

    def update_ledger(self, ledger_id: str, **changes: Any) -> Ledger | None:
        """Apply ``changes`` to a ledger. ``mass`` and ``position`` are derived."""

        ledger = self.ledgers.get(ledger_id)
        if ledger is None:
            return None
        derived = set(changes) & _LEDGER_DERIVED
        if derived:
            raise ValueError(f"ledger fields are derived: {sorted(derived)}")
        allowed = {f.name for f in fields(Ledger)}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"unknown ledger fields: {sorted(unknown)}")
        values = dict(changes)
        for key, enum in (
            ("type", LedgerType),
            ("domain", LedgerDomain),
            ("settlement", SettlementType),
        ):
            if key in values:
                values[key] = enum(values[key])
        if "risk_flags" in values:
            values["risk_flags"] = _coerce_flags(values["risk_flags"])
        for key, value in values.items():
            setattr(ledger, key, value)
        return ledger

    def add_observation(self, connector_id: str, observation: Observation) -> bool:
        conn = self.connectors.get(connector_id)
        if conn is None:
            return False
        conn.observations.append(observation)
        conn.last_active = observation.timestamp
        return True

    def verify_claim(self, connector_id: str, claim_id: str) -> Claim | None:
        conn = self.connectors.get(connector_id)
        if conn is None:
            return None
        for claim in conn.claims:
            if claim.id == claim_id:
                claim.verified = True
                return claim
        return None

    def set_corridor_status(self, corridor_id: str, status: CorridorStatus) -> CorridorStatus:
        """Set the corridor status and return the previous one."""

        corr = self.corridors[corridor_id]
        old = corr.status
        corr.status = status
        return old

    def set_corridor_visuals(
        self,
        corridor_id: str,
        *,
        thickness: float,
        glow: float,
        success_rate: float | None,
        risk_fog: Iterable[RiskFlag],
        avg_settlement_time_ms: float,
    ) -> None:
        corr = self.corridors[corridor_id]
        corr.thickness = thickness
        corr.glow = glow
        corr.success_rate = success_rate
        corr.risk_fog = list(risk_fog)
        corr.avg_settlement_time_ms = avg_settlement_time_ms

    def set_ledger_mass(self, ledger_id: str, mass: float) -> None:
        self.ledgers[ledger_id].mass = mass

    def set_phase(self, phase: OODAPhase, summary: str | None = None) -> None:
        """Enter ``phase`` and optionally record its narrative line."""

        self.ooda.current_phase = phase
        self.ooda.timestamp = utc_now()
        if summary is None:
            return
        attr = {
            OODAPhase.OBSERVE: "last_observation",
            OODAPhase.ORIENT: "last_orientation",
            OODAPhase.DECIDE: "last_decision",
            OODAPhase.ACT: "last_action",
        }[phase]
        setattr(self.ooda, attr, summary)

    def set_feynman(self, summary: FeynmanSummary) -> None:
        self.feynman = summary

    def store_route(self, route: Route) -> None:
        self.routes[route.id] = route
        self.active_route = route
        self.route_history.append(route)
        for corr in self.corridors.values():
            corr.is_preferred_route = False
        for hop in route.hops:
            corr = self.corridors.get(hop.corridor_id)
            if corr is not None:
                corr.is_preferred_route = True

    def clear_route(self) -> None:
        self.active_route = None
        for corr in self.corridors.values():
            corr.is_preferred_route = False

    def set_active_lens(self, lens: Lens | str) -> Lens:
        self.active_lens = Lens(lens)
        return self.active_lens

    def update_lens_config(self, lens: Lens | str, changes: Mapping[str, Any]) -> LensConfig:
        key = Lens(lens)
        self.lens_configs[key] = self.lens_configs[key].merged(dict(changes))
        return self.lens_configs[key]

    def touch(self) -> None:
        self.last_updated = utc_now()
