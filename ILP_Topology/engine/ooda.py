"""The observe/orient/decide/act cycle run once per control-loop tick."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

import networkx as nx
import numpy as np

from ..graph import derive
from ..graph.model import FeynmanSummary, Observation, utc_now
from ..graph.types import (
    Complexity,
    CorridorStatus,
    LedgerDomain,
    LiquidityStatus,
    ObservationType,
    OODAPhase,
)
from .events import CorridorStatusChanged, Event, OODAPhaseChanged
from .state import GraphState


@dataclass(frozen=True)
class CycleSettings:
    """Tunables for one engine's cycle, usually built from ``Config``."""

    observation_probability: float = 0.05
    observation_confidence: float = 0.8
    latency_jitter: tuple[float, float] = (0.8, 1.2)
    thickness_reference: float = 100_000_000.0
    base_mass: float = 30.0
    mass_per_connector: float = 15.0
    default_success_rate: float = 0.9
    fog_trust: float = 0.3
    active_trust: float = 0.7
    healthy_trust: float = 0.7
    healthy_max_risk_flags: int = 1
    simple_trust: float = 0.7
    moderate_trust: float = 0.5


@dataclass
class CycleReport:
    """What changed during one pass of the cycle."""

    observations: List[str] = field(default_factory=list)
    status_changes: List[CorridorStatusChanged] = field(default_factory=list)
    healthy: int = 0
    risky: int = 0
    islands: int = 0


class OODACycle:
    """Mutate a :class:`GraphState` through the four phases.

    Each phase records its narrative line on the state and then publishes an
    ``OODA_PHASE_CHANGED`` event, so subscribers always see the narrative of
    the phase being announced. Corridor status changes are published during
    the decide phase, before its phase event.
    """

    def __init__(
        self,
        state: GraphState,
        emit: Callable[[Event], None],
        settings: CycleSettings | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.state = state
        self.emit = emit
        self.settings = settings or CycleSettings()
        self.rng = rng or np.random.default_rng()

    def _complete(self, phase: OODAPhase, summary: str) -> None:
        self.state.set_phase(phase, summary)
        self.emit(OODAPhaseChanged(phase=phase))

    def run(self) -> CycleReport:
        report = CycleReport()
        self.observe(report)
        self.orient(report)
        self.decide(report)
        self.act(report)
        return report

    # ---- phases ----

    def observe(self, report: CycleReport) -> None:
        """Synthesise latency telemetry for a random subset of connectors."""

        s = self.settings
        low, high = s.latency_jitter
        for conn in self.state.get_connectors():
            if self.rng.random() >= s.observation_probability:
                continue
            obs = Observation(
                id=f"obs-{uuid.uuid4().hex[:12]}",
                type=ObservationType.LATENCY,
                timestamp=utc_now(),
                data={"latency_ms": conn.latency_ms * float(self.rng.uniform(low, high))},
                confidence=s.observation_confidence,
            )
            self.state.add_observation(conn.id, obs)
            report.observations.append(f"Latency observation on {conn.name}")
        self._complete(
            OODAPhase.OBSERVE,
            "; ".join(report.observations) or "No new observations",
        )

    def orient(self, report: CycleReport) -> None:
        s = self.settings
        by_domain = {d: 0 for d in LedgerDomain}
        for ledger in self.state.get_ledgers():
            by_domain[ledger.domain] += 1
        for conn in self.state.get_connectors():
            if (
                conn.trust_score >= s.healthy_trust
                and len(conn.risk_flags) <= s.healthy_max_risk_flags
            ):
                report.healthy += 1
            else:
                report.risky += 1
        graph = self.state.to_networkx()
        report.islands = (
            nx.number_weakly_connected_components(graph) if graph.number_of_nodes() else 0
        )
        lines = [
            "Domain split: "
            f"{by_domain[LedgerDomain.ON_LEDGER]} on-ledger, "
            f"{by_domain[LedgerDomain.OFF_LEDGER]} off-ledger, "
            f"{by_domain[LedgerDomain.HYBRID]} hybrid",
            f"Connector health: {report.healthy} healthy, {report.risky} risky",
            f"Topology: {report.islands} connected islands",
        ]
        self._complete(OODAPhase.ORIENT, "; ".join(lines))

    def decide(self, report: CycleReport) -> None:
        """Reclassify every corridor from its connector's current state."""

        s = self.settings
        decisions: List[str] = []
        for corr in self.state.get_corridors():
            conn = self.state.connector_for(corr)
            if conn is None:
                continue
            new_status = derive.decide_status(
                conn, corr.status, fog_trust=s.fog_trust, active_trust=s.active_trust
            )
            if conn.trust_score < s.fog_trust:
                decisions.append(f"Fogging {conn.name} due to low trust")
            elif conn.liquidity is LiquidityStatus.DEPLETED:
                decisions.append(f"Deactivating {conn.name} due to depleted liquidity")
            if new_status is corr.status:
                continue
            old = self.state.set_corridor_status(corr.id, new_status)
            event = CorridorStatusChanged(
                corridor_id=corr.id,
                connector_id=conn.id,
                old_status=old,
                new_status=new_status,
            )
            report.status_changes.append(event)
            self.emit(event)
        self._complete(OODAPhase.DECIDE, "; ".join(decisions) or "No status changes")

    def act(self, report: CycleReport) -> None:
        """Refresh corridor visuals and ledger masses."""

        s = self.settings
        for corr in self.state.get_corridors():
            conn = self.state.connector_for(corr)
            if conn is None:
                continue
            rate = derive.success_rate(conn)
            self.state.set_corridor_visuals(
                corr.id,
                thickness=derive.thickness(conn.liquidity_depth, s.thickness_reference),
                glow=derive.glow(conn.trust_score, rate, s.default_success_rate),
                success_rate=rate,
                risk_fog=conn.risk_flags,
                avg_settlement_time_ms=conn.latency_ms,
            )
        counts = derive.count_connections(self.state.get_connectors())
        for ledger in self.state.get_ledgers():
            self.state.set_ledger_mass(
                ledger.id,
                derive.ledger_mass(counts.get(ledger.id, 0), s.base_mass, s.mass_per_connector),
            )
        self.state.touch()
        self._complete(OODAPhase.ACT, "Visual properties updated")

    # ---- narrative ----

    def narrate(self) -> FeynmanSummary:
        """Regenerate the plain-language summary from corridor and trust counts."""

        s = self.settings
        corridors = self.state.get_corridors()
        active = sum(1 for c in corridors if c.status is CorridorStatus.ACTIVE)
        trusts: Sequence[float] = [c.trust_score for c in self.state.get_connectors()]
        avg_trust = float(np.mean(trusts)) if trusts else 0.0
        if avg_trust > s.simple_trust:
            complexity = Complexity.SIMPLE
        elif avg_trust > s.moderate_trust:
            complexity = Complexity.MODERATE
        else:
            complexity = Complexity.COMPLEX
        hub = self.state.get_ledger(self.state.hub)
        hub_name = hub.name if hub else self.state.hub
        others = max(len(self.state.ledgers) - 1, 0)
        summary = FeynmanSummary(
            summary=(
                f"The network has {active}/{len(corridors)} active corridors with "
                f"average trust of {avg_trust * 100:.0f}%. {hub_name} remains the "
                f"central settlement hub, routing value to {others} other ledgers."
            ),
            complexity=complexity,
        )
        self.state.set_feynman(summary)
        return summary
