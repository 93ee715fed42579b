"""Topology engine: the composition root for state, loop, router and events."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Mapping

import numpy as np

from invariants import checks
from telemetry.rolling import TickTelemetry

from ..config import Config
from ..graph import seed as seed_table
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
)
from ..graph.types import CorridorStatus, Lens, OODAPhase
from . import protocol, router
from .events import (
    ClaimVerified,
    ConnectorUpdated,
    Event,
    EventBus,
    EventHandler,
    InvariantViolated,
    LedgerUpdated,
    LensChanged,
    ObservationRecorded,
    RouteCalculated,
    event_to_dict,
)
from .invariants import Invariant, InvariantEngine, default_invariants
from .logging.logger import flush_metrics, log_record
from .ooda import CycleReport, CycleSettings, OODACycle
from .runner import LoopRunner
from .state import GraphState

logger = logging.getLogger(__name__)


def settings_from_config() -> CycleSettings:
    """Build :class:`CycleSettings` from the current ``Config`` values."""

    th = Config.thresholds
    low, high = Config.latency_jitter
    return CycleSettings(
        observation_probability=Config.observation_probability,
        observation_confidence=Config.observation_confidence,
        latency_jitter=(float(low), float(high)),
        thickness_reference=Config.thickness_reference,
        base_mass=Config.base_mass,
        mass_per_connector=Config.mass_per_connector,
        default_success_rate=Config.default_success_rate,
        fog_trust=th["fog_trust"],
        active_trust=th["active_trust"],
        healthy_trust=th["healthy_trust"],
        healthy_max_risk_flags=th["healthy_max_risk_flags"],
        simple_trust=th["simple_trust"],
        moderate_trust=th["moderate_trust"],
    )


class TopologyEngine:
    """Live model of ledgers and connectors maintained by the OODA loop.

    Parameters
    ----------
    ledgers, connectors:
        Topology to load. Both default to the built-in seed table.
    hub:
        Ledger id used for two-hop relay routes. Defaults to
        ``Config.hub_ledger``.
    interval_ms:
        Timer interval used by :meth:`start_loop` when none is given.
    seed:
        Seed for the generator behind simulated telemetry and placeholder
        volumes. Defaults to ``Config.run_seed``.
    settings:
        Cycle tunables; built from ``Config`` when omitted.
    invariants:
        Invariants to evaluate; the four standard ones when omitted.

    Every public method runs under one re-entrant lock, so a tick always
    completes before another tick or an external mutation starts.
    Subscribers run synchronously in the thread that caused the event.
    """

    def __init__(
        self,
        ledgers: Iterable[Ledger] | None = None,
        connectors: Iterable[Connector] | None = None,
        *,
        hub: str | None = None,
        interval_ms: float | None = None,
        seed: int | None = None,
        settings: CycleSettings | None = None,
        invariants: Iterable[Invariant] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        seed_value = seed if seed is not None else Config.run_seed
        self.rng = np.random.default_rng(seed_value)
        self.settings = settings or settings_from_config()
        self.state = GraphState(
            ledgers if ledgers is not None else seed_table.seed_ledgers(),
            connectors if connectors is not None else seed_table.seed_connectors(),
            hub=hub or Config.hub_ledger,
            lens_defaults=Config.lens_defaults,
            active_lens=Config.default_lens,
            route_history_size=Config.route_history_size,
            thickness_reference=self.settings.thickness_reference,
            rng=self.rng,
        )
        self.bus = EventBus(history_size=Config.event_history_size)
        self.invariant_engine = InvariantEngine(
            self.state,
            invariants
            if invariants is not None
            else default_invariants(Config.thresholds["visible_risk_trust"]),
        )
        self.cycle = OODACycle(self.state, self._emit, self.settings, self.rng)
        self.runner = LoopRunner(self.tick, interval_ms or Config.ooda_interval_ms)
        self.telemetry = TickTelemetry(max_points=Config.telemetry_points)
        self.tick_count = 0
        self.invariant_violations: List[str] = []

    # ---- events ----

    def _emit(self, event: Event) -> None:
        if isinstance(event, InvariantViolated):
            self.invariant_violations.append(event.name)
        log_record(
            "event", event.type.value, tick=self.tick_count, value=event_to_dict(event)
        )
        self.bus.publish(event)

    def subscribe(self, handler: EventHandler):
        """Register ``handler`` for every future event; returns an unsubscribe callable."""

        return self.bus.subscribe(handler)

    def events(self) -> List[Event]:
        """Retained event history, oldest first."""

        with self._lock:
            return list(self.bus.history)

    def replay(self, handler: EventHandler) -> int:
        with self._lock:
            return self.bus.replay(handler)

    def clear_events(self) -> None:
        with self._lock:
            self.bus.clear()
            self.invariant_violations.clear()

    def export_events(self) -> bytes:
        """Retained history as a msgpack ``EventHistory`` message."""

        with self._lock:
            return protocol.pack_history(self.bus.history)

    @staticmethod
    def replay_packed(raw: bytes, handler: EventHandler) -> int:
        """Decode an exported history and feed it to ``handler`` in order."""

        events = protocol.unpack_history(raw)
        for event in events:
            handler(event)
        return len(events)

    # ---- control loop ----

    def tick(self) -> CycleReport:
        """Run one full cycle: four phases, invariant check, narrative."""

        with self._lock:
            self.tick_count += 1
            report = self.cycle.run()
            self.check_invariants()
            summary = self.cycle.narrate()
            self._record_tick(report, summary)
            return report

    def _record_tick(self, report: CycleReport, summary: FeynmanSummary) -> None:
        corridors = self.state.get_corridors()
        active = sum(1 for c in corridors if c.status is CorridorStatus.ACTIVE)
        trusts = [c.trust_score for c in self.state.get_connectors()]
        counters = {
            "active_corridors": active,
            "avg_trust": float(np.mean(trusts)) if trusts else 0.0,
            "observations": len(report.observations),
            "status_changes": len(report.status_changes),
            "risky_connectors": report.risky,
        }
        results = self.invariant_engine.results()
        self.telemetry.record(counters=counters, invariants=checks.from_results(results))
        log_record(
            "tick",
            "ooda_tick",
            tick=self.tick_count,
            value={
                **counters,
                "complexity": summary.complexity.value,
                "violated": [k for k, ok in results.items() if not ok],
            },
        )
        flush_metrics(self.tick_count)
        logger.debug(
            "Tick %d: %d/%d corridors active, %d status changes",
            self.tick_count,
            active,
            len(corridors),
            len(report.status_changes),
        )

    def check_invariants(self) -> List[Invariant]:
        """Evaluate invariants now and publish any new violations."""

        with self._lock:
            newly = self.invariant_engine.evaluate()
            for inv in newly:
                self._emit(InvariantViolated(invariant_id=inv.id, name=inv.name))
            return newly

    def start_loop(self, interval_ms: float | None = None) -> bool:
        return self.runner.start(interval_ms)

    def stop_loop(self) -> bool:
        return self.runner.stop()

    @property
    def loop_running(self) -> bool:
        return self.runner.running

    # ---- routing ----

    def calculate_route(
        self, from_ledger: str, to_ledger: str, amount: float = 0.0
    ) -> Route | None:
        """Compute, cache and announce a direct or hub-relay route.

        Returns ``None`` when no path exists; nothing is stored or emitted.
        """

        with self._lock:
            route = router.calculate_route(
                self.state.get_corridors(),
                self.state.connectors,
                from_ledger,
                to_ledger,
                amount,
                hub=self.state.hub,
            )
            if route is None:
                logger.debug("No route from %s to %s", from_ledger, to_ledger)
                return None
            self.state.store_route(route)
            self._emit(RouteCalculated(route=route))
            return route

    def clear_route(self) -> None:
        with self._lock:
            self.state.clear_route()

    @property
    def active_route(self) -> Route | None:
        return self.state.active_route

    @property
    def route_history(self) -> List[Route]:
        with self._lock:
            return list(self.state.route_history)

    def get_route(self, route_id: str) -> Route | None:
        return self.state.get_route(route_id)

    # ---- lenses ----

    def set_active_lens(self, lens: Lens | str) -> Lens:
        with self._lock:
            active = self.state.set_active_lens(lens)
            self._emit(LensChanged(lens=active))
            return active

    def update_lens_config(
        self, lens: Lens | str, partial: Mapping[str, Any] | None = None, **changes: Any
    ) -> LensConfig:
        with self._lock:
            merged = {**(partial or {}), **changes}
            return self.state.update_lens_config(lens, merged)

    @property
    def active_lens(self) -> Lens:
        return self.state.active_lens

    @property
    def lens_configs(self) -> dict[Lens, LensConfig]:
        return dict(self.state.lens_configs)

    def visible_ledgers(self) -> List[Ledger]:
        with self._lock:
            types = set(self.state.lens_configs[self.state.active_lens].filters.ledger_types)
            return [l for l in self.state.get_ledgers() if not types or l.type in types]

    def visible_connectors(self) -> List[Connector]:
        with self._lock:
            f = self.state.lens_configs[self.state.active_lens].filters
            return self.state.filter_connectors(f.min_trust, f.risk_flags)

    def visible_corridors(self) -> List[Corridor]:
        with self._lock:
            f = self.state.lens_configs[self.state.active_lens].filters
            return self.state.filter_corridors(f.status, f.min_volume)

    # ---- entity mutation ----

    def update_connector(self, connector_id: str, **changes: Any) -> Connector | None:
        with self._lock:
            conn = self.state.update_connector(connector_id, **changes)
            if conn is not None:
                self._emit(
                    ConnectorUpdated(connector_id=conn.id, changed=tuple(sorted(changes)))
                )
            return conn

    def update_ledger(self, ledger_id: str, **changes: Any) -> Ledger | None:
        with self._lock:
            ledger = self.state.update_ledger(ledger_id, **changes)
            if ledger is not None:
                self._emit(LedgerUpdated(ledger_id=ledger.id, changed=tuple(sorted(changes))))
            return ledger

    def record_observation(
        self, connector_id: str, observation: Observation
    ) -> Observation | None:
        with self._lock:
            if not self.state.add_observation(connector_id, observation):
                return None
            self._emit(ObservationRecorded(connector_id=connector_id, observation=observation))
            return observation

    def verify_claim(self, connector_id: str, claim_id: str) -> Claim | None:
        with self._lock:
            claim = self.state.verify_claim(connector_id, claim_id)
            if claim is not None:
                self._emit(ClaimVerified(connector_id=connector_id, claim=claim))
            return claim

    # ---- queries ----

    def get_ledgers(self) -> List[Ledger]:
        with self._lock:
            return self.state.get_ledgers()

    def get_ledger(self, ledger_id: str) -> Ledger | None:
        return self.state.get_ledger(ledger_id)

    def get_connectors(self) -> List[Connector]:
        with self._lock:
            return self.state.get_connectors()

    def get_connector(self, connector_id: str) -> Connector | None:
        return self.state.get_connector(connector_id)

    def get_corridors(self) -> List[Corridor]:
        with self._lock:
            return self.state.get_corridors()

    def get_corridor(self, corridor_id: str) -> Corridor | None:
        return self.state.get_corridor(corridor_id)

    @property
    def ooda(self) -> OODAState:
        return self.state.ooda

    @property
    def phase(self) -> OODAPhase:
        return self.state.ooda.current_phase

    @property
    def feynman(self) -> FeynmanSummary:
        return self.state.feynman

    @property
    def invariants(self) -> List[Invariant]:
        return list(self.invariant_engine.invariants)

    def violated_invariants(self) -> List[str]:
        """Names of the invariants currently violated."""

        return [inv.name for inv in self.invariant_engine.violated]

    def summary(self) -> dict[str, Any]:
        """Plain mapping of the narrative state for display or export."""

        ooda = self.state.ooda
        return {
            "tick": self.tick_count,
            "phase": ooda.current_phase.value,
            "observation": ooda.last_observation,
            "orientation": ooda.last_orientation,
            "decision": ooda.last_decision,
            "action": ooda.last_action,
            "feynman": self.state.feynman.summary,
            "complexity": self.state.feynman.complexity.value,
            "active_lens": self.state.active_lens.value,
            "violated_invariants": self.violated_invariants(),
        }

