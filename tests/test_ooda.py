import pytest

from ILP_Topology.engine.events import CorridorStatusChanged, EventType, OODAPhaseChanged
from ILP_Topology.engine.ooda import CycleSettings
from ILP_Topology.engine.topology import TopologyEngine
from ILP_Topology.graph import derive
from ILP_Topology.graph.types import Complexity, CorridorStatus, OODAPhase

from conftest import make_connector, make_ledger, triangle_topology


def test_phases_emitted_in_order_with_narrative_set(triangle):
    seen = []

    def capture(event):
        if isinstance(event, OODAPhaseChanged):
            seen.append((event.phase, triangle.ooda.current_phase))

    triangle.subscribe(capture)
    triangle.tick()
    assert [p for p, _ in seen] == [
        OODAPhase.OBSERVE,
        OODAPhase.ORIENT,
        OODAPhase.DECIDE,
        OODAPhase.ACT,
    ]
    assert all(p is current for p, current in seen)
    assert triangle.phase is OODAPhase.ACT
    assert triangle.ooda.last_observation == "No new observations"
    assert triangle.ooda.last_decision == "No status changes"
    assert triangle.ooda.last_action == "Visual properties updated"
    assert "1 connected islands" in triangle.ooda.last_orientation


def test_low_trust_fogs_corridor_once(triangle):
    triangle.update_connector("conn-xy", trust_score=0.2)
    seen = []
    triangle.subscribe(seen.append)
    triangle.tick()
    triangle.tick()

    changes = [e for e in seen if isinstance(e, CorridorStatusChanged)]
    assert changes == [
        CorridorStatusChanged(
            corridor_id="corr-conn-xy",
            connector_id="conn-xy",
            old_status=CorridorStatus.ACTIVE,
            new_status=CorridorStatus.FOGGED,
        )
    ]
    assert triangle.get_corridor("corr-conn-xy").status is CorridorStatus.FOGGED
    assert "Fogging CONN-XY due to low trust" in triangle.ooda.last_decision

    route = triangle.calculate_route("X", "Y")
    assert route.via == ("H",)


def test_status_change_published_between_orient_and_decide(triangle):
    triangle.update_connector("conn-hy", liquidity="depleted")
    order = []
    triangle.subscribe(
        lambda e: order.append(
            e.phase.value if e.type is EventType.OODA_PHASE_CHANGED else e.type.value
        )
    )
    triangle.tick()
    assert order[:4] == ["observe", "orient", "CORRIDOR_STATUS_CHANGED", "decide"]
    assert triangle.get_corridor("corr-conn-hy").status is CorridorStatus.INACTIVE


def test_act_rederives_visuals_from_connectors(triangle):
    triangle.update_connector("conn-xh", liquidity_depth=250_000_000, uptime_percent=50)
    triangle.tick()
    for corr in triangle.get_corridors():
        conn = triangle.get_connector(corr.connector_id)
        assert corr.thickness == derive.thickness(conn.liquidity_depth)
        assert corr.glow == pytest.approx(
            derive.glow(conn.trust_score, derive.success_rate(conn))
        )
        assert corr.risk_fog == conn.risk_flags
        assert corr.avg_settlement_time_ms == conn.latency_ms
    xh = triangle.get_corridor("corr-conn-xh")
    assert xh.thickness == 1.0
    assert xh.glow == pytest.approx(0.45)


def test_missing_uptime_falls_back_to_default_success_rate(quiet_settings):
    ledgers = [make_ledger("A"), make_ledger("B")]
    conn = make_connector("conn-ab", "A", "B", trust_score=0.5)
    conn.uptime_percent = None
    engine = TopologyEngine(ledgers, [conn], hub="A", settings=quiet_settings)
    engine.tick()
    corr = engine.get_corridor("corr-conn-ab")
    assert corr.success_rate is None
    assert corr.glow == pytest.approx(0.45)


def test_ledger_mass_counts_incident_connectors(triangle):
    triangle.tick()
    assert triangle.get_ledger("X").mass == 60.0
    assert triangle.get_ledger("H").mass == 60.0
    assert triangle.get_ledger("Y").mass == 60.0


def test_observe_synthesises_latency_samples():
    ledgers, connectors = triangle_topology()
    engine = TopologyEngine(
        ledgers,
        connectors,
        hub="H",
        seed=3,
        settings=CycleSettings(observation_probability=1.0, latency_jitter=(1.0, 1.0)),
    )
    seen = []
    engine.subscribe(seen.append)
    report = engine.tick()
    assert len(report.observations) == 3
    for conn in engine.get_connectors():
        assert len(conn.observations) == 1
        obs = conn.observations[0]
        assert obs.data["latency_ms"] == pytest.approx(conn.latency_ms)
        assert conn.last_active == obs.timestamp
    assert not any(e.type is EventType.OBSERVATION_RECORDED for e in seen)
    assert engine.ooda.last_observation.startswith("Latency observation on")


def test_narrative_complexity_buckets(triangle):
    triangle.tick()
    assert triangle.feynman.complexity is Complexity.SIMPLE
    assert "3/3 active corridors" in triangle.feynman.summary
    assert "Ledger H remains the central settlement hub" in triangle.feynman.summary
    assert "2 other ledgers" in triangle.feynman.summary

    triangle.update_connector("conn-xh", trust_score=0.4)
    triangle.update_connector("conn-hy", trust_score=0.4)
    triangle.tick()
    assert triangle.feynman.complexity is Complexity.MODERATE

    triangle.update_connector("conn-xy", trust_score=0.1)
    triangle.tick()
    assert triangle.feynman.complexity is Complexity.COMPLEX


def test_seed_topology_first_tick(seeded):
    report = seeded.tick()
    assert report.status_changes == []
    assert report.islands == 2
    statuses = {c.id: c.status for c in seeded.get_corridors()}
    assert statuses["corr-conn-xrpl-sol"] is CorridorStatus.EXPERIMENTAL
    assert statuses["corr-conn-swift-fed"] is CorridorStatus.ACTIVE
    assert seeded.get_ledger("xrpl").mass == 30.0 + 3 * 15.0


def test_trust_drop_after_active_tick_fogs_corridor(quiet_settings):
    ledgers, connectors = triangle_topology()
    connectors[0] = make_connector("conn-xy", "X", "Y", trust_score=0.9)
    engine = TopologyEngine(ledgers, connectors, hub="H", settings=quiet_settings)
    seen = []
    engine.subscribe(seen.append)

    engine.tick()
    assert engine.get_corridor("corr-conn-xy").status is CorridorStatus.ACTIVE

    engine.update_connector("conn-xy", trust_score=0.2)
    engine.tick()
    assert engine.get_corridor("corr-conn-xy").status is CorridorStatus.FOGGED
    changes = [e for e in seen if e.type is EventType.CORRIDOR_STATUS_CHANGED]
    assert len(changes) == 1
    assert changes[0].corridor_id == "corr-conn-xy"
    assert changes[0].old_status is CorridorStatus.ACTIVE
    assert changes[0].new_status is CorridorStatus.FOGGED
