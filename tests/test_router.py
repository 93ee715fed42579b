import pytest

from ILP_Topology.engine import router
from ILP_Topology.engine.events import RouteCalculated
from ILP_Topology.engine.state import GraphState
from ILP_Topology.graph.types import CorridorStatus

from conftest import triangle_topology


def _state():
    ledgers, connectors = triangle_topology()
    return GraphState(ledgers, connectors, hub="H")


def test_direct_route_uses_single_corridor():
    state = _state()
    route = router.calculate_route(
        state.get_corridors(), state.connectors, "X", "Y", 50.0, hub="H"
    )
    assert route is not None
    assert [h.corridor_id for h in route.hops] == ["corr-conn-xy"]
    assert route.total_fee_bps == 10
    assert route.total_latency_ms == 100
    assert route.risk_score == pytest.approx(0.2)
    assert route.liquidity_available == 1_000_000
    assert route.amount == 50.0
    assert route.via == ()
    assert route.id.startswith("route-")


def test_hub_relay_when_direct_corridor_is_not_active():
    state = _state()
    state.set_corridor_status("corr-conn-xy", CorridorStatus.FOGGED)
    route = router.calculate_route(
        state.get_corridors(), state.connectors, "X", "Y", hub="H"
    )
    assert route is not None
    assert [h.connector_id for h in route.hops] == ["conn-xh", "conn-hy"]
    assert route.via == ("H",)
    assert route.total_fee_bps == 12
    assert route.total_latency_ms == 120
    assert route.risk_score == pytest.approx(1 - 0.9 * 0.8)
    assert route.liquidity_available == 500_000


def test_no_route_when_relay_leg_missing():
    state = _state()
    state.set_corridor_status("corr-conn-xy", CorridorStatus.INACTIVE)
    state.set_corridor_status("corr-conn-hy", CorridorStatus.EXPERIMENTAL)
    assert (
        router.calculate_route(state.get_corridors(), state.connectors, "X", "Y", hub="H")
        is None
    )


def test_reverse_direction_has_no_route():
    state = _state()
    assert (
        router.calculate_route(state.get_corridors(), state.connectors, "Y", "X", hub="H")
        is None
    )


def test_explicit_route_id():
    state = _state()
    route = router.calculate_route(
        state.get_corridors(), state.connectors, "X", "H", hub="H", route_id="route-1"
    )
    assert route.id == "route-1"


def test_engine_stores_and_announces_route(triangle):
    seen = []
    triangle.subscribe(seen.append)
    route = triangle.calculate_route("X", "Y", 10)
    assert triangle.active_route is route
    assert triangle.get_route(route.id) is route
    assert triangle.route_history == [route]
    assert triangle.get_corridor("corr-conn-xy").is_preferred_route
    assert seen == [RouteCalculated(route=route)]

    triangle.clear_route()
    assert triangle.active_route is None
    assert not triangle.get_corridor("corr-conn-xy").is_preferred_route
    assert triangle.get_route(route.id) is route


def test_engine_failed_route_emits_nothing(triangle):
    seen = []
    triangle.subscribe(seen.append)
    assert triangle.calculate_route("Y", "X") is None
    assert seen == []
    assert triangle.active_route is None


def test_route_history_is_bounded(triangle):
    for _ in range(25):
        triangle.calculate_route("X", "Y")
    assert len(triangle.route_history) == 20
