import pytest

from ILP_Topology.engine.events import (
    EventBus,
    EventType,
    InvariantViolated,
    LensChanged,
    OODAPhaseChanged,
    event_from_dict,
    event_to_dict,
)
from ILP_Topology.graph.types import Lens, OODAPhase


def test_failing_subscriber_does_not_block_others(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    event = LensChanged(lens=Lens.HEAT)
    bus.publish(event)
    assert seen == [event]
    assert "Event handler failed" in caplog.text


def test_unsubscribe_is_idempotent():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    bus.publish(LensChanged(lens=Lens.FOG))
    assert seen == []
    assert len(bus.history) == 1


def test_history_keeps_most_recent_events():
    bus = EventBus(history_size=3)
    for phase in [OODAPhase.OBSERVE, OODAPhase.ORIENT, OODAPhase.DECIDE, OODAPhase.ACT]:
        bus.publish(OODAPhaseChanged(phase=phase))
    assert [e.phase for e in bus] == [OODAPhase.ORIENT, OODAPhase.DECIDE, OODAPhase.ACT]


def test_replay_delivers_history_in_order():
    bus = EventBus()
    bus.publish(InvariantViolated(invariant_id="inv-a", name="A"))
    bus.publish(LensChanged(lens=Lens.FLOW))
    seen = []
    assert bus.replay(seen.append) == 2
    assert [e.type for e in seen] == [EventType.INVARIANT_VIOLATED, EventType.LENS_CHANGED]
    bus.clear()
    assert bus.replay(seen.append) == 0


def test_event_dict_uses_wire_names():
    data = event_to_dict(OODAPhaseChanged(phase=OODAPhase.DECIDE))
    assert data == {"type": "OODA_PHASE_CHANGED", "phase": "decide"}
    assert event_from_dict(data) == OODAPhaseChanged(phase=OODAPhase.DECIDE)


def test_unknown_event_type_rejected():
    with pytest.raises(ValueError):
        event_from_dict({"type": "NOPE"})
