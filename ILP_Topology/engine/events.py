"""Typed topology events and the synchronous publish/subscribe bus."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Callable, ClassVar, Deque, Dict, Iterator, List, Type, Union

from ..graph.model import Claim, Observation, Route
from ..graph.types import CorridorStatus, Lens, OODAPhase

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    LEDGER_UPDATED = "LEDGER_UPDATED"
    CONNECTOR_UPDATED = "CONNECTOR_UPDATED"
    CORRIDOR_STATUS_CHANGED = "CORRIDOR_STATUS_CHANGED"
    ROUTE_CALCULATED = "ROUTE_CALCULATED"
    OBSERVATION_RECORDED = "OBSERVATION_RECORDED"
    CLAIM_VERIFIED = "CLAIM_VERIFIED"
    INVARIANT_VIOLATED = "INVARIANT_VIOLATED"
    LENS_CHANGED = "LENS_CHANGED"
    OODA_PHASE_CHANGED = "OODA_PHASE_CHANGED"


@dataclass(frozen=True)
class LedgerUpdated:
    type: ClassVar[EventType] = EventType.LEDGER_UPDATED
    ledger_id: str
    changed: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConnectorUpdated:
    type: ClassVar[EventType] = EventType.CONNECTOR_UPDATED
    connector_id: str
    changed: tuple[str, ...] = ()


@dataclass(frozen=True)
class CorridorStatusChanged:
    type: ClassVar[EventType] = EventType.CORRIDOR_STATUS_CHANGED
    corridor_id: str
    connector_id: str
    old_status: CorridorStatus
    new_status: CorridorStatus


@dataclass(frozen=True)
class RouteCalculated:
    type: ClassVar[EventType] = EventType.ROUTE_CALCULATED
    route: Route


@dataclass(frozen=True)
class ObservationRecorded:
    type: ClassVar[EventType] = EventType.OBSERVATION_RECORDED
    connector_id: str
    observation: Observation


@dataclass(frozen=True)
class ClaimVerified:
    type: ClassVar[EventType] = EventType.CLAIM_VERIFIED
    connector_id: str
    claim: Claim


@dataclass(frozen=True)
class InvariantViolated:
    type: ClassVar[EventType] = EventType.INVARIANT_VIOLATED
    invariant_id: str
    name: str


@dataclass(frozen=True)
class LensChanged:
    type: ClassVar[EventType] = EventType.LENS_CHANGED
    lens: Lens


@dataclass(frozen=True)
class OODAPhaseChanged:
    type: ClassVar[EventType] = EventType.OODA_PHASE_CHANGED
    phase: OODAPhase


Event = Union[
    LedgerUpdated,
    ConnectorUpdated,
    CorridorStatusChanged,
    RouteCalculated,
    ObservationRecorded,
    ClaimVerified,
    InvariantViolated,
    LensChanged,
    OODAPhaseChanged,
]

EVENT_CLASSES: Dict[EventType, Type[Any]] = {
    cls.type: cls
    for cls in (
        LedgerUpdated,
        ConnectorUpdated,
        CorridorStatusChanged,
        RouteCalculated,
        ObservationRecorded,
        ClaimVerified,
        InvariantViolated,
        LensChanged,
        OODAPhaseChanged,
    )
}

EventHandler = Callable[[Event], None]


def event_to_dict(event: Event) -> Dict[str, Any]:
    """Return a plain mapping for ``event`` with a ``type`` discriminator."""

    data: Dict[str, Any] = {"type": event.type.value}
    for f in fields(event):
        value = getattr(event, f.name)
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        elif isinstance(value, Enum):
            value = value.value
        elif isinstance(value, tuple):
            value = list(value)
        data[f.name] = value
    return data


def event_from_dict(data: Dict[str, Any]) -> Event:
    """Rebuild an event produced by :func:`event_to_dict`."""

    values = dict(data)
    try:
        cls = EVENT_CLASSES[EventType(values.pop("type"))]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"unknown event type in {data!r}") from exc
    if cls is CorridorStatusChanged:
        values["old_status"] = CorridorStatus(values["old_status"])
        values["new_status"] = CorridorStatus(values["new_status"])
    elif cls is RouteCalculated:
        values["route"] = Route.from_dict(values["route"])
    elif cls is ObservationRecorded:
        values["observation"] = Observation.from_dict(values["observation"])
    elif cls is ClaimVerified:
        values["claim"] = Claim(**values["claim"])
    elif cls is LensChanged:
        values["lens"] = Lens(values["lens"])
    elif cls is OODAPhaseChanged:
        values["phase"] = OODAPhase(values["phase"])
    elif "changed" in values:
        values["changed"] = tuple(values["changed"])
    return cls(**values)


class EventBus:
    """Synchronous publish/subscribe dispatcher.

    Handlers run in the publishing thread, in subscription order. A handler
    that raises is logged and skipped; the remaining handlers still receive
    the event and the publisher never sees the exception.
    """

    def __init__(self, history_size: int = 100) -> None:
        self._handlers: List[EventHandler] = []
        self.history: Deque[Event] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it."""

        self._handlers.append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

        return unsubscribe

    def publish(self, event: Event) -> None:
        self.history.append(event)
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed on %s", event.type.value)

    def replay(self, handler: EventHandler) -> int:
        """Deliver the retained history to ``handler`` and return the count."""

        events = list(self.history)
        for event in events:
            try:
                handler(event)
            except Exception:
                logger.exception("Replay handler failed on %s", event.type.value)
        return len(events)

    def clear(self) -> None:
        self.history.clear()

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._handlers)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self.history))
