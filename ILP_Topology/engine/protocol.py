"""MessagePack framing for topology events.

Payloads carry a ``type`` discriminator and a ``v`` version field. Unknown
versions or missing fields raise ``ValueError``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

import msgpack  # type: ignore[import-untyped]

from .events import Event, event_from_dict, event_to_dict

EVENT_VERSION = 1
HISTORY_VERSION = 1


def _check(msg: Any, kind: str, version: int) -> Dict[str, Any]:
    if not isinstance(msg, dict):
        raise ValueError(f"expected a {kind} mapping")
    if msg.get("type") != kind:
        raise ValueError(f"expected type '{kind}'")
    if "v" not in msg:
        raise ValueError("missing 'v' field")
    if msg["v"] != version:
        raise ValueError(f"unsupported {kind} version: {msg['v']}")
    return msg


def pack_event(event: Event) -> bytes:
    """Return msgpack-encoded ``TopologyEvent`` message."""
    payload = {"type": "TopologyEvent", "v": EVENT_VERSION, "event": event_to_dict(event)}
    return msgpack.packb(payload, use_bin_type=True)


def unpack_event(raw: bytes) -> Event:
    """Decode a ``TopologyEvent`` message ensuring version compatibility."""
    msg = _check(msgpack.unpackb(raw, raw=False), "TopologyEvent", EVENT_VERSION)
    if "event" not in msg:
        raise ValueError("missing 'event' field")
    return event_from_dict(msg["event"])


def pack_history(events: Iterable[Event]) -> bytes:
    """Return msgpack-encoded ``EventHistory`` message preserving order."""
    payload = {
        "type": "EventHistory",
        "v": HISTORY_VERSION,
        "events": [event_to_dict(e) for e in events],
    }
    return msgpack.packb(payload, use_bin_type=True)


def unpack_history(raw: bytes) -> List[Event]:
    """Decode an ``EventHistory`` message into events in emission order."""
    msg = _check(msgpack.unpackb(raw, raw=False), "EventHistory", HISTORY_VERSION)
    return [event_from_dict(item) for item in msg.get("events", [])]
