"""
adslot.runtime.events — market events staged in the journal.

Events are only observable once the operation that emitted them commits: the
emitter stages them into the current journal overlay, and a revert discards
them together with every other effect of the call.

Event names are short ASCII bytes (b"AdRented"); argument keys are
identifier-like strings; values are bytes, bool or int.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..state.journal import Journal

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_INT_BITS = 256

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EventError(ValueError):
    """Malformed event name or arguments (a programming error, not a market error)."""


@dataclass(frozen=True)
class Event:
    name: bytes
    args: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        enc: Dict[str, Any] = {}
        for k, v in self.args.items():
            enc[k] = "0x" + v.hex() if isinstance(v, (bytes, bytearray)) else v
        return {"name": self.name.decode("ascii"), "args": enc}


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes")
    b = bytes(name)
    if not b or len(b) > MAX_EVENT_NAME_BYTES:
        raise EventError(f"event name length out of range: {len(b)}")
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key or len(key) > MAX_KEY_LEN or not _KEY_RE.match(key):
        raise EventError(f"invalid event key: {key!r}")
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    # bool is a subclass of int, so check it before int.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range")
        return int(value)
    raise EventError(f"unsupported event arg type: {type(value).__name__}")


class EventEmitter:
    """Validates events and stages them into a journal."""

    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    def emit(self, name: bytes, args: Mapping[str, Any]) -> Event:
        ev = Event(_check_name(name), {_check_key(k): _check_value(v) for k, v in args.items()})
        self._journal.stage_event(ev)
        return ev

    def committed(self, name: Optional[bytes] = None) -> List[Event]:
        events = self._journal.committed_events()
        if name is None:
            return events
        return [e for e in events if e.name == name]


__all__ = ["Event", "EventEmitter", "EventError", "MAX_EVENT_NAME_BYTES", "MAX_KEY_LEN", "MAX_INT_BITS"]
