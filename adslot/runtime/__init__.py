"""
adslot.runtime — call environment, events, treasury and the call guard.
"""

from .context import CallEnv, ContextError, to_bytes, to_hex
from .events import Event, EventEmitter
from .guard import CallGuard
from .treasury import ReceiveHook, Treasury

__all__ = [
    "CallEnv",
    "ContextError",
    "to_bytes",
    "to_hex",
    "Event",
    "EventEmitter",
    "CallGuard",
    "Treasury",
    "ReceiveHook",
]
