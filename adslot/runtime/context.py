"""
adslot.runtime.context — CallEnv passed to every market operation.

The environment is pure data: who is calling, how much native value they
attach, and the current time. The market never reads a wall clock; every time
window is evaluated against `timestamp`, so a missed window makes later calls
fail deterministically.

Design notes
------------
- Addresses are raw bytes (any non-zero length). Hex strings (with or without
  "0x") are accepted by the helpers and normalized to bytes.
- `value` and `timestamp` are validated to be non-negative ints.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Union


class ContextError(Exception):
    """Validation or coercion failure for CallEnv."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def require_address(name: str, v: Any) -> bytes:
    addr = to_bytes(v)
    if len(addr) == 0:
        raise ContextError(f"{name} must be a non-empty address")
    return addr


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


@dataclass(frozen=True)
class CallEnv:
    """
    Per-call environment.

    Fields
    ------
    sender:    caller address
    value:     native value attached to the call (moved into the pool)
    timestamp: current time in seconds, supplied by the host
    """
    sender: bytes
    value: int = 0
    timestamp: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", require_address("sender", self.sender))
        object.__setattr__(self, "value", _require_non_negative_int("value", self.value))
        object.__setattr__(self, "timestamp", _require_non_negative_int("timestamp", self.timestamp))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CallEnv":
        return cls(
            sender=to_bytes(d.get("sender", b"")),
            value=d.get("value", 0),
            timestamp=d.get("timestamp", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sender"] = to_hex(self.sender)
        return d


__all__ = [
    "ContextError",
    "to_bytes",
    "to_hex",
    "require_address",
    "CallEnv",
]
