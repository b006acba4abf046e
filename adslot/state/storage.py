"""
adslot.state.storage — market key/value storage.

A deterministic bytes-in / bytes-out store for the market's own state. Unlike
a chain-wide store there is a single namespace (the market), so keys are not
qualified by an address; callers use short prefixes instead ("ad:", "own:",
"rwd:", "cfg:", "esc:").

"Zero means absent": storing an empty value deletes the key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, MutableMapping, Optional, Tuple


def _as_bytes(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


@dataclass
class StorageView:
    """
    Parameters
    ----------
    backend :
        Optional external mapping {key: value}. If not provided, an internal
        dict is used.
    """
    backend: Optional[MutableMapping[bytes, bytes]] = None

    _store: MutableMapping[bytes, bytes] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._store = self.backend if self.backend is not None else {}

    def get(self, key: bytes | bytearray | memoryview, default: bytes = b"") -> bytes:
        return self._store.get(_as_bytes(key, name="key"), default)

    def has(self, key: bytes | bytearray | memoryview) -> bool:
        return _as_bytes(key, name="key") in self._store

    def set(self, key: bytes | bytearray | memoryview, value: bytes | bytearray | memoryview) -> None:
        key_b = _as_bytes(key, name="key")
        val_b = _as_bytes(value, name="value")
        if len(val_b) == 0:
            self._store.pop(key_b, None)
            return
        self._store[key_b] = val_b

    def delete(self, key: bytes | bytearray | memoryview) -> bool:
        """Returns True if a key existed and was removed."""
        return self._store.pop(_as_bytes(key, name="key"), None) is not None

    def items(self, prefix: bytes = b"") -> Iterator[Tuple[bytes, bytes]]:
        """Iterate (key, value) pairs under `prefix`, ordered by key."""
        for k in sorted(self._store.keys()):
            if k.startswith(prefix):
                yield k, self._store[k]


__all__ = ["StorageView"]
