"""
adslot.state.journal — journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal layered over the market storage,
the native-value balance table and the committed event log. It supports
nested checkpoints via a stack of overlays. Writes go to the top overlay;
reads consult overlays from top → base. `commit()` merges the top overlay
into the next layer (or the base state if it is the last one). `revert()`
discards the top overlay.

Every market operation runs inside exactly one outer checkpoint (see
adslot.runtime.guard). That is what makes an operation atomic: storage
writes, balance moves, ledger mints and emitted events all live in the same
overlay and vanish together on revert.

Intended usage
--------------
    j = Journal(StorageView(), {})
    j.begin()
    j.storage_set(b"seq:ad", b"\\x01")
    j.set_balance(addr, 100)
    j.stage_event(event)
    j.commit()                      # or j.revert()

Writes made while no checkpoint is open go straight to the base. That path
is only used by host/test helpers (funding accounts, restoring snapshots).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, MutableMapping, Optional, Tuple

from .storage import StorageView


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `storage`: staged storage changes. `None` means deletion for that key.
    - `balances`: staged absolute balances per address.
    - `events`: events emitted while this layer was on top.
    """

    storage: Dict[bytes, Optional[bytes]] = field(default_factory=dict)
    balances: Dict[bytes, int] = field(default_factory=dict)
    events: List[Any] = field(default_factory=list)


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    Copy-on-write journal with nested checkpoints.

    Parameters
    ----------
    storage : StorageView
        The base (persisted) key/value storage.
    balances : MutableMapping[bytes, int]
        The base native-value balance table.
    """

    def __init__(
        self,
        storage: Optional[StorageView] = None,
        balances: Optional[MutableMapping[bytes, int]] = None,
    ) -> None:
        self._base_storage = storage if storage is not None else StorageView()
        self._base_balances: MutableMapping[bytes, int] = balances if balances is not None else {}
        self._base_events: List[Any] = []
        self._layers: List[_Overlay] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._layers)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth marker."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent, or into the base if it is the last one."""
        if not self._layers:
            raise RuntimeError("journal has no open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._merge_layers(self._layers[-1], top)
        else:
            self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("journal has no open checkpoint")
        self._layers.pop()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until depth == marker - 1 (i.e. discard `marker` and above)."""
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) >= marker:
            self.revert()

    # --------------------------------------------------------------------- #
    # Storage
    # --------------------------------------------------------------------- #

    def storage_get(self, key: bytes | bytearray | memoryview, default: bytes = b"") -> bytes:
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            if key_b in layer.storage:
                v = layer.storage[key_b]
                return default if v is None else v
        return self._base_storage.get(key_b, default=default)

    def storage_set(self, key: bytes | bytearray | memoryview, value: bytes | bytearray | memoryview) -> None:
        """Stage a storage write. Empty value is a deletion."""
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        if not self._layers:
            self._base_storage.set(key_b, val_b)
            return
        self._layers[-1].storage[key_b] = val_b if val_b else None

    def storage_delete(self, key: bytes | bytearray | memoryview) -> None:
        self.storage_set(key, b"")

    def storage_items(self, prefix: bytes = b"") -> Iterator[Tuple[bytes, bytes]]:
        """Visible (key, value) pairs under `prefix`, ordered by key."""
        visible: Dict[bytes, bytes] = dict(self._base_storage.items(prefix))
        for layer in self._layers:
            for k, v in layer.storage.items():
                if not k.startswith(prefix):
                    continue
                if v is None:
                    visible.pop(k, None)
                else:
                    visible[k] = v
        for k in sorted(visible.keys()):
            yield k, visible[k]

    # --------------------------------------------------------------------- #
    # Balances
    # --------------------------------------------------------------------- #

    def balance_of(self, address: bytes | bytearray | memoryview) -> int:
        addr = _b(address, name="address")
        for layer in reversed(self._layers):
            if addr in layer.balances:
                return layer.balances[addr]
        return int(self._base_balances.get(addr, 0))

    def set_balance(self, address: bytes | bytearray | memoryview, value: int) -> None:
        addr = _b(address, name="address")
        if not isinstance(value, int) or value < 0:
            raise ValueError("balance must be a non-negative int")
        if not self._layers:
            self._base_balances[addr] = value
            return
        self._layers[-1].balances[addr] = value

    def balances(self) -> Dict[bytes, int]:
        """Visible balance table (zero balances omitted)."""
        out: Dict[bytes, int] = dict(self._base_balances)
        for layer in self._layers:
            out.update(layer.balances)
        return {a: v for a, v in out.items() if v}

    # --------------------------------------------------------------------- #
    # Events
    # --------------------------------------------------------------------- #

    def stage_event(self, event: Any) -> None:
        if not self._layers:
            self._base_events.append(event)
            return
        self._layers[-1].events.append(event)

    def committed_events(self) -> List[Any]:
        return list(self._base_events)

    def pending_events(self) -> List[Any]:
        out: List[Any] = []
        for layer in self._layers:
            out.extend(layer.events)
        return out

    # --------------------------------------------------------------------- #
    # Internal merge/apply
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        dst.storage.update(src.storage)
        dst.balances.update(src.balances)
        dst.events.extend(src.events)

    def _apply_to_base(self, layer: _Overlay) -> None:
        for k, v in layer.storage.items():
            if v is None:
                self._base_storage.delete(k)
            else:
                self._base_storage.set(k, v)
        for addr, bal in layer.balances.items():
            if bal:
                self._base_balances[addr] = bal
            else:
                self._base_balances.pop(addr, None)
        self._base_events.extend(layer.events)

    # --------------------------------------------------------------------- #
    # Introspection
    # --------------------------------------------------------------------- #

    @property
    def base_storage(self) -> StorageView:
        return self._base_storage


__all__ = ["Journal"]
