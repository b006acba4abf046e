"""
adslot.types — Ad record and status enum.

AdStatus models where a slot is in its lease lifecycle:
  - LISTED   : idle, or rented but not yet confirmed (renter attached)
  - ACTIVE   : lease confirmed; freeze/finish windows run from the deal clock
  - DISPUTED : renter froze the lease; only arbitration can settle it
  - CLOSED   : delisted at creation/edit time; blocks renting and editing

Settlement always returns a slot to LISTED. CLOSED is never written by the
lease workflow itself.

String forms:
  - str(AdStatus.ACTIVE) -> "active"  (logs)
  - AdStatus.ACTIVE.code -> "ACTIVE"  (events, error payloads)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import IntEnum
from typing import Any, Dict, FrozenSet, Optional


class AdStatus(IntEnum):
    LISTED = 0
    ACTIVE = 1
    DISPUTED = 2
    CLOSED = 3

    @property
    def code(self) -> str:
        return self.name

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name.lower()

    @classmethod
    def from_value(cls, v: Any, *, default: Optional["AdStatus"] = None) -> "AdStatus":
        """
        Lenient parse from an int, an AdStatus, or a case-insensitive name.

        Raises:
            ValueError if parsing fails and no default is provided.
        """
        if isinstance(v, AdStatus):
            return v
        try:
            if isinstance(v, str):
                return cls[v.strip().upper()]
            return cls(int(v))
        except (KeyError, ValueError, TypeError):
            if default is not None:
                return default
            raise ValueError(f"unknown AdStatus: {v!r}") from None


# Statuses a slot owner may put a listing into (create and edit).
OWNER_SETTABLE_STATUSES: FrozenSet[AdStatus] = frozenset({AdStatus.LISTED, AdStatus.CLOSED})

# Statuses in which edit() is refused outright.
IMMUTABLE_STATUSES: FrozenSet[AdStatus] = frozenset({AdStatus.ACTIVE, AdStatus.CLOSED})


@dataclass(frozen=True)
class Ad:
    """
    A single leasable slot.

    Fields
    ------
    id:          dense sequence number, assigned at creation, never reused
    owner:       recorded owner address (mirrors the ownership-token holder)
    renter:      renter address, b"" when no rental is attached
    status:      AdStatus
    price:       deposit / deal value (native units, > 0)
    deal_clock:  timestamp anchor for the current cycle (0 when idle)
    length, width, height: dimensions (height may be 0)
    rating:      running average in 0..5 (0 iff rate_count == 0)
    rate_count:  number of ratings folded in
    geography:   non-empty descriptive string
    memo:        free-form note
    """
    id: int
    owner: bytes
    renter: bytes
    status: AdStatus
    price: int
    deal_clock: int
    length: int
    width: int
    height: int
    rating: int
    rate_count: int
    geography: str
    memo: str

    @property
    def is_rented(self) -> bool:
        return len(self.renter) > 0

    def with_changes(self, **changes: Any) -> "Ad":
        return replace(self, **changes)

    # ---- (de)serialization ---- #

    def to_record(self) -> Dict[str, Any]:
        """Plain mapping used by the storage codec (bytes stay bytes)."""
        d = asdict(self)
        d["status"] = int(self.status)
        return d

    @classmethod
    def from_record(cls, d: Dict[str, Any]) -> "Ad":
        return cls(
            id=int(d["id"]),
            owner=bytes(d["owner"]),
            renter=bytes(d.get("renter", b"")),
            status=AdStatus.from_value(d["status"]),
            price=int(d["price"]),
            deal_clock=int(d.get("deal_clock", 0)),
            length=int(d["length"]),
            width=int(d["width"]),
            height=int(d.get("height", 0)),
            rating=int(d.get("rating", 0)),
            rate_count=int(d.get("rate_count", 0)),
            geography=str(d["geography"]),
            memo=str(d.get("memo", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view (addresses as 0x-hex, status by name)."""
        d = asdict(self)
        d["owner"] = "0x" + self.owner.hex()
        d["renter"] = "0x" + self.renter.hex() if self.renter else None
        d["status"] = self.status.code
        return d


__all__ = [
    "AdStatus",
    "Ad",
    "OWNER_SETTABLE_STATUSES",
    "IMMUTABLE_STATUSES",
]
