"""
adslot.market.registry — Ad records, the id sequence and listing edits.

The registry is the only writer of Ad records. Ids are dense, start at 0 and
are never reused; there is no delete. Creating a listing also mints the
slot's ownership token to the creator, and `transfer_ad` moves that token and
the recorded owner together so the two never disagree.

Validation shared by create and edit:
  - geography non-empty; integer length > 0, width > 0, height >= 0
                                                  (InvalidGeography)
  - integer price > 0                             (IncorrectDeposit)
  - status in {LISTED, CLOSED}                    (InvalidInitialStatus)
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from ..errors import (
    AdNotFound,
    CannotEditImmutable,
    IncorrectDeposit,
    InvalidGeography,
    InvalidInitialStatus,
    NotAdOwner,
    NotSpaceOwner,
)
from ..ledgers import OwnershipLedger
from ..runtime.events import EventEmitter
from ..state.codec import K_NEXT_ID, P_AD, ad_key, bytes_to_u64, decode_ad, encode_ad, u64_to_bytes
from ..state.journal import Journal
from ..types import IMMUTABLE_STATUSES, OWNER_SETTABLE_STATUSES, Ad, AdStatus

log = logging.getLogger(__name__)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _check_listing(price: int, length: int, width: int, height: int, geography: str) -> None:
    if not all(_is_int(v) for v in (length, width, height)):
        raise InvalidGeography(
            "dimensions must be integers", length=repr(length), width=repr(width), height=repr(height)
        )
    if not geography or length <= 0 or width <= 0 or height < 0:
        raise InvalidGeography(geography=geography, length=length, width=width, height=height)
    if not _is_int(price):
        raise IncorrectDeposit("price must be an integer", price=repr(price))
    if price <= 0:
        raise IncorrectDeposit("price must be positive", price=price)


def _settable_status(status: Any) -> AdStatus:
    try:
        st = AdStatus.from_value(status)
    except ValueError:
        raise InvalidInitialStatus(status=repr(status)) from None
    if st not in OWNER_SETTABLE_STATUSES:
        raise InvalidInitialStatus(status=st.code)
    return st


class ListingRegistry:
    def __init__(self, journal: Journal, ownership: OwnershipLedger, emitter: EventEmitter) -> None:
        self._journal = journal
        self._ownership = ownership
        self._events = emitter

    # ------------------------------------------------------------------ reads

    def current_id(self) -> int:
        """Id the next `create` will allocate."""
        return bytes_to_u64(self._journal.storage_get(K_NEXT_ID))

    def find(self, ad_id: int) -> Ad:
        raw = self._journal.storage_get(ad_key(ad_id)) if 0 <= ad_id < self.current_id() else b""
        if not raw:
            raise AdNotFound(ad_id=ad_id)
        return decode_ad(raw)

    def ads(self) -> Iterator[Ad]:
        """All listings in id order."""
        for _, raw in self._journal.storage_items(P_AD):
            yield decode_ad(raw)

    def store(self, ad: Ad) -> None:
        self._journal.storage_set(ad_key(ad.id), encode_ad(ad))

    # ----------------------------------------------------------------- writes

    def create(
        self,
        creator: bytes,
        *,
        price: int,
        length: int,
        width: int,
        height: int = 0,
        geography: str,
        memo: str = "",
        status: Any = AdStatus.LISTED,
    ) -> Ad:
        _check_listing(price, length, width, height, geography)
        st = _settable_status(status)

        ad_id = self.current_id()
        ad = Ad(
            id=ad_id,
            owner=bytes(creator),
            renter=b"",
            status=st,
            price=price,
            deal_clock=0,
            length=length,
            width=width,
            height=height,
            rating=0,
            rate_count=0,
            geography=geography,
            memo=memo,
        )
        self.store(ad)
        self._journal.storage_set(K_NEXT_ID, u64_to_bytes(ad_id + 1))
        self._ownership.mint(creator, ad_id)
        self._events.emit(
            b"AdCreated",
            {"id": ad_id, "owner": creator, "price": price, "status": int(st)},
        )
        log.debug("registry: created ad %d (%s) price=%d", ad_id, st, price)
        return ad

    def _require_owner(self, caller: bytes, ad: Ad) -> None:
        if self._ownership.balance_of(caller, ad.id) == 0:
            raise NotAdOwner(ad_id=ad.id, caller=caller)
        if ad.owner != caller:
            raise NotSpaceOwner(ad_id=ad.id, caller=caller)

    def edit(
        self,
        caller: bytes,
        ad_id: int,
        *,
        price: int,
        length: int,
        width: int,
        height: int = 0,
        geography: str,
        memo: str = "",
        status: Any = AdStatus.LISTED,
    ) -> Ad:
        """
        Overwrite the mutable listing fields.

        Refused while the slot is ACTIVE or CLOSED, and while a renter is
        attached (the escrowed deposit must keep matching `price`). The new
        status is limited to LISTED or CLOSED, as for create.
        """
        ad = self.find(ad_id)
        self._require_owner(caller, ad)
        if ad.status in IMMUTABLE_STATUSES or ad.is_rented:
            raise CannotEditImmutable(ad_id=ad_id, status=ad.status.code, rented=ad.is_rented)
        _check_listing(price, length, width, height, geography)
        st = _settable_status(status)

        updated = ad.with_changes(
            price=price,
            length=length,
            width=width,
            height=height,
            geography=geography,
            memo=memo,
            status=st,
        )
        self.store(updated)
        self._events.emit(b"AdEdited", {"id": ad_id, "price": price, "status": int(st)})
        log.debug("registry: edited ad %d (%s)", ad_id, st)
        return updated

    def transfer(self, caller: bytes, ad_id: int, to: bytes) -> Ad:
        """Hand an idle slot to a new owner; token and record move together."""
        if not to:
            raise ValueError("recipient must be non-empty")
        ad = self.find(ad_id)
        self._require_owner(caller, ad)
        if ad.is_rented or ad.status in (AdStatus.ACTIVE, AdStatus.DISPUTED):
            raise CannotEditImmutable("slot has a lease in progress", ad_id=ad_id, status=ad.status.code)
        self._ownership.transfer(caller, to, ad_id)
        updated = ad.with_changes(owner=bytes(to))
        self.store(updated)
        self._events.emit(b"AdTransferred", {"id": ad_id, "from_": caller, "to": to})
        log.debug("registry: ad %d transferred %s -> %s", ad_id, caller.hex(), bytes(to).hex())
        return updated


__all__ = ["ListingRegistry"]
