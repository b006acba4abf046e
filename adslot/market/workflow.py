"""
adslot.market.workflow — the lease state machine.

    LISTED --rent--> LISTED(renter) --confirm--> ACTIVE --finish--> LISTED
                                                   |
                                                 freeze
                                                   v
                                               DISPUTED --unfreeze--> LISTED

Windows (MarketConfig, seconds), anchored to `Ad.deal_clock`:

  owner_grace_window      renter may confirm only once now > rent clock + window
  renter_priority_window  only the renter may finish while now <= confirm clock
                          + window; only the owner may finish after it
  freeze_window           renter may freeze while now <= confirm clock + window

Settlement (finish, unfreeze) releases the deposit's reservation, pays each
leg from the pool and resets the slot to LISTED with no renter and a zero
deal clock. Any failure after that point raises, and the call guard discards
the whole operation.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from ..config import MarketConfig
from ..errors import (
    AlreadyRented,
    FreezeWindowExpired,
    IncorrectDeposit,
    InvalidStatus,
    NotAdRenter,
    NotAuthorized,
    NotHosting,
)
from ..ledgers import AccessGate, RewardLedger, require_administrator
from ..runtime.context import CallEnv
from ..runtime.events import EventEmitter
from ..types import Ad, AdStatus
from .escrow import EscrowAccount, Leg, share
from .registry import ListingRegistry

log = logging.getLogger(__name__)


class LeaseWorkflow:
    def __init__(
        self,
        registry: ListingRegistry,
        escrow: EscrowAccount,
        rewards: RewardLedger,
        gate: AccessGate,
        emitter: EventEmitter,
        config: MarketConfig,
        fee_address: Callable[[], bytes],
    ) -> None:
        self._registry = registry
        self._escrow = escrow
        self._rewards = rewards
        self._gate = gate
        self._events = emitter
        self._cfg = config
        self._fee_address = fee_address

    # ------------------------------------------------------------------ rent

    def rent(self, env: CallEnv, ad_id: int) -> Ad:
        ad = self._registry.find(ad_id)
        if ad.status != AdStatus.LISTED:
            raise InvalidStatus(ad_id=ad_id, status=ad.status.code)
        if ad.is_rented:
            raise AlreadyRented(ad_id=ad_id)
        if env.value != ad.price:
            raise IncorrectDeposit(ad_id=ad_id, expected=ad.price, supplied=env.value)

        self._escrow.reserve(ad.price)
        updated = ad.with_changes(renter=env.sender, deal_clock=env.timestamp)
        self._registry.store(updated)
        self._events.emit(
            b"AdRented",
            {"id": ad_id, "renter": env.sender, "deposit": ad.price, "clock": env.timestamp},
        )
        log.debug("workflow: ad %d rented by %s", ad_id, env.sender.hex())
        return updated

    # --------------------------------------------------------------- confirm

    def confirm(self, env: CallEnv, ad_id: int) -> Ad:
        ad = self._registry.find(ad_id)
        if ad.status != AdStatus.LISTED or not ad.is_rented:
            raise NotHosting(ad_id=ad_id, status=ad.status.code)
        owner_ok = env.sender == ad.owner
        renter_ok = (
            env.sender == ad.renter
            and env.timestamp > ad.deal_clock + self._cfg.owner_grace_window
        )
        if not (owner_ok or renter_ok):
            raise NotAuthorized("confirm not allowed for caller at this time", ad_id=ad_id)

        reward = share(ad.price, self._cfg.reward_pct)
        half = reward // 2
        self._rewards.mint(ad.renter, half)
        self._rewards.mint(ad.owner, half)

        updated = ad.with_changes(status=AdStatus.ACTIVE, deal_clock=env.timestamp)
        self._registry.store(updated)
        self._events.emit(
            b"AdConfirmed",
            {"id": ad_id, "by": env.sender, "reward_each": half, "clock": env.timestamp},
        )
        log.debug("workflow: ad %d confirmed, reward %d each", ad_id, half)
        return updated

    # ---------------------------------------------------------------- freeze

    def freeze(self, env: CallEnv, ad_id: int) -> Ad:
        ad = self._registry.find(ad_id)
        if not ad.is_rented or env.sender != ad.renter:
            raise NotAdRenter(ad_id=ad_id, caller=env.sender)
        if ad.status != AdStatus.ACTIVE:
            raise InvalidStatus(ad_id=ad_id, status=ad.status.code)
        deadline = ad.deal_clock + self._cfg.freeze_window
        if env.timestamp > deadline:
            raise FreezeWindowExpired(ad_id=ad_id, deadline=deadline, now=env.timestamp)
        fee = share(ad.price, self._cfg.freeze_fee_pct)
        if env.value != fee:
            raise IncorrectDeposit("freeze fee mismatch", ad_id=ad_id, expected=fee, supplied=env.value)

        self._escrow.payout([(self._fee_address(), fee)])
        updated = ad.with_changes(status=AdStatus.DISPUTED)
        self._registry.store(updated)
        self._events.emit(b"AdFrozen", {"id": ad_id, "renter": env.sender, "fee": fee})
        log.info("workflow: ad %d frozen by renter", ad_id)
        return updated

    # -------------------------------------------------------------- unfreeze

    def unfreeze(self, env: CallEnv, ad_id: int) -> Ad:
        """Administrator arbitration of a disputed lease."""
        require_administrator(self._gate, env.sender)
        ad = self._registry.find(ad_id)
        if ad.status != AdStatus.DISPUTED:
            raise InvalidStatus(ad_id=ad_id, status=ad.status.code)

        legs = self._escrow.split(
            ad.price,
            [
                (ad.owner, self._cfg.unfreeze_owner_pct),
                (ad.renter, self._cfg.unfreeze_renter_pct),
                (self._fee_address(), self._cfg.unfreeze_fee_pct),
            ],
        )
        paid = self._settle(ad, legs)
        cleaned = self.clean(ad)
        self._events.emit(
            b"AdUnfrozen",
            {
                "id": ad_id,
                "owner_amount": legs[0][1],
                "renter_amount": legs[1][1],
                "fee_amount": legs[2][1],
                "retained": ad.price - paid,
            },
        )
        log.info("workflow: ad %d arbitrated, %d paid, %d retained", ad_id, paid, ad.price - paid)
        return cleaned

    # ---------------------------------------------------------------- finish

    def finish(self, env: CallEnv, ad_id: int) -> Ad:
        ad = self._registry.find(ad_id)
        if ad.status != AdStatus.ACTIVE:
            raise NotHosting(ad_id=ad_id, status=ad.status.code)
        priority_end = ad.deal_clock + self._cfg.renter_priority_window
        within = env.timestamp <= priority_end
        renter_ok = env.sender == ad.renter and within
        owner_ok = env.sender == ad.owner and not within
        if not (renter_ok or owner_ok):
            raise NotAuthorized("finish not allowed for caller at this time", ad_id=ad_id)

        legs = self._escrow.split(
            ad.price,
            [
                (ad.owner, self._cfg.finish_owner_pct),
                (self._fee_address(), self._cfg.finish_fee_pct),
            ],
        )
        paid = self._settle(ad, legs)
        cleaned = self.clean(ad)
        self._events.emit(
            b"AdFinished",
            {"id": ad_id, "by": env.sender, "owner_amount": legs[0][1], "fee_amount": legs[1][1]},
        )
        log.info("workflow: ad %d finished, %d paid", ad_id, paid)
        return cleaned

    # --------------------------------------------------------------- helpers

    def _settle(self, ad: Ad, legs: List[Leg]) -> int:
        self._escrow.require_funded(ad.price)
        self._escrow.release(ad.price)
        return self._escrow.payout(legs)

    def clean(self, ad: Ad) -> Ad:
        """Reset a settled slot to an idle listing. Id and ownership persist."""
        cleaned = ad.with_changes(renter=b"", deal_clock=0, status=AdStatus.LISTED)
        self._registry.store(cleaned)
        return cleaned


__all__ = ["LeaseWorkflow"]
