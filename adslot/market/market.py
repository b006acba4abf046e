"""
adslot.market.market
====================

`AdSlotMarket` wires the components into one object and is the only surface a
host talks to. Every state-changing method runs as a single atomic unit under
the market's `CallGuard`:

    market = AdSlotMarket(admin=ADMIN, fee_address=FEE)
    market.fund(renter, 1_000)
    ad = market.create(CallEnv(owner), price=100, length=3, width=2, geography="Berlin")
    market.rent(CallEnv(renter, value=100, timestamp=t0), ad.id)

Payable operations are `rent` (deposit) and `freeze` (fee); any other
operation called with value is rejected with IncorrectDeposit.

Administration
--------------
- set_fee_address(env, addr)  administrator only
- withdraw(env, to, amount)   administrator only; unreserved pool value only
- transfer_admin(env, addr)   administrator only

Snapshots
---------
`export_state()` returns a canonical CBOR document with every committed
storage key (ads, id counter, fee address, reserved total, admin, ledger
entries) plus the balance table. `AdSlotMarket.from_snapshot(raw)` rebuilds an
equivalent market. Receive hooks and the event log are host-side and are not
part of a snapshot.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Final, Iterator, List, Optional

from ..config import MarketConfig, load_config
from ..errors import NotAuthorized
from ..ledgers import (
    AccessGate,
    AdminGate,
    JournaledOwnershipLedger,
    JournaledRewardLedger,
    OwnershipLedger,
    RewardLedger,
    require_administrator,
)
from ..runtime.context import CallEnv, require_address
from ..runtime.events import Event, EventEmitter
from ..runtime.guard import CallGuard
from ..runtime.treasury import ReceiveHook, Treasury
from ..state.codec import K_FEE_ADDRESS, decode_snapshot, encode_snapshot
from ..state.journal import Journal
from ..state.storage import StorageView
from ..types import Ad, AdStatus
from .escrow import EscrowAccount
from .rating import RatingAggregator
from .registry import ListingRegistry
from .workflow import LeaseWorkflow

log = logging.getLogger(__name__)

DEFAULT_MARKET_ADDRESS: Final[bytes] = hashlib.sha3_256(b"adslot/market").digest()[:20]


class AdSlotMarket:
    def __init__(
        self,
        *,
        admin: Optional[bytes] = None,
        fee_address: Optional[bytes] = None,
        address: bytes = DEFAULT_MARKET_ADDRESS,
        config: Optional[MarketConfig] = None,
        journal: Optional[Journal] = None,
        ownership: Optional[OwnershipLedger] = None,
        rewards: Optional[RewardLedger] = None,
        gate: Optional[AccessGate] = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.journal = journal if journal is not None else Journal()
        self.address = require_address("address", address)

        self.treasury = Treasury(self.journal, self.address)
        self.guard = CallGuard(self.journal, self.treasury)
        self.emitter = EventEmitter(self.journal)

        if gate is None:
            admin_gate = AdminGate(self.journal)
            if admin is not None:
                admin_gate.init_admin(require_address("admin", admin))
            if admin_gate.get_admin() is None:
                raise ValueError("an administrator is required")
            gate = admin_gate
        self.gate = gate
        self.ownership = ownership if ownership is not None else JournaledOwnershipLedger(self.journal)
        self.rewards = rewards if rewards is not None else JournaledRewardLedger(self.journal)

        if not self.journal.storage_get(K_FEE_ADDRESS):
            if fee_address is None:
                raise ValueError("a fee address is required")
            self.journal.storage_set(K_FEE_ADDRESS, require_address("fee_address", fee_address))

        self.registry = ListingRegistry(self.journal, self.ownership, self.emitter)
        self.escrow = EscrowAccount(self.journal, self.treasury)
        self.rating = RatingAggregator(self.registry, self.emitter)
        self.workflow = LeaseWorkflow(
            self.registry,
            self.escrow,
            self.rewards,
            self.gate,
            self.emitter,
            self.config,
            self.fee_address,
        )

    # ------------------------------------------------------------- listings

    def create(
        self,
        env: CallEnv,
        *,
        price: int,
        length: int,
        width: int,
        height: int = 0,
        geography: str,
        memo: str = "",
        status: Any = AdStatus.LISTED,
    ) -> Ad:
        with self.guard.call("create", env):
            return self.registry.create(
                env.sender,
                price=price,
                length=length,
                width=width,
                height=height,
                geography=geography,
                memo=memo,
                status=status,
            )

    def edit(
        self,
        env: CallEnv,
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
        with self.guard.call("edit", env):
            return self.registry.edit(
                env.sender,
                ad_id,
                price=price,
                length=length,
                width=width,
                height=height,
                geography=geography,
                memo=memo,
                status=status,
            )

    def transfer_ad(self, env: CallEnv, ad_id: int, to: bytes) -> Ad:
        with self.guard.call("transfer_ad", env):
            return self.registry.transfer(env.sender, ad_id, require_address("to", to))

    def find(self, ad_id: int) -> Ad:
        return self.registry.find(ad_id)

    def current_id(self) -> int:
        return self.registry.current_id()

    def ads(self) -> Iterator[Ad]:
        return self.registry.ads()

    # ---------------------------------------------------------------- lease

    def rent(self, env: CallEnv, ad_id: int) -> Ad:
        with self.guard.call("rent", env, payable=True):
            return self.workflow.rent(env, ad_id)

    def confirm(self, env: CallEnv, ad_id: int) -> Ad:
        with self.guard.call("confirm", env):
            return self.workflow.confirm(env, ad_id)

    def freeze(self, env: CallEnv, ad_id: int) -> Ad:
        with self.guard.call("freeze", env, payable=True):
            return self.workflow.freeze(env, ad_id)

    def unfreeze(self, env: CallEnv, ad_id: int) -> Ad:
        with self.guard.call("unfreeze", env):
            return self.workflow.unfreeze(env, ad_id)

    def finish(self, env: CallEnv, ad_id: int) -> Ad:
        with self.guard.call("finish", env):
            return self.workflow.finish(env, ad_id)

    def rate(self, env: CallEnv, ad_id: int, value: int) -> Ad:
        with self.guard.call("rate", env):
            return self.rating.rate(env.sender, ad_id, value)

    # -------------------------------------------------------- administration

    def set_fee_address(self, env: CallEnv, addr: bytes) -> None:
        with self.guard.call("set_fee_address", env):
            require_administrator(self.gate, env.sender)
            new = require_address("fee_address", addr)
            old = self.fee_address()
            self.journal.storage_set(K_FEE_ADDRESS, new)
            self.emitter.emit(b"FeeAddressChanged", {"old": old, "new": new})
            log.info("market: fee address changed to %s", new.hex())

    def withdraw(self, env: CallEnv, to: bytes, amount: int) -> None:
        """Sweep unreserved pool value (unfreeze remainders, dust)."""
        with self.guard.call("withdraw", env):
            require_administrator(self.gate, env.sender)
            dest = require_address("to", to)
            self.escrow.sweep(dest, amount)
            self.emitter.emit(b"ReserveWithdrawn", {"to": dest, "amount": amount})
            log.info("market: withdrew %d to %s", amount, dest.hex())

    def transfer_admin(self, env: CallEnv, new_admin: bytes) -> None:
        with self.guard.call("transfer_admin", env):
            if not isinstance(self.gate, AdminGate):
                raise NotAuthorized("administrator is managed by an external gate")
            new = require_address("new_admin", new_admin)
            previous = self.gate.transfer_admin(env.sender, new)
            self.emitter.emit(b"AdminTransferred", {"previous": previous, "new": new})
            log.info("market: administrator handed to %s", new.hex())

    # ----------------------------------------------------------------- views

    def fee_address(self) -> bytes:
        return self.journal.storage_get(K_FEE_ADDRESS)

    def pool_balance(self) -> int:
        return self.escrow.pool_balance()

    def reserved_total(self) -> int:
        return self.escrow.reserved_total()

    def available_balance(self) -> int:
        return self.escrow.available_balance()

    def balance_of(self, addr: bytes) -> int:
        return self.treasury.balance(require_address("addr", addr))

    def reward_balance(self, addr: bytes) -> int:
        return self.rewards.balance_of(addr)

    @property
    def events(self) -> List[Event]:
        return self.emitter.committed()

    def events_named(self, name: bytes) -> List[Event]:
        return self.emitter.committed(name)

    # ---------------------------------------------------------- host helpers

    def fund(self, addr: bytes, amount: int) -> None:
        """Credit native value to an account (outside any operation)."""
        self.treasury.credit(require_address("addr", addr), amount)

    def register_receiver(self, addr: bytes, hook: Optional[ReceiveHook]) -> None:
        self.treasury.register_receiver(require_address("addr", addr), hook)

    # ------------------------------------------------------------- snapshots

    def export_state(self) -> bytes:
        if self.journal.depth():
            raise RuntimeError("cannot export while an operation is in flight")
        storage = dict(self.journal.base_storage.items())
        return encode_snapshot(storage, self.journal.balances())

    @classmethod
    def from_snapshot(
        cls,
        raw: bytes,
        *,
        address: bytes = DEFAULT_MARKET_ADDRESS,
        config: Optional[MarketConfig] = None,
    ) -> "AdSlotMarket":
        storage, balances = decode_snapshot(raw)
        journal = Journal(StorageView(dict(storage)), dict(balances))
        return cls(address=address, config=config, journal=journal)


__all__ = ["AdSlotMarket", "DEFAULT_MARKET_ADDRESS"]
