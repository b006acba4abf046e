"""
adslot.runtime.treasury — native-value ledger and the payout primitive.

Balances live in the market journal, so every movement made during an
operation is rolled back if the operation fails. The market's pooled escrow
is simply the balance of its own address (`self_address`).

Public API
----------
- balance(addr=None) -> int         # pool balance when addr is omitted
- credit(addr, amount) / debit(...) # host/testing helpers
- receive(sender, amount)           # move attached call value into the pool
- pay(to, amount) -> bool           # pool -> recipient; False if rejected
- register_receiver(addr, hook)     # recipient-side acceptance hook

Receive hooks model recipients that can refuse funds (or try to call back
into the market while being paid). A hook is called after the leg is applied
inside its own nested checkpoint; returning False, or raising a market error,
rejects the leg and the checkpoint is discarded.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from ..errors import AdSlotError, InsufficientBalance
from ..state.journal import Journal

log = logging.getLogger(__name__)

_U256_MAX = (1 << 256) - 1

ReceiveHook = Callable[[bytes, int], bool]


def _check_addr(addr: bytes) -> bytes:
    if not isinstance(addr, (bytes, bytearray)) or len(addr) == 0:
        raise ValueError("address must be non-empty bytes")
    return bytes(addr)


def _check_amount(amount: int) -> int:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValueError("amount must be int")
    if amount < 0 or amount > _U256_MAX:
        raise ValueError("amount out of u256 range")
    return amount


class Treasury:
    def __init__(self, journal: Journal, self_address: bytes) -> None:
        self._journal = journal
        self.self_address = _check_addr(self_address)
        self._hooks: Dict[bytes, ReceiveHook] = {}

    # ------------------------------------------------------------------ views

    def balance(self, addr: Optional[bytes] = None) -> int:
        return self._journal.balance_of(self.self_address if addr is None else _check_addr(addr))

    # ----------------------------------------------------------- host helpers

    def credit(self, addr: bytes, amount: int) -> None:
        a = _check_addr(addr)
        amt = _check_amount(amount)
        cur = self._journal.balance_of(a)
        if cur + amt > _U256_MAX:
            raise ValueError("balance overflow")
        self._journal.set_balance(a, cur + amt)

    def debit(self, addr: bytes, amount: int) -> None:
        a = _check_addr(addr)
        amt = _check_amount(amount)
        cur = self._journal.balance_of(a)
        if amt > cur:
            raise InsufficientBalance(address=a, balance=cur, required=amt)
        self._journal.set_balance(a, cur - amt)

    def register_receiver(self, addr: bytes, hook: Optional[ReceiveHook]) -> None:
        """Install (or with None, remove) the acceptance hook for `addr`."""
        a = _check_addr(addr)
        if hook is None:
            self._hooks.pop(a, None)
        else:
            self._hooks[a] = hook

    # ------------------------------------------------------------- movements

    def receive(self, sender: bytes, amount: int) -> None:
        """Move `amount` from `sender` into the pool."""
        if amount == 0:
            return
        self.debit(sender, amount)
        self.credit(self.self_address, amount)

    def require_min_balance(self, min_amount: int) -> None:
        bal = self.balance()
        if bal < min_amount:
            raise InsufficientBalance(balance=bal, required=min_amount)

    def pay(self, to: bytes, amount: int) -> bool:
        """
        Transfer `amount` from the pool to `to`.

        Returns True on success and False if the recipient rejected the
        funds; a rejected leg leaves no trace. Raises InsufficientBalance
        if the pool cannot cover the amount.
        """
        dest = _check_addr(to)
        amt = _check_amount(amount)
        if amt == 0:
            return True

        self._journal.begin()
        try:
            self.debit(self.self_address, amt)
            self.credit(dest, amt)
            accepted = self._notify(dest, amt)
        except BaseException:
            self._journal.revert()
            raise
        if not accepted:
            self._journal.revert()
            return False
        self._journal.commit()
        return True

    def _notify(self, dest: bytes, amount: int) -> bool:
        hook = self._hooks.get(dest)
        if hook is None:
            return True
        try:
            return bool(hook(self.self_address, amount))
        except AdSlotError as e:
            log.warning("treasury: recipient %s rejected %d (%s)", dest.hex(), amount, e.code)
            return False


__all__ = ["Treasury", "ReceiveHook"]
