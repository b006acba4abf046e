"""
adslot.market.escrow
====================

Pooled escrow accounting for the lease workflow. Renters' deposits are held in
the market's own treasury balance (the pool). This module tracks how much of
that pool is *reserved* for live leases and performs percentage payouts.

Design goals
------------
- **Deterministic**: integer arithmetic only. Every leg is `amount*pct//100`;
  rounding dust stays in the pool.
- **Reserve-first**: `rent` reserves the deposit so it cannot be swept by an
  administrative withdrawal. Settlement releases the reservation and then pays.
- **All-or-nothing**: a rejected leg raises `TransferFailed`. The caller runs
  inside a `CallGuard`, so earlier legs of the same payout are rolled back.

State & storage layout
----------------------
    "esc:reserved" -> u256 sum of deposits currently held for renters

Whatever the pool holds beyond `reserved_total()` is platform reserve
(unfreeze remainders, rounding dust, stray value) and is what `withdraw` may
sweep.

Invariants
----------
- reserved_total() <= pool balance, after every committed operation.
- A deposit is reserved exactly once (rent) and released exactly once
  (finish or unfreeze).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from ..errors import IncorrectDeposit, InsufficientBalance, TransferFailed
from ..runtime.treasury import Treasury
from ..state.codec import K_RESERVED, bytes_to_u256, u256_to_bytes
from ..state.journal import Journal

log = logging.getLogger(__name__)

Leg = Tuple[bytes, int]


def share(amount: int, pct: int) -> int:
    """Integer percentage of `amount`, truncating."""
    if amount < 0:
        raise ValueError("amount must be non-negative")
    if not 0 <= pct <= 100:
        raise ValueError("pct must be within 0..100")
    return amount * pct // 100


class EscrowAccount:
    def __init__(self, journal: Journal, treasury: Treasury) -> None:
        self._journal = journal
        self._treasury = treasury

    # ---------- views ----------

    def pool_balance(self) -> int:
        return self._treasury.balance()

    def reserved_total(self) -> int:
        """Sum of deposits currently held for attached renters."""
        return bytes_to_u256(self._journal.storage_get(K_RESERVED))

    def available_balance(self) -> int:
        """Pool value not reserved by any lease."""
        bal = self.pool_balance()
        res = self.reserved_total()
        return bal - res if bal >= res else 0

    # ---------- reservation ----------

    def reserve(self, amount: int) -> None:
        """Mark `amount` of the pool as held; the pool must already cover it."""
        new_total = self.reserved_total() + amount
        self._treasury.require_min_balance(new_total)
        self._journal.storage_set(K_RESERVED, u256_to_bytes(new_total))

    def release(self, amount: int) -> None:
        cur = self.reserved_total()
        if amount > cur:
            raise InsufficientBalance("release exceeds reserved total", reserved=cur, required=amount)
        self._journal.storage_set(K_RESERVED, u256_to_bytes(cur - amount))

    # ---------- payouts ----------

    def require_funded(self, amount: int) -> None:
        """Fail before any leg is paid if the pool cannot cover `amount`."""
        self._treasury.require_min_balance(amount)

    def split(self, amount: int, shares: Iterable[Tuple[bytes, int]]) -> List[Leg]:
        """Turn (recipient, pct) pairs into (recipient, value) legs."""
        return [(to, share(amount, pct)) for to, pct in shares]

    def payout(self, legs: Iterable[Leg]) -> int:
        """
        Pay each leg from the pool, in order. Returns the total paid.

        Raises TransferFailed on the first rejected leg.
        """
        total = 0
        for to, value in legs:
            if not self._treasury.pay(to, value):
                raise TransferFailed(to=to, amount=value)
            log.debug("escrow: paid %d to %s", value, to.hex())
            total += value
        return total

    def sweep(self, to: bytes, amount: int) -> None:
        """Pay out unreserved pool value (administrative withdrawal)."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise IncorrectDeposit("withdrawal amount must be a non-negative integer", amount=repr(amount))
        avail = self.available_balance()
        if amount > avail:
            raise InsufficientBalance("amount exceeds unreserved pool value", available=avail, required=amount)
        self.payout([(to, amount)])


__all__ = ["EscrowAccount", "Leg", "share"]
