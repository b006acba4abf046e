"""
adslot.ledgers.reward — fungible reward credit minted on lease confirmation.

Storage layout
--------------
    "rwd:bal:" + address -> u256 balance
    "rwd:total"          -> u256 total supply

Mint-only: the market never burns or moves reward credit.
"""

from __future__ import annotations

from typing import Final

from ..state.codec import bytes_to_u256, u256_to_bytes
from ..state.journal import Journal

_P_BAL: Final[bytes] = b"rwd:bal:"
K_TOTAL: Final[bytes] = b"rwd:total"


class JournaledRewardLedger:
    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    def balance_of(self, account: bytes) -> int:
        return bytes_to_u256(self._journal.storage_get(_P_BAL + bytes(account)))

    def total_supply(self) -> int:
        return bytes_to_u256(self._journal.storage_get(K_TOTAL))

    def mint(self, to: bytes, amount: int) -> None:
        if not to:
            raise ValueError("recipient must be non-empty")
        if amount < 0:
            raise ValueError("amount must be non-negative")
        if amount == 0:
            return
        self._journal.storage_set(_P_BAL + bytes(to), u256_to_bytes(self.balance_of(to) + amount))
        self._journal.storage_set(K_TOTAL, u256_to_bytes(self.total_supply() + amount))


__all__ = ["JournaledRewardLedger", "K_TOTAL"]
