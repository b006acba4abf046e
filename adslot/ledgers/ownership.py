"""
adslot.ledgers.ownership — singleton ownership tokens, one per slot id.

Storage layout
--------------
    "own:" + u64be(id) -> holder address

A token id is minted exactly once; there is no burn. Balances are 0 or 1.
"""

from __future__ import annotations

from typing import Final, Optional

from ..errors import NotAdOwner, StateError
from ..state.codec import u64_to_bytes
from ..state.journal import Journal

_P_HOLDER: Final[bytes] = b"own:"


def _k(token_id: int) -> bytes:
    return _P_HOLDER + u64_to_bytes(token_id)


class JournaledOwnershipLedger:
    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    def holder_of(self, token_id: int) -> Optional[bytes]:
        v = self._journal.storage_get(_k(token_id))
        return v if v else None

    def mint(self, owner: bytes, token_id: int) -> None:
        if not owner:
            raise ValueError("owner must be non-empty")
        if self.holder_of(token_id) is not None:
            raise StateError("ownership token already minted", token_id=token_id)
        self._journal.storage_set(_k(token_id), bytes(owner))

    def transfer(self, frm: bytes, to: bytes, token_id: int) -> None:
        if not to:
            raise ValueError("recipient must be non-empty")
        if self.holder_of(token_id) != bytes(frm):
            raise NotAdOwner(token_id=token_id, account=frm)
        self._journal.storage_set(_k(token_id), bytes(to))

    def balance_of(self, account: bytes, token_id: int) -> int:
        return 1 if self.holder_of(token_id) == bytes(account) else 0


__all__ = ["JournaledOwnershipLedger"]
