"""
adslot.ledgers — collaborator contracts the market depends on.

The lease workflow only needs small capabilities from the outside world:

  OwnershipLedger : singleton ownership claim per slot id
  RewardLedger    : fungible reward credit, minted on confirmation
  AccessGate      : who may arbitrate and change platform settings

The Protocols below are the seams. The shipped implementations keep their
state in the market journal (under their own key prefixes), so a failed
market operation also rolls back any mint or transfer it made. Hosts that
bridge to real token contracts must give the same all-or-nothing guarantee.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .access import AdminGate, require_administrator
from .ownership import JournaledOwnershipLedger
from .reward import JournaledRewardLedger


@runtime_checkable
class OwnershipLedger(Protocol):
    def mint(self, owner: bytes, token_id: int) -> None:
        """Issue the single ownership unit for `token_id` to `owner`."""

    def transfer(self, frm: bytes, to: bytes, token_id: int) -> None:
        """Move the ownership unit; raises if `frm` does not hold it."""

    def balance_of(self, account: bytes, token_id: int) -> int:
        """1 if `account` holds `token_id`, else 0."""


@runtime_checkable
class RewardLedger(Protocol):
    def mint(self, to: bytes, amount: int) -> None: ...

    def balance_of(self, account: bytes) -> int: ...


@runtime_checkable
class AccessGate(Protocol):
    def is_administrator(self, account: bytes) -> bool: ...


__all__ = [
    "OwnershipLedger",
    "RewardLedger",
    "AccessGate",
    "AdminGate",
    "JournaledOwnershipLedger",
    "JournaledRewardLedger",
    "require_administrator",
]
