"""
adslot.ledgers.access — single-administrator gate for arbitration and settings.

A focused Ownable-style surface:
- read the current administrator (`get_admin`)
- initialize it once (`init_admin`)
- check a caller (`is_administrator`, `require_admin`)
- hand over the role (`transfer_admin`)

The administrator is stored at "acl:admin" in the market journal, so a
hand-over made inside a failing operation is rolled back with it.
"""

from __future__ import annotations

from typing import Any, Final, Optional

from ..errors import NotAuthorized
from ..state.journal import Journal

ADMIN_KEY: Final[bytes] = b"acl:admin"


def require_administrator(gate: Any, caller: bytes) -> None:
    """Raise NotAuthorized unless `gate` (any AccessGate) recognizes `caller`."""
    if not gate.is_administrator(caller):
        raise NotAuthorized("caller is not the administrator", caller=caller)


class AdminGate:
    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    def get_admin(self) -> Optional[bytes]:
        v = self._journal.storage_get(ADMIN_KEY)
        return v if v else None

    def init_admin(self, admin: bytes) -> None:
        """Idempotent: does not overwrite an administrator that is already set."""
        if not admin:
            raise ValueError("admin must be non-empty")
        if self.get_admin() is None:
            self._journal.storage_set(ADMIN_KEY, bytes(admin))

    def is_administrator(self, account: bytes) -> bool:
        admin = self.get_admin()
        return admin is not None and admin == bytes(account)

    def require_admin(self, caller: bytes) -> None:
        require_administrator(self, caller)

    def transfer_admin(self, caller: bytes, new_admin: bytes) -> bytes:
        """Administrator-only hand-over. Returns the previous administrator."""
        self.require_admin(caller)
        if not new_admin:
            raise ValueError("new admin must be non-empty")
        previous = self.get_admin() or b""
        self._journal.storage_set(ADMIN_KEY, bytes(new_admin))
        return previous


__all__ = ["ADMIN_KEY", "AdminGate", "require_administrator"]
