"""
adslot.errors — typed failures raised by the ad-slot market.

Every public operation fails fast by raising one of the classes below. The
call guard (adslot.runtime.guard) reverts the whole atomic unit before the
exception reaches the caller, so an error always means "nothing happened".

Hierarchy
---------
AdSlotError (base)
 ├─ ValidationError      : malformed inputs (geography, status, deposit, rating)
 ├─ AuthorizationError   : wrong caller for the operation
 ├─ StateError           : operation not allowed in the Ad's current state
 ├─ TimingError          : a time window has closed
 └─ FundsError           : escrow underfunded or a payout leg was rejected

Each concrete class carries a stable machine `code` (e.g. 'NOT_HOSTING') that
is safe to surface in receipts and logs. `data` holds JSON-friendly details;
keyword fields passed at raise time are folded into it (bytes become hex).

    raise NotHosting(ad_id=3, status="DISPUTED")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional


@dataclass(eq=False)
class AdSlotError(Exception):
    """
    Base market error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string.
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ad slot error"
    code: str = "ADSLOT_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class _CodedError(AdSlotError):
    """Base for concrete errors: code and default message come from the class."""

    CODE: ClassVar[str] = "ADSLOT_ERROR"
    MESSAGE: ClassVar[str] = "ad slot error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        data: Optional[Dict[str, Any]] = None,
        **fields: Any,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        for k, v in fields.items():
            if v is None:
                continue
            d.setdefault(k, bytes(v).hex() if isinstance(v, (bytes, bytearray)) else v)
        super().__init__(message=message or self.MESSAGE, code=self.CODE, data=d or None)


# --------------------------------------------------------------------------- #
# Categories
# --------------------------------------------------------------------------- #


class ValidationError(_CodedError):
    CODE = "VALIDATION_ERROR"
    MESSAGE = "invalid input"


class AuthorizationError(_CodedError):
    CODE = "AUTHORIZATION_ERROR"
    MESSAGE = "caller not allowed"


class StateError(_CodedError):
    CODE = "STATE_ERROR"
    MESSAGE = "operation not allowed in current state"


class TimingError(_CodedError):
    CODE = "TIMING_ERROR"
    MESSAGE = "time window check failed"


class FundsError(_CodedError):
    CODE = "FUNDS_ERROR"
    MESSAGE = "value transfer failed"


# --------------------------------------------------------------------------- #
# Validation
# --------------------------------------------------------------------------- #


class InvalidGeography(ValidationError):
    """Empty geography, or a zero length/width."""

    CODE = "INVALID_GEOGRAPHY"
    MESSAGE = "geography must be non-empty and dimensions positive"


class InvalidInitialStatus(ValidationError):
    CODE = "INVALID_INITIAL_STATUS"
    MESSAGE = "status must be LISTED or CLOSED"


class IncorrectDeposit(ValidationError):
    """Zero price, or a supplied value that is not exactly the amount due."""

    CODE = "INCORRECT_DEPOSIT"
    MESSAGE = "supplied value does not match the required amount"


class InvalidRating(ValidationError):
    CODE = "INVALID_RATING"
    MESSAGE = "rating must be in 1..5"


# --------------------------------------------------------------------------- #
# Authorization
# --------------------------------------------------------------------------- #


class NotAuthorized(AuthorizationError):
    CODE = "NOT_AUTHORIZED"
    MESSAGE = "caller not authorized"


class NotAdOwner(AuthorizationError):
    """Caller holds no ownership token for the slot."""

    CODE = "NOT_AD_OWNER"
    MESSAGE = "caller does not hold the ownership token"


class NotSpaceOwner(AuthorizationError):
    """Caller holds the token but is not the recorded owner."""

    CODE = "NOT_SPACE_OWNER"
    MESSAGE = "caller is not the recorded owner of the slot"


class NotAdRenter(AuthorizationError):
    CODE = "NOT_AD_RENTER"
    MESSAGE = "caller is not the renter"


# --------------------------------------------------------------------------- #
# State
# --------------------------------------------------------------------------- #


class InvalidStatus(StateError):
    CODE = "INVALID_STATUS"
    MESSAGE = "operation not allowed in current status"


class NotHosting(StateError):
    CODE = "NOT_HOSTING"
    MESSAGE = "slot is not hosting a lease in the required phase"


class AlreadyRented(StateError):
    CODE = "ALREADY_RENTED"
    MESSAGE = "slot already has a renter"


class CannotEditImmutable(StateError):
    CODE = "CANNOT_EDIT_IMMUTABLE"
    MESSAGE = "slot cannot be edited in its current state"


class AdNotFound(StateError):
    CODE = "AD_NOT_FOUND"
    MESSAGE = "unknown ad id"


class ReentrantCall(StateError):
    """A market operation was invoked while another one is in flight."""

    CODE = "REENTRANT_CALL"
    MESSAGE = "re-entrant call rejected"


# --------------------------------------------------------------------------- #
# Timing
# --------------------------------------------------------------------------- #


class TimeWindowExpired(TimingError):
    CODE = "TIME_WINDOW_EXPIRED"
    MESSAGE = "time window expired"


class FreezeWindowExpired(TimeWindowExpired):
    CODE = "FREEZE_WINDOW_EXPIRED"
    MESSAGE = "freeze window expired"


# --------------------------------------------------------------------------- #
# Funds
# --------------------------------------------------------------------------- #


class InsufficientBalance(FundsError):
    CODE = "INSUFFICIENT_BALANCE"
    MESSAGE = "insufficient balance"


class TransferFailed(FundsError):
    CODE = "TRANSFER_FAILED"
    MESSAGE = "recipient rejected the transfer"


# -------- helper utilities ---------------------------------------------------


def error_to_receipt_fields(err: AdSlotError) -> Dict[str, Any]:
    """
    Map an AdSlotError to receipt-like fields:

        {"status": "REJECTED" | "REVERT", "error": {code, message, data?}}

    Fund errors surface as REVERT (the call got as far as moving value);
    everything else is a REJECTED precondition.
    """
    status = "REVERT" if isinstance(err, FundsError) else "REJECTED"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "AdSlotError",
    "ValidationError",
    "AuthorizationError",
    "StateError",
    "TimingError",
    "FundsError",
    "InvalidGeography",
    "InvalidInitialStatus",
    "IncorrectDeposit",
    "InvalidRating",
    "NotAuthorized",
    "NotAdOwner",
    "NotSpaceOwner",
    "NotAdRenter",
    "InvalidStatus",
    "NotHosting",
    "AlreadyRented",
    "CannotEditImmutable",
    "AdNotFound",
    "ReentrantCall",
    "TimeWindowExpired",
    "FreezeWindowExpired",
    "InsufficientBalance",
    "TransferFailed",
    "error_to_receipt_fields",
]
