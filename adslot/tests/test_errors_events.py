from __future__ import annotations

import pytest

from adslot.errors import (
    AdSlotError,
    FreezeWindowExpired,
    NotHosting,
    StateError,
    TimingError,
    TransferFailed,
    error_to_receipt_fields,
)
from adslot.runtime.context import CallEnv, ContextError, to_bytes
from adslot.runtime.events import EventError


def test_error_codes_and_data():
    e = NotHosting(ad_id=3, caller=b"\xab\xcd")
    assert isinstance(e, StateError)
    assert e.code == "NOT_HOSTING"
    assert e.data == {"ad_id": 3, "caller": "abcd"}
    assert e.to_dict()["code"] == "NOT_HOSTING"


def test_freeze_window_is_a_timing_error():
    assert issubclass(FreezeWindowExpired, TimingError)


def test_receipt_fields():
    assert error_to_receipt_fields(NotHosting())["status"] == "REJECTED"
    out = error_to_receipt_fields(TransferFailed(amount=5))
    assert out["status"] == "REVERT"
    assert out["error"]["data"] == {"amount": 5}


def test_errors_are_hashable_exceptions():
    e = NotHosting()
    assert isinstance(e, AdSlotError)
    assert {e}
    with pytest.raises(AdSlotError):
        raise e


def test_call_env_validation():
    assert CallEnv.from_dict({"sender": "0x0102", "value": 3}).sender == b"\x01\x02"
    with pytest.raises(ContextError):
        CallEnv(sender=b"")
    with pytest.raises(ContextError):
        CallEnv(sender=b"\x01", value=-1)
    with pytest.raises(ContextError):
        CallEnv(sender=b"\x01", timestamp=True)
    with pytest.raises(ContextError):
        to_bytes("0x123")


def test_event_validation(market):
    with pytest.raises(EventError):
        market.emitter.emit(b"", {})
    with pytest.raises(EventError):
        market.emitter.emit(b"X", {"bad key": 1})
    with pytest.raises(EventError):
        market.emitter.emit(b"X", {"k": 1.5})


def test_event_to_dict(market, listed, owner):
    ev = market.events_named(b"AdCreated")[0]
    d = ev.to_dict()
    assert d["name"] == "AdCreated"
    assert d["args"]["owner"] == "0x" + owner.hex()
    assert d["args"]["id"] == listed.id


def test_events_only_on_success(market, listed, renter, env):
    with pytest.raises(AdSlotError):
        market.rent(env(renter, value=1), listed.id)
    assert market.events_named(b"AdRented") == []
