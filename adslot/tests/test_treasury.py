from __future__ import annotations

import pytest

from adslot.errors import InsufficientBalance, NotHosting
from adslot.runtime.treasury import Treasury
from adslot.state.journal import Journal

POOL = b"\x99" * 20
ALICE = b"\xa1" * 20


@pytest.fixture
def treasury() -> Treasury:
    t = Treasury(Journal(), POOL)
    t.credit(POOL, 100)
    return t


def test_pay_moves_value(treasury):
    assert treasury.pay(ALICE, 30) is True
    assert treasury.balance() == 70
    assert treasury.balance(ALICE) == 30


def test_pay_zero_is_noop(treasury):
    assert treasury.pay(ALICE, 0) is True
    assert treasury.balance() == 100


def test_rejecting_hook_leaves_no_trace(treasury):
    calls = []

    def hook(frm, amount):
        calls.append((frm, amount))
        return False

    treasury.register_receiver(ALICE, hook)
    assert treasury.pay(ALICE, 30) is False
    assert calls == [(POOL, 30)]
    assert treasury.balance() == 100
    assert treasury.balance(ALICE) == 0


def test_market_error_in_hook_is_a_rejection(treasury):
    def hook(frm, amount):
        raise NotHosting()

    treasury.register_receiver(ALICE, hook)
    assert treasury.pay(ALICE, 1) is False


def test_unexpected_error_in_hook_propagates(treasury):
    def hook(frm, amount):
        raise KeyError("boom")

    treasury.register_receiver(ALICE, hook)
    with pytest.raises(KeyError):
        treasury.pay(ALICE, 1)
    assert treasury.balance() == 100


def test_pay_beyond_pool(treasury):
    with pytest.raises(InsufficientBalance):
        treasury.pay(ALICE, 101)


def test_receive_requires_sender_funds(treasury):
    with pytest.raises(InsufficientBalance):
        treasury.receive(ALICE, 1)
    treasury.credit(ALICE, 5)
    treasury.receive(ALICE, 5)
    assert treasury.balance() == 105
