"""
Settlement arithmetic across prices: every leg is price*pct//100, nothing is
created or destroyed, and the reserved total always returns to zero.
"""
from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from adslot.config import DAY, MarketConfig
from adslot.market import AdSlotMarket, share
from adslot.runtime import CallEnv

from .conftest import det_address

OWNER = det_address("owner")
RENTER = det_address("renter")
ADMIN = det_address("admin")
FEE = det_address("fee")

prices = st.integers(min_value=1, max_value=10**24)


def _confirmed(price: int):
    m = AdSlotMarket(admin=ADMIN, fee_address=FEE, config=MarketConfig())
    m.fund(RENTER, 2 * price)
    ad = m.create(CallEnv(OWNER), price=price, length=1, width=1, geography="x")
    m.rent(CallEnv(RENTER, value=price, timestamp=0), ad.id)
    m.confirm(CallEnv(OWNER, timestamp=0), ad.id)
    return m, ad.id


def _total(m: AdSlotMarket) -> int:
    return sum(m.journal.balances().values())


def test_share_truncates():
    assert share(100, 40) == 40
    assert share(99, 5) == 4
    assert share(1, 90) == 0
    with pytest.raises(ValueError):
        share(10, 101)
    with pytest.raises(ValueError):
        share(-1, 10)


@given(prices)
def test_finish_conserves_value(price):
    m, ad_id = _confirmed(price)
    before = _total(m)
    m.finish(CallEnv(OWNER, timestamp=DAY + 1), ad_id)
    assert m.balance_of(OWNER) == share(price, 90)
    assert m.balance_of(FEE) == share(price, 10)
    assert m.pool_balance() == price - share(price, 90) - share(price, 10)
    assert m.reserved_total() == 0
    assert _total(m) == before


@given(prices)
def test_unfreeze_conserves_value(price):
    m, ad_id = _confirmed(price)
    fee = share(price, 10)
    m.freeze(CallEnv(RENTER, value=fee, timestamp=1), ad_id)
    before = _total(m)
    renter_before = m.balance_of(RENTER)

    m.unfreeze(CallEnv(ADMIN, timestamp=2), ad_id)

    assert m.balance_of(OWNER) == share(price, 40)
    assert m.balance_of(RENTER) - renter_before == share(price, 40)
    assert m.balance_of(FEE) == fee + share(price, 5)
    assert m.available_balance() == price - 2 * share(price, 40) - share(price, 5)
    assert m.reserved_total() == 0
    assert _total(m) == before


@given(prices)
def test_reward_never_exceeds_nominal(price):
    m, _ = _confirmed(price)
    minted = m.rewards.total_supply()
    nominal = price * 10 // 100
    assert minted in (nominal, nominal - 1)
    assert minted % 2 == 0
