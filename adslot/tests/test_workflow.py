from __future__ import annotations

import pytest

from adslot.config import DAY
from adslot.errors import (
    AdNotFound,
    AlreadyRented,
    FreezeWindowExpired,
    IncorrectDeposit,
    InvalidStatus,
    NotAdRenter,
    NotAuthorized,
    NotHosting,
)
from adslot.types import AdStatus

from .conftest import PRICE, START_BALANCE, T0, det_address


# --------------------------------------------------------------------------- #
# rent
# --------------------------------------------------------------------------- #


def test_rent_attaches_renter_and_escrows(market, listed, renter, env):
    ad = market.rent(env(renter, value=PRICE, t=T0), listed.id)
    assert ad.status is AdStatus.LISTED
    assert ad.renter == renter
    assert ad.deal_clock == T0
    assert market.pool_balance() == PRICE
    assert market.reserved_total() == PRICE
    assert market.balance_of(renter) == START_BALANCE - PRICE


@pytest.mark.parametrize("value", [PRICE - 1, PRICE + 1, 0])
def test_rent_requires_exact_deposit(market, listed, renter, env, value):
    with pytest.raises(IncorrectDeposit):
        market.rent(env(renter, value=value), listed.id)
    assert market.find(listed.id).renter == b""
    assert market.balance_of(renter) == START_BALANCE
    assert market.pool_balance() == 0


def test_rent_twice_fails(market, rented, stranger, env):
    with pytest.raises(AlreadyRented):
        market.rent(env(stranger, value=PRICE), rented.id)


def test_rent_closed_slot_fails(market, owner, renter, env):
    ad = market.create(env(owner), price=PRICE, length=1, width=1, geography="x", status=AdStatus.CLOSED)
    with pytest.raises(InvalidStatus):
        market.rent(env(renter, value=PRICE), ad.id)


def test_rent_active_slot_fails(market, active, stranger, env):
    with pytest.raises(InvalidStatus):
        market.rent(env(stranger, value=PRICE), active.id)


def test_rent_unknown_slot(market, renter, env):
    with pytest.raises(AdNotFound):
        market.rent(env(renter, value=PRICE), 42)


# --------------------------------------------------------------------------- #
# confirm
# --------------------------------------------------------------------------- #


def test_owner_confirms_any_time(market, rented, owner, renter, env):
    ad = market.confirm(env(owner, t=T0 + 1), rented.id)
    assert ad.status is AdStatus.ACTIVE
    assert ad.deal_clock == T0 + 1
    assert ad.renter == renter


def test_renter_cannot_confirm_within_grace(market, rented, renter, env):
    with pytest.raises(NotAuthorized):
        market.confirm(env(renter, t=T0 + DAY), rented.id)
    assert market.find(rented.id).status is AdStatus.LISTED


def test_renter_confirms_after_grace(market, rented, renter, env):
    ad = market.confirm(env(renter, t=T0 + DAY + 1), rented.id)
    assert ad.status is AdStatus.ACTIVE


def test_stranger_cannot_confirm(market, rented, stranger, env):
    with pytest.raises(NotAuthorized):
        market.confirm(env(stranger, t=T0 + 10 * DAY), rented.id)


def test_confirm_without_renter_is_not_hosting(market, listed, owner, env):
    with pytest.raises(NotHosting):
        market.confirm(env(owner), listed.id)


def test_confirm_twice_is_not_hosting(market, active, owner, env):
    with pytest.raises(NotHosting):
        market.confirm(env(owner), active.id)


@pytest.mark.parametrize(
    "price, each",
    [
        (100, 5),  # reward 10, split 5/5
        (150, 7),  # reward 15 is odd, 1 unit lost to truncation
        (9, 0),  # reward rounds down to 0
    ],
)
def test_confirm_reward_split(market, owner, renter, env, price, each):
    ad = market.create(env(owner), price=price, length=1, width=1, geography="x")
    market.rent(env(renter, value=price), ad.id)
    market.confirm(env(owner, t=T0 + 5), ad.id)
    assert market.reward_balance(owner) == each
    assert market.reward_balance(renter) == each
    assert market.rewards.total_supply() == 2 * each


# --------------------------------------------------------------------------- #
# freeze
# --------------------------------------------------------------------------- #


def test_freeze_routes_fee_and_keeps_deposit(market, active, renter, fee, env):
    ad = market.freeze(env(renter, value=10, t=active.deal_clock + DAY), active.id)
    assert ad.status is AdStatus.DISPUTED
    assert market.balance_of(fee) == 10
    assert market.pool_balance() == PRICE
    assert market.reserved_total() == PRICE


def test_freeze_by_non_renter(market, active, owner, env):
    with pytest.raises(NotAdRenter):
        market.freeze(env(owner, value=10), active.id)


def test_freeze_requires_active(market, rented, renter, env):
    with pytest.raises(InvalidStatus):
        market.freeze(env(renter, value=10), rented.id)


@pytest.mark.parametrize("value", [0, 9, 11, PRICE])
def test_freeze_requires_exact_fee(market, active, renter, env, value):
    with pytest.raises(IncorrectDeposit):
        market.freeze(env(renter, value=value, t=active.deal_clock), active.id)
    assert market.find(active.id).status is AdStatus.ACTIVE


def test_freeze_window_boundary(market, active, renter, env):
    last_ok = active.deal_clock + 7 * DAY
    market.freeze(env(renter, value=10, t=last_ok), active.id)
    assert market.find(active.id).status is AdStatus.DISPUTED


def test_freeze_window_measured_from_confirmation(market, listed, owner, renter, env):
    rent_at = T0
    confirm_at = T0 + 5 * DAY
    market.rent(env(renter, value=PRICE, t=rent_at), listed.id)
    market.confirm(env(owner, t=confirm_at), listed.id)

    # 8 days after renting but only 3 after confirming: still open
    freeze_at = rent_at + 8 * DAY
    assert freeze_at <= confirm_at + 7 * DAY
    # 13 days after renting, 8 after confirming: closed
    late = confirm_at + 7 * DAY + 1
    with pytest.raises(FreezeWindowExpired):
        market.freeze(env(renter, value=10, t=late), listed.id)
    market.freeze(env(renter, value=10, t=freeze_at), listed.id)
    assert market.find(listed.id).status is AdStatus.DISPUTED


# --------------------------------------------------------------------------- #
# unfreeze
# --------------------------------------------------------------------------- #


def test_unfreeze_splits_40_40_5_and_retains_15(market, disputed, owner, renter, admin, fee, env):
    owner_before = market.balance_of(owner)
    renter_before = market.balance_of(renter)
    fee_before = market.balance_of(fee)
    pool_before = market.pool_balance()

    ad = market.unfreeze(env(admin, t=T0 + 30 * DAY), disputed.id)

    assert market.balance_of(owner) - owner_before == 40
    assert market.balance_of(renter) - renter_before == 40
    assert market.balance_of(fee) - fee_before == 5
    assert pool_before - market.pool_balance() == 85
    assert market.pool_balance() == 15
    assert market.reserved_total() == 0
    assert market.available_balance() == 15
    assert ad.status is AdStatus.LISTED
    assert ad.renter == b""
    assert ad.deal_clock == 0


def test_unfreeze_is_admin_only(market, disputed, owner, renter, env):
    for who in (owner, renter):
        with pytest.raises(NotAuthorized):
            market.unfreeze(env(who), disputed.id)


def test_unfreeze_requires_disputed(market, active, admin, env):
    with pytest.raises(InvalidStatus):
        market.unfreeze(env(admin), active.id)


# --------------------------------------------------------------------------- #
# finish
# --------------------------------------------------------------------------- #


def test_finish_splits_90_10(market, active, owner, fee, env):
    owner_before = market.balance_of(owner)
    ad = market.finish(env(owner, t=active.deal_clock + DAY + 1), active.id)
    assert market.balance_of(owner) - owner_before == 90
    assert market.balance_of(fee) == 10
    assert market.pool_balance() == 0
    assert market.reserved_total() == 0
    assert ad.status is AdStatus.LISTED
    assert ad.renter == b""


def test_renter_finish_boundary_is_inclusive(market, active, renter, env):
    market.finish(env(renter, t=active.deal_clock + DAY), active.id)
    assert market.find(active.id).status is AdStatus.LISTED


def test_renter_finish_one_tick_late(market, active, renter, env):
    with pytest.raises(NotAuthorized):
        market.finish(env(renter, t=active.deal_clock + DAY + 1), active.id)


def test_owner_cannot_finish_within_priority(market, active, owner, env):
    with pytest.raises(NotAuthorized):
        market.finish(env(owner, t=active.deal_clock + DAY), active.id)


def test_stranger_cannot_finish(market, active, stranger, env):
    with pytest.raises(NotAuthorized):
        market.finish(env(stranger, t=active.deal_clock + 2 * DAY), active.id)


def test_finish_twice_is_not_hosting(market, active, renter, env):
    market.finish(env(renter, t=active.deal_clock), active.id)
    with pytest.raises(NotHosting):
        market.finish(env(renter, t=active.deal_clock), active.id)


def test_finish_disputed_is_not_hosting(market, disputed, renter, env):
    with pytest.raises(NotHosting):
        market.finish(env(renter, t=disputed.deal_clock), disputed.id)


# --------------------------------------------------------------------------- #
# full cycles
# --------------------------------------------------------------------------- #


def _assert_fresh_cycle(market, ad_id, env):
    ad = market.find(ad_id)
    assert ad.status is AdStatus.LISTED
    assert ad.renter == b""
    newcomer = det_address("newcomer")
    market.fund(newcomer, PRICE)
    again = market.rent(env(newcomer, value=PRICE, t=T0 + 60 * DAY), ad_id)
    assert again.renter == newcomer
    assert again.deal_clock == T0 + 60 * DAY


def test_relist_after_finish(market, active, owner, env):
    market.finish(env(owner, t=active.deal_clock + 3 * DAY), active.id)
    _assert_fresh_cycle(market, active.id, env)


def test_relist_after_unfreeze(market, disputed, admin, env):
    market.unfreeze(env(admin), disputed.id)
    _assert_fresh_cycle(market, disputed.id, env)


def test_event_sequence_for_a_lease(market, disputed, admin, env):
    market.unfreeze(env(admin), disputed.id)
    assert [e.name for e in market.events] == [
        b"AdCreated",
        b"AdRented",
        b"AdConfirmed",
        b"AdFrozen",
        b"AdUnfrozen",
    ]
    unfrozen = market.events_named(b"AdUnfrozen")[0]
    assert unfrozen.args["retained"] == 15


def test_non_payable_operations_reject_value(market, rented, owner, env):
    with pytest.raises(IncorrectDeposit):
        market.confirm(env(owner, value=1), rented.id)
    assert market.find(rented.id).status is AdStatus.LISTED
