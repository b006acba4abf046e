# -*- coding: utf-8 -*-
"""
adslot.tests.conftest
=====================

Fixtures for market tests.

- Stable 20-byte addresses derived from labels (sha3_256), so failures print
  the same hex on every run.
- A fresh `AdSlotMarket` per test with explicit default policy (environment
  overrides are ignored), funded parties and one LISTED slot priced 100.

Usage:
    def test_something(market, listed, owner, renter, env):
        market.rent(env(renter, value=100, t=T0), listed.id)
"""
from __future__ import annotations

import hashlib
from typing import Callable

import pytest

from adslot.config import DAY, MarketConfig
from adslot.market import AdSlotMarket
from adslot.runtime import CallEnv
from adslot.types import Ad

T0 = 1_700_000_000
PRICE = 100
START_BALANCE = 1_000_000


def det_address(label: str) -> bytes:
    return hashlib.sha3_256(b"adslot/test/" + label.encode("utf-8")).digest()[:20]


@pytest.fixture
def owner() -> bytes:
    return det_address("owner")


@pytest.fixture
def renter() -> bytes:
    return det_address("renter")


@pytest.fixture
def admin() -> bytes:
    return det_address("admin")


@pytest.fixture
def fee() -> bytes:
    return det_address("fee")


@pytest.fixture
def stranger() -> bytes:
    return det_address("stranger")


@pytest.fixture
def config() -> MarketConfig:
    return MarketConfig()


@pytest.fixture
def env() -> Callable[..., CallEnv]:
    def _env(sender: bytes, *, value: int = 0, t: int = T0) -> CallEnv:
        return CallEnv(sender=sender, value=value, timestamp=t)

    return _env


@pytest.fixture
def market(config, owner, renter, admin, fee, stranger) -> AdSlotMarket:
    m = AdSlotMarket(admin=admin, fee_address=fee, config=config)
    for who in (owner, renter, admin, stranger):
        m.fund(who, START_BALANCE)
    return m


@pytest.fixture
def listed(market, owner, env) -> Ad:
    return market.create(
        env(owner),
        price=PRICE,
        length=6,
        width=3,
        height=0,
        geography="Berlin Mitte, Torstr. 1",
        memo="facade banner",
    )


@pytest.fixture
def rented(market, listed, renter, env) -> Ad:
    return market.rent(env(renter, value=PRICE, t=T0), listed.id)


@pytest.fixture
def active(market, rented, owner, env) -> Ad:
    return market.confirm(env(owner, t=T0 + 60), rented.id)


@pytest.fixture
def disputed(market, active, renter, env) -> Ad:
    return market.freeze(env(renter, value=PRICE // 10, t=active.deal_clock + DAY), active.id)
