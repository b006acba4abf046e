"""
adslot.config — lease windows, payout splits and reward rates.

Centralizes the numeric policy of the market. No third-party deps; safe to
import very early.

Configuration precedence:
  1) Environment variables (ADSLOT_*)
  2) Hardcoded defaults below

Key env vars:
  - ADSLOT_OWNER_GRACE_WINDOW        (seconds) default: 86_400    (24h)
  - ADSLOT_RENTER_PRIORITY_WINDOW    (seconds) default: 86_400    (24h)
  - ADSLOT_FREEZE_WINDOW             (seconds) default: 604_800   (7d)
  - ADSLOT_REWARD_PCT                (int %)   default: 10
  - ADSLOT_FREEZE_FEE_PCT            (int %)   default: 10
  - ADSLOT_FINISH_OWNER_PCT          (int %)   default: 90
  - ADSLOT_FINISH_FEE_PCT            (int %)   default: 10
  - ADSLOT_UNFREEZE_OWNER_PCT        (int %)   default: 40
  - ADSLOT_UNFREEZE_RENTER_PCT       (int %)   default: 40
  - ADSLOT_UNFREEZE_FEE_PCT          (int %)   default: 5

The owner grace window (how long a renter waits before confirming on the
owner's behalf) and the renter priority window (how long only the renter may
finish) share a default but are tuned independently.

Usage:
    from adslot.config import load_config
    CFG = load_config()
    deadline = ad.deal_clock + CFG.freeze_window
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

HOUR = 3_600
DAY = 24 * HOUR


class ConfigError(ValueError):
    """Raised when a configuration violates a split/window constraint."""


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class MarketConfig:
    # Time windows (seconds), all anchored to Ad.deal_clock
    owner_grace_window: int = DAY
    renter_priority_window: int = DAY
    freeze_window: int = 7 * DAY

    # Reward / fee rates, integer percent of Ad.price
    reward_pct: int = 10
    freeze_fee_pct: int = 10

    # finish(): owner / platform
    finish_owner_pct: int = 90
    finish_fee_pct: int = 10

    # unfreeze(): owner / renter / platform; remainder stays in the pool
    unfreeze_owner_pct: int = 40
    unfreeze_renter_pct: int = 40
    unfreeze_fee_pct: int = 5

    def __post_init__(self) -> None:
        for name in ("owner_grace_window", "renter_priority_window", "freeze_window"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative")
        for name in (
            "reward_pct",
            "freeze_fee_pct",
            "finish_owner_pct",
            "finish_fee_pct",
            "unfreeze_owner_pct",
            "unfreeze_renter_pct",
            "unfreeze_fee_pct",
        ):
            v = getattr(self, name)
            if not 0 <= v <= 100:
                raise ConfigError(f"{name} must be within 0..100, got {v}")
        if self.finish_owner_pct + self.finish_fee_pct > 100:
            raise ConfigError("finish split exceeds 100%")
        if self.unfreeze_owner_pct + self.unfreeze_renter_pct + self.unfreeze_fee_pct > 100:
            raise ConfigError("unfreeze split exceeds 100%")

    @property
    def unfreeze_reserve_pct(self) -> int:
        """Share of the deposit that stays in the pool after arbitration."""
        return 100 - self.unfreeze_owner_pct - self.unfreeze_renter_pct - self.unfreeze_fee_pct


@lru_cache(maxsize=1)
def load_config() -> MarketConfig:
    """
    Build and cache a MarketConfig from environment + defaults.
    """
    return MarketConfig(
        owner_grace_window=_env_int("ADSLOT_OWNER_GRACE_WINDOW", DAY, min_v=0, max_v=365 * DAY),
        renter_priority_window=_env_int("ADSLOT_RENTER_PRIORITY_WINDOW", DAY, min_v=0, max_v=365 * DAY),
        freeze_window=_env_int("ADSLOT_FREEZE_WINDOW", 7 * DAY, min_v=0, max_v=365 * DAY),
        reward_pct=_env_int("ADSLOT_REWARD_PCT", 10, min_v=0, max_v=100),
        freeze_fee_pct=_env_int("ADSLOT_FREEZE_FEE_PCT", 10, min_v=0, max_v=100),
        finish_owner_pct=_env_int("ADSLOT_FINISH_OWNER_PCT", 90, min_v=0, max_v=100),
        finish_fee_pct=_env_int("ADSLOT_FINISH_FEE_PCT", 10, min_v=0, max_v=100),
        unfreeze_owner_pct=_env_int("ADSLOT_UNFREEZE_OWNER_PCT", 40, min_v=0, max_v=100),
        unfreeze_renter_pct=_env_int("ADSLOT_UNFREEZE_RENTER_PCT", 40, min_v=0, max_v=100),
        unfreeze_fee_pct=_env_int("ADSLOT_UNFREEZE_FEE_PCT", 5, min_v=0, max_v=100),
    )


__all__ = ["HOUR", "DAY", "ConfigError", "MarketConfig", "load_config"]
