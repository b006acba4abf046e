"""
adslot — leasing-and-escrow workflow engine for uniquely owned ad slots.

Quick start:

    from adslot import AdSlotMarket, CallEnv

    market = AdSlotMarket(admin=ADMIN, fee_address=FEE)
    ad = market.create(CallEnv(owner), price=100, length=3, width=2, geography="Berlin")
"""

from .config import MarketConfig, load_config
from .errors import AdSlotError, error_to_receipt_fields
from .market import AdSlotMarket
from .runtime import CallEnv, Event
from .types import Ad, AdStatus
from .version import __version__

__all__ = [
    "AdSlotMarket",
    "CallEnv",
    "Event",
    "Ad",
    "AdStatus",
    "MarketConfig",
    "load_config",
    "AdSlotError",
    "error_to_receipt_fields",
    "__version__",
]
