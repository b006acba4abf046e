"""
adslot.market — listings, the lease workflow, escrow, ratings and the facade.
"""

from .escrow import EscrowAccount, share
from .market import DEFAULT_MARKET_ADDRESS, AdSlotMarket
from .rating import RatingAggregator, fold_rating
from .registry import ListingRegistry
from .workflow import LeaseWorkflow

__all__ = [
    "AdSlotMarket",
    "DEFAULT_MARKET_ADDRESS",
    "EscrowAccount",
    "LeaseWorkflow",
    "ListingRegistry",
    "RatingAggregator",
    "fold_rating",
    "share",
]
