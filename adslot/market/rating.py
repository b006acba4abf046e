"""
adslot.market.rating — truncating running average over 1..5 ratings.

The aggregate is stored on the Ad itself (`rating`, `rate_count`). The update
is integer-only, so precision lost to truncation is never recovered:

    ratings [5, 1]    -> (5*1 + 1) // 2 = 3
    ratings [5, 1, 5] -> (3*2 + 5) // 3 = 3
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final, Tuple

from ..errors import InvalidRating, NotAuthorized
from ..runtime.events import EventEmitter
from ..types import Ad

if TYPE_CHECKING:  # pragma: no cover
    from .registry import ListingRegistry

log = logging.getLogger(__name__)

MIN_RATING: Final[int] = 1
MAX_RATING: Final[int] = 5


def fold_rating(rating: int, count: int, value: int) -> Tuple[int, int]:
    """Return the new (rating, count) after folding in `value`."""
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise InvalidRating(value=value if isinstance(value, int) else repr(value))
    if count == 0:
        return value, 1
    return (rating * count + value) // (count + 1), count + 1


class RatingAggregator:
    def __init__(self, registry: "ListingRegistry", emitter: EventEmitter) -> None:
        self._registry = registry
        self._events = emitter

    def rate(self, rater: bytes, ad_id: int, value: int) -> Ad:
        ad = self._registry.find(ad_id)
        if ad.owner == rater:
            raise NotAuthorized("owner cannot rate their own slot", ad_id=ad_id)
        rating, count = fold_rating(ad.rating, ad.rate_count, value)
        updated = ad.with_changes(rating=rating, rate_count=count)
        self._registry.store(updated)
        self._events.emit(
            b"AdRated",
            {"id": ad_id, "rater": rater, "value": value, "rating": rating, "count": count},
        )
        log.debug("rating: ad %d rated %d -> %d (n=%d)", ad_id, value, rating, count)
        return updated


__all__ = ["MIN_RATING", "MAX_RATING", "fold_rating", "RatingAggregator"]
