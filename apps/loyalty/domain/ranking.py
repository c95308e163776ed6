"""
Loyalty Ranking

rank(points) is a pure step function over descending thresholds:
BRONZE [0, 100), SILVER [100, 200), GOLD [200, 300), PLATINUM [300, inf).
Points only grow, so crossing a threshold is a one-way promotion.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from shared.application.config import DEFAULT_LOYALTY_THRESHOLDS


class LoyaltyRank(str, Enum):
    BRONZE = 'BRONZE'
    SILVER = 'SILVER'
    GOLD = 'GOLD'
    PLATINUM = 'PLATINUM'


Thresholds = Sequence[tuple[int, str]]


def _descending(thresholds: Thresholds) -> list[tuple[int, str]]:
    return sorted(thresholds, key=lambda item: item[0], reverse=True)


def rank(points: int, thresholds: Thresholds = DEFAULT_LOYALTY_THRESHOLDS) -> LoyaltyRank:
    if points < 0:
        raise ValueError("Loyalty points cannot be negative")
    for minimum, name in _descending(thresholds):
        if points >= minimum:
            return LoyaltyRank(name)
    return LoyaltyRank.BRONZE


@dataclass(frozen=True)
class LoyaltyStanding:
    points: int
    rank: LoyaltyRank
    next_rank: LoyaltyRank | None
    points_to_next_rank: int | None


def standing(points: int, thresholds: Thresholds = DEFAULT_LOYALTY_THRESHOLDS) -> LoyaltyStanding:
    current = rank(points, thresholds)
    upcoming = [(minimum, name) for minimum, name in thresholds if minimum > points]
    if not upcoming:
        return LoyaltyStanding(points=points, rank=current, next_rank=None, points_to_next_rank=None)
    minimum, name = min(upcoming, key=lambda item: item[0])
    return LoyaltyStanding(
        points=points,
        rank=current,
        next_rank=LoyaltyRank(name),
        points_to_next_rank=minimum - points,
    )
