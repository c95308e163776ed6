"""Tests for the loyalty rank step function."""

import pytest

from apps.loyalty.domain.ranking import LoyaltyRank, rank, standing


@pytest.mark.parametrize(
    "points, expected",
    [
        (0, LoyaltyRank.BRONZE),
        (99, LoyaltyRank.BRONZE),
        (100, LoyaltyRank.SILVER),
        (199, LoyaltyRank.SILVER),
        (200, LoyaltyRank.GOLD),
        (299, LoyaltyRank.GOLD),
        (300, LoyaltyRank.PLATINUM),
        (10_000, LoyaltyRank.PLATINUM),
    ],
)
def test_rank_boundaries(points, expected):
    assert rank(points) == expected


def test_negative_points_are_invalid():
    with pytest.raises(ValueError):
        rank(-1)


def test_custom_thresholds():
    thresholds = ((0, "BRONZE"), (50, "SILVER"), (80, "GOLD"), (90, "PLATINUM"))
    assert rank(60, thresholds) == LoyaltyRank.SILVER
    assert rank(95, thresholds) == LoyaltyRank.PLATINUM


def test_standing_reports_distance_to_next_rank():
    current = standing(130)
    assert current.rank == LoyaltyRank.SILVER
    assert current.next_rank == LoyaltyRank.GOLD
    assert current.points_to_next_rank == 70

    top = standing(300)
    assert top.next_rank is None
    assert top.points_to_next_rank is None
