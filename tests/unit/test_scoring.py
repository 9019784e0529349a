"""
Unit tests for distance scoring: confidence curve, match tiers, stats and tier distribution.
"""

import pytest

from src.api.schemas import Community
from src.services.scoring import (
    classify_match_tier,
    confidence_from_distance,
    confidence_stats,
    tier_distribution,
)


def make_community(confidence: float = 0.5, match_tier: str = "adjacent") -> Community:
    return Community(
        id="discover_1",
        title="Forum",
        url="https://forum.example.com",
        description="",
        users_count=0,
        active_users_30_days=0,
        engagement_tier="unknown",
        categories="",
        tags="",
        confidence=confidence,
        distance=0.5,
        match_tier=match_tier,
    )


def test_confidence_is_one_at_zero_distance() -> None:
    assert confidence_from_distance(0.0) == 1.0


def test_confidence_excellent_below_0_8() -> None:
    """<0.8 -> [0.9, 1.0]."""
    assert confidence_from_distance(0.4) == pytest.approx(0.95)
    assert 0.9 < confidence_from_distance(0.79) <= 1.0


def test_confidence_breakpoints_use_next_row() -> None:
    """Distance exactly on a breakpoint uses the lower-confidence row; curve is continuous."""
    assert confidence_from_distance(0.8) == pytest.approx(0.9)
    assert confidence_from_distance(1.0) == pytest.approx(0.7)
    assert confidence_from_distance(1.2) == pytest.approx(0.5)
    assert confidence_from_distance(1.4) == pytest.approx(0.3)


def test_confidence_mid_ranges() -> None:
    assert confidence_from_distance(0.9) == pytest.approx(0.8)
    assert confidence_from_distance(1.1) == pytest.approx(0.6)
    assert confidence_from_distance(1.3) == pytest.approx(0.4)
    assert confidence_from_distance(1.7) == pytest.approx(0.201)


def test_confidence_never_below_floor() -> None:
    """Far distances are floored at 0.1 instead of going negative."""
    assert confidence_from_distance(2.0) >= 0.1
    assert confidence_from_distance(5.0) == 0.1
    assert confidence_from_distance(1000.0) == 0.1


def test_confidence_monotonic_non_increasing() -> None:
    distances = [i / 100 for i in range(0, 301)]
    confidences = [confidence_from_distance(d) for d in distances]
    assert all(a >= b for a, b in zip(confidences, confidences[1:]))
    assert all(0.1 <= c <= 1.0 for c in confidences)


@pytest.mark.parametrize(
    ("distance", "tier"),
    [
        (0.0, "exact"),
        (0.1, "exact"),
        (0.19, "exact"),
        (0.2, "semantic"),
        (0.34, "semantic"),
        (0.35, "adjacent"),
        (0.64, "adjacent"),
        (0.65, "peripheral"),
        (2.0, "peripheral"),
    ],
)
def test_classify_match_tier_boundaries(distance: float, tier: str) -> None:
    assert classify_match_tier(distance) == tier


def test_tier_independent_of_confidence() -> None:
    """0.7 is peripheral although its confidence (0.9125) is in the excellent band."""
    assert classify_match_tier(0.7) == "peripheral"
    assert confidence_from_distance(0.7) > 0.9


def test_stats_empty() -> None:
    stats = confidence_stats([])
    assert stats.model_dump() == {"mean": 0, "median": 0, "min": 0, "max": 0}


def test_stats_single() -> None:
    stats = confidence_stats([make_community(0.85)])
    assert stats.model_dump() == {"mean": 0.85, "median": 0.85, "min": 0.85, "max": 0.85}


def test_stats_odd_count() -> None:
    stats = confidence_stats([make_community(c) for c in (0.9, 0.7, 0.5)])
    assert stats.mean == 0.7
    assert stats.median == 0.7
    assert stats.min == 0.5
    assert stats.max == 0.9


def test_stats_even_count_median_averages_middle_pair() -> None:
    stats = confidence_stats([make_community(c) for c in (0.9, 0.8, 0.6, 0.5)])
    assert stats.median == 0.7
    assert stats.mean == 0.7


def test_stats_rounded_to_three_decimals() -> None:
    stats = confidence_stats([make_community(c) for c in (0.91234, 0.81234)])
    assert stats.max == 0.912
    assert stats.min == 0.812


def test_tier_distribution_counts() -> None:
    tiers = ["exact", "exact", "semantic", "adjacent", "peripheral", "peripheral"]
    dist = tier_distribution([make_community(match_tier=t) for t in tiers])
    assert dist.model_dump() == {"exact": 2, "semantic": 1, "adjacent": 1, "peripheral": 2}


def test_tier_distribution_empty_has_all_tiers() -> None:
    dist = tier_distribution([])
    assert dist.model_dump() == {"exact": 0, "semantic": 0, "adjacent": 0, "peripheral": 0}
