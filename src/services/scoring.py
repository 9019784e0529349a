"""
Distance scoring: map vector-store distance to a bounded confidence and a match tier,
and summarize confidence and tiers across a result set.
Confidence and tier use independent breakpoints; tier is never derived from confidence.
"""

from collections.abc import Sequence
from typing import Literal

from src.api.schemas import Community, ConfidenceStats, TierDistribution

MatchTier = Literal["exact", "semantic", "adjacent", "peripheral"]

MATCH_TIERS: tuple[MatchTier, ...] = ("exact", "semantic", "adjacent", "peripheral")

CONFIDENCE_FLOOR = 0.1
CONFIDENCE_CEILING = 1.0

# Upper distance bound per tier (exclusive); anything at or beyond the last is peripheral.
TIER_EXACT_MAX = 0.2
TIER_SEMANTIC_MAX = 0.35
TIER_ADJACENT_MAX = 0.65


def confidence_from_distance(distance: float) -> float:
    """
    Convert a distance to confidence in [0.1, 1.0]; lower distance, higher confidence.

    Piecewise linear and continuous at each breakpoint:
    - <0.8:    0.90-1.0  (excellent match)
    - 0.8-1.0: 0.70-0.9  (strong match)
    - 1.0-1.2: 0.50-0.7  (moderate match)
    - 1.2-1.4: 0.30-0.5  (weak match)
    - >=1.4:   0.10-0.3  (very weak match, floored at 0.1)

    Returns the unrounded value; round only for display.
    """
    if distance < 0.8:
        return min(CONFIDENCE_CEILING, 0.9 + (0.8 - distance) * 0.125)
    if distance < 1.0:
        return 0.7 + (1.0 - distance) * 1.0
    if distance < 1.2:
        return 0.5 + (1.2 - distance) * 1.0
    if distance < 1.4:
        return 0.3 + (1.4 - distance) * 1.0
    return max(CONFIDENCE_FLOOR, 0.3 - (distance - 1.4) * 0.33)


def classify_match_tier(distance: float) -> MatchTier:
    """
    Classify a distance into a match tier.
    Boundaries: exact < 0.2 <= semantic < 0.35 <= adjacent < 0.65 <= peripheral.
    """
    if distance < TIER_EXACT_MAX:
        return "exact"
    if distance < TIER_SEMANTIC_MAX:
        return "semantic"
    if distance < TIER_ADJACENT_MAX:
        return "adjacent"
    return "peripheral"


def confidence_stats(communities: Sequence[Community]) -> ConfidenceStats:
    """Mean, median, min and max confidence rounded to 3 decimals; all zero when empty."""
    if not communities:
        return ConfidenceStats(mean=0, median=0, min=0, max=0)

    confidences = sorted(c.confidence for c in communities)
    count = len(confidences)
    mid = count // 2
    if count % 2 == 0:
        median = (confidences[mid - 1] + confidences[mid]) / 2
    else:
        median = confidences[mid]

    return ConfidenceStats(
        mean=round(sum(confidences) / count, 3),
        median=round(median, 3),
        min=round(confidences[0], 3),
        max=round(confidences[-1], 3),
    )


def tier_distribution(communities: Sequence[Community]) -> TierDistribution:
    """Count communities per match tier; every tier is present, zero if unseen."""
    counts = dict.fromkeys(MATCH_TIERS, 0)
    for community in communities:
        counts[community.match_tier] += 1
    return TierDistribution(**counts)
