"""Weighted overall score, bucket and recommendation."""

from __future__ import annotations

import logging
from typing import Optional

from visual_parity.errors import EmptyInputError
from visual_parity.models.config import ScoreWeights
from visual_parity.models.result import AggregateScore, ComponentScore

logger = logging.getLogger(__name__)

# (lower bound inclusive, bucket), checked top-down
BUCKETS = [
    (90.0, "excellent"),
    (75.0, "good"),
    (50.0, "acceptable"),
    (0.0, "poor"),
]

RECOMMENDATIONS = {
    "excellent": "Excellent implementation - ready for production",
    "good": "Good implementation with minor improvements needed",
    "acceptable": "Moderate issues requiring attention",
    "poor": "Significant issues requiring major revision",
}

SCORE_PRECISION = 2


def ssim_score(ssim: float) -> float:
    return 100 * ssim


def percent_score(percent: float) -> float:
    """Map a difference percentage onto 0-100: each percent costs 10 points."""
    return max(0.0, 100 - 10 * percent)


def bucket_for(score: float) -> str:
    for lower, bucket in BUCKETS:
        if score >= lower:
            return bucket
    return "poor"


def component_scores(
    weights: ScoreWeights,
    ssim: Optional[float] = None,
    pixel_percent: Optional[float] = None,
    color_percent: Optional[float] = None,
    success_rate: Optional[float] = None,
) -> list[ComponentScore]:
    """Build the component list from whichever metrics are available."""
    components = []
    if ssim is not None:
        components.append(ComponentScore(name="ssim", raw=ssim, score=ssim_score(ssim), weight=weights.ssim))
    if pixel_percent is not None:
        components.append(ComponentScore(
            name="pixel", raw=pixel_percent, score=percent_score(pixel_percent), weight=weights.pixel,
        ))
    if color_percent is not None:
        components.append(ComponentScore(
            name="color", raw=color_percent, score=percent_score(color_percent), weight=weights.color,
        ))
    if success_rate is not None:
        components.append(ComponentScore(
            name="properties", raw=success_rate, score=success_rate, weight=weights.properties,
        ))
    return components


def aggregate(components: list[ComponentScore], critical_issues: int = 0) -> AggregateScore:
    """Weighted mean of component scores, bucketed after rounding.

    The score is rounded before classification so that floating-point noise
    can never move a result across a bucket boundary.
    """
    if not components:
        raise EmptyInputError("No score components supplied")
    total_weight = sum(c.weight for c in components)
    if total_weight <= 0:
        raise EmptyInputError("Score components carry no weight")

    weighted = sum(c.score * c.weight for c in components) / total_weight
    score = round(weighted, SCORE_PRECISION)
    bucket = bucket_for(score)
    ready = bucket in ("excellent", "good") and critical_issues == 0
    logger.debug("Aggregate score %.2f (%s) from %d components", score, bucket, len(components))
    return AggregateScore(
        components=components,
        score=score,
        bucket=bucket,
        recommendation=RECOMMENDATIONS[bucket],
        critical_issues=critical_issues,
        ready_for_production=ready,
    )
