"""Statistics over review collections."""

import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from .constants import ReviewConstants
from .models import MonthlyTrend, Review, ReviewStats
from ..utils.dates import month_key
from ..utils.numeric import clamp, round_half_up

logger = logging.getLogger(__name__)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _round1(value: float) -> float:
    return round_half_up(value, 1)


def empty_distribution() -> Dict[int, int]:
    return {rating: 0 for rating in range(ReviewConstants.MAX_RATING, ReviewConstants.MIN_RATING - 1, -1)}


def rating_distribution(reviews: Sequence[Review]) -> Dict[int, int]:
    """Histogram over 5..1; ratings are re-clamped before counting."""
    distribution = empty_distribution()
    for review in reviews:
        distribution[int(clamp(review.rating, ReviewConstants.MIN_RATING, ReviewConstants.MAX_RATING))] += 1
    return distribution


def channel_breakdown(reviews: Sequence[Review]) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for review in reviews:
        counts[review.channel.value] += 1
    return dict(counts)


def category_breakdown(reviews: Sequence[Review]) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for review in reviews:
        counts[review.category.value] += 1
    return dict(counts)


def category_averages(reviews: Sequence[Review]) -> Dict[str, float]:
    ratings: Dict[str, List[int]] = defaultdict(list)
    for review in reviews:
        ratings[review.category.value].append(review.rating)
    return {category: _round1(_mean(values)) for category, values in ratings.items()}


def monthly_trends(reviews: Sequence[Review], limit: int = ReviewConstants.MAX_MONTHLY_TRENDS) -> List[MonthlyTrend]:
    """Per year-month count and mean, ascending, keeping the most recent ``limit`` buckets."""
    buckets: Dict[str, List[int]] = defaultdict(list)
    for review in reviews:
        buckets[month_key(review.date)].append(review.rating)

    months = sorted(buckets)[-limit:] if limit > 0 else []
    return [
        MonthlyTrend(month=month, count=len(buckets[month]), average_rating=_round1(_mean(buckets[month])))
        for month in months
    ]


def compute_stats(reviews: Sequence[Review]) -> ReviewStats:
    """Compute aggregate metrics. Empty input yields all-zero stats."""
    reviews = list(reviews)
    if not reviews:
        return ReviewStats(
            total_reviews=0,
            average_rating=0,
            rating_distribution=empty_distribution(),
            channel_breakdown={},
            category_averages={},
            monthly_trends=[],
        )

    stats = ReviewStats(
        total_reviews=len(reviews),
        average_rating=_round1(_mean([review.rating for review in reviews])),
        rating_distribution=rating_distribution(reviews),
        channel_breakdown=channel_breakdown(reviews),
        category_averages=category_averages(reviews),
        monthly_trends=monthly_trends(reviews),
    )
    logger.debug(f"Computed stats over {stats.total_reviews} reviews (avg {stats.average_rating})")
    return stats
