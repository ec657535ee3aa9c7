"""Filter engine over canonical reviews."""

from datetime import datetime
from typing import Iterable, List, Optional

from .models import DateRange, FilterSpec, Review
from ..utils.dates import parse_timestamp


def searchable_text(review: Review) -> str:
    """Guest name, comment, listing name and tags joined by spaces, lowercased."""
    return " ".join([review.guest_name, review.comment, review.listing_name, *review.tags]).lower()


def _within(date: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    # An unparseable boundary matches nothing
    if start is None or end is None:
        return False
    return start <= date <= end


def _bounds(date_range: DateRange):
    return parse_timestamp(date_range.start), parse_timestamp(date_range.end)


def matches(review: Review, spec: FilterSpec) -> bool:
    """True when the review satisfies every constrained dimension of the spec."""
    if spec.ratings and review.rating not in spec.ratings:
        return False
    if spec.channels and review.channel.value not in spec.channels:
        return False
    if spec.categories and review.category.value not in spec.categories:
        return False
    if spec.is_approved is not None and review.is_approved != spec.is_approved:
        return False
    if spec.search_term and spec.search_term.lower() not in searchable_text(review):
        return False
    if spec.date_range is not None:
        start, end = _bounds(spec.date_range)
        if not _within(review.date, start, end):
            return False
    return True


def filter_reviews(reviews: Iterable[Review], spec: Optional[FilterSpec] = None) -> List[Review]:
    """Return the reviews matching ``spec`` in their original order."""
    if spec is None:
        return list(reviews)
    if spec.date_range is not None:
        start, end = _bounds(spec.date_range)
        if start is None or end is None:
            return []
    return [review for review in reviews if matches(review, spec)]
