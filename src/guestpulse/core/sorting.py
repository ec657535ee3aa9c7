"""Sort engine over canonical reviews."""

from typing import Any, Callable, Dict, Iterable, List

from .errors import InvalidRequest
from .models import Review

SORT_KEYS: Dict[str, Callable[[Review], Any]] = {
    "date": lambda review: review.date.timestamp(),
    "rating": lambda review: review.rating,
    "guestName": lambda review: review.guest_name.lower(),
    "listingName": lambda review: review.listing_name.lower(),
}

SORT_DIRECTIONS = ("asc", "desc")


def sort_reviews(reviews: Iterable[Review], field: str = "date", direction: str = "desc") -> List[Review]:
    """Return a stably sorted copy. ``desc`` on date means newest first."""
    if field not in SORT_KEYS:
        raise InvalidRequest(f"Unsupported sort field: {field}", ["sort"])
    if direction not in SORT_DIRECTIONS:
        raise InvalidRequest(f"Unsupported sort direction: {direction}", ["direction"])
    return sorted(reviews, key=SORT_KEYS[field], reverse=direction == "desc")
