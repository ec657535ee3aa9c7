"""Data models for GuestPulse."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from ..utils.dates import to_iso
from .errors import InvalidRequest


class Channel(str, Enum):
    AIRBNB = "airbnb"
    BOOKING = "booking"
    VRBO = "vrbo"
    DIRECT = "direct"
    GOOGLE = "google"


class Category(str, Enum):
    CLEANLINESS = "cleanliness"
    COMMUNICATION = "communication"
    LOCATION = "location"
    VALUE = "value"
    ACCURACY = "accuracy"
    CHECKIN = "checkin"
    OVERALL = "overall"


@dataclass(frozen=True)
class Review:
    """Canonical guest review shared by every source."""
    id: str
    listing_id: str
    listing_name: str
    guest_name: str
    rating: int
    comment: str
    date: datetime
    channel: Channel
    category: Category
    is_approved: bool = False
    is_displayed: bool = False
    response_from_host: Optional[str] = None
    response_date: Optional[datetime] = None
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "listingId": self.listing_id,
            "listingName": self.listing_name,
            "guestName": self.guest_name,
            "rating": self.rating,
            "comment": self.comment,
            "date": to_iso(self.date),
            "channel": self.channel.value,
            "category": self.category.value,
            "isApproved": self.is_approved,
            "isDisplayed": self.is_displayed,
            "tags": list(self.tags),
        }
        if self.response_from_host is not None:
            data["responseFromHost"] = self.response_from_host
        if self.response_date is not None:
            data["responseDate"] = to_iso(self.response_date)
        return data


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range; boundaries are kept as given and parsed when filtering."""
    start: str
    end: str


def _split_param(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class FilterSpec:
    """Declarative review filter. None or empty means no constraint on that dimension."""
    ratings: Optional[FrozenSet[int]] = None
    channels: Optional[FrozenSet[str]] = None
    categories: Optional[FrozenSet[str]] = None
    is_approved: Optional[bool] = None
    search_term: Optional[str] = None
    date_range: Optional[DateRange] = None

    def __post_init__(self):
        if self.ratings is not None:
            self.ratings = frozenset(int(r) for r in self.ratings)
        if self.channels is not None:
            self.channels = frozenset(_enum_value(c) for c in self.channels)
        if self.categories is not None:
            self.categories = frozenset(_enum_value(c) for c in self.categories)

    @classmethod
    def from_params(cls, params: Mapping[str, Optional[str]]) -> "FilterSpec":
        """Build a filter from dashboard query parameters.

        ``rating``, ``channel`` and ``category`` are comma separated lists,
        ``isApproved`` is ``"true"`` or ``"false"`` and a date range needs both
        ``startDate`` and ``endDate``.
        """
        ratings = None
        raw_ratings = _split_param(params.get("rating"))
        if raw_ratings:
            try:
                ratings = frozenset(int(r) for r in raw_ratings)
            except ValueError:
                raise InvalidRequest(f"Invalid rating filter: {params.get('rating')}", ["rating"])

        approved = params.get("isApproved")
        is_approved = True if approved == "true" else False if approved == "false" else None

        date_range = None
        if params.get("startDate") and params.get("endDate"):
            date_range = DateRange(start=params["startDate"], end=params["endDate"])

        return cls(
            ratings=ratings,
            channels=frozenset(_split_param(params.get("channel"))) or None,
            categories=frozenset(_split_param(params.get("category"))) or None,
            is_approved=is_approved,
            search_term=params.get("searchTerm") or None,
            date_range=date_range,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.ratings:
            data["rating"] = sorted(self.ratings)
        if self.channels:
            data["channel"] = sorted(self.channels)
        if self.categories:
            data["category"] = sorted(self.categories)
        if self.is_approved is not None:
            data["isApproved"] = self.is_approved
        if self.search_term:
            data["searchTerm"] = self.search_term
        if self.date_range:
            data["dateRange"] = {"start": self.date_range.start, "end": self.date_range.end}
        return data


def _enum_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


@dataclass
class MonthlyTrend:
    """Count and mean rating for one year-month bucket."""
    month: str
    count: int
    average_rating: float

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "count": self.count, "averageRating": self.average_rating}


@dataclass
class ReviewStats:
    """Aggregate metrics over a review collection."""
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]
    channel_breakdown: Dict[str, int]
    category_averages: Dict[str, float]
    monthly_trends: List[MonthlyTrend]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalReviews": self.total_reviews,
            "averageRating": self.average_rating,
            "ratingDistribution": dict(self.rating_distribution),
            "channelBreakdown": dict(self.channel_breakdown),
            "categoryAverages": dict(self.category_averages),
            "monthlyTrends": [trend.to_dict() for trend in self.monthly_trends],
        }


@dataclass
class Property:
    """A managed property known to the dashboard."""
    id: str
    name: str
    address: str = ""
    city: str = ""

    @property
    def full_address(self) -> str:
        return ", ".join(part for part in (self.address, self.city) if part)


@dataclass
class PlaceDetails:
    """Place details returned by the places lookup."""
    reviews: List[Dict[str, Any]]
    rating: float = 0.0
    total_ratings: int = 0
    name: Optional[str] = None


@dataclass
class PropertyReviews:
    """Google reviews looked up for one catalog property."""
    property: Property
    reviews: List[Review]
    configuration: Dict[str, Any]
    source: str = "Google Places API"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property": {
                "id": self.property.id,
                "name": self.property.name,
                "address": self.property.address,
                "city": self.property.city,
            },
            "reviews": [review.to_dict() for review in self.reviews],
            "count": len(self.reviews),
            "source": self.source,
            "configuration": self.configuration,
        }


@dataclass
class SourceResult:
    """Reviews collected from one feed plus its health."""
    source: str
    reviews: List[Review]
    degraded: bool = False
    error: Optional[str] = None


@dataclass
class AggregatedReviews:
    """Merged reviews from every feed."""
    reviews: List[Review]
    degraded: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    sources: Dict[str, int] = field(default_factory=dict)


@dataclass
class ConnectivityResult:
    """Outcome of a source connectivity probe."""
    source: str
    ok: bool
    detail: str
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"source": self.source, "ok": self.ok, "detail": self.detail}
        if self.data is not None:
            result["data"] = self.data
        return result


@dataclass
class ReviewListing:
    """Filtered, sorted reviews with stats computed over the filtered set."""
    reviews: List[Review]
    stats: ReviewStats
    total: int
    original_total: int
    degraded: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    processing_time_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviews": [review.to_dict() for review in self.reviews],
            "stats": self.stats.to_dict(),
            "total": self.total,
            "originalTotal": self.original_total,
            "processingTimeMs": self.processing_time_ms,
        }
