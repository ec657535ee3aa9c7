"""Services for GuestPulse."""

from .aggregator import GooglePlacesFeed, HostawayFeed, ReviewAggregator
from .google_client import GooglePlacesClient
from .hostaway_client import HostawayClient
from .review_service import ReviewService, build_review_service

__all__ = [
    "GooglePlacesFeed",
    "HostawayFeed",
    "ReviewAggregator",
    "GooglePlacesClient",
    "HostawayClient",
    "ReviewService",
    "build_review_service",
]
