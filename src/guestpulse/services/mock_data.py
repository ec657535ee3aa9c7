"""Fallback review data: a fixed seed set plus seeded synthetic reviews.

Used only when the primary source yields nothing, so the dashboard always has
something to show. Everything here sits behind ``DemoDataFallback`` so it can
be switched off or replaced.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..core.catalog import DEFAULT_PROPERTIES
from ..core.constants import MockDataConstants
from ..core.models import Category, Channel, Property, Review
from ..utils.dates import parse_timestamp, utc_now

logger = logging.getLogger(__name__)


def _seed(id, listing_id, listing_name, guest_name, rating, comment, date, channel, category,
          approved, tags, response=None, response_date=None) -> Review:
    return Review(
        id=id,
        listing_id=listing_id,
        listing_name=listing_name,
        guest_name=guest_name,
        rating=rating,
        comment=comment,
        date=parse_timestamp(date),
        channel=Channel(channel),
        category=Category(category),
        is_approved=approved,
        is_displayed=approved,
        response_from_host=response,
        response_date=parse_timestamp(response_date),
        tags=tuple(tags),
    )


SEED_REVIEWS: List[Review] = [
    # Downtown Luxury Loft
    _seed("1", "1", "Downtown Luxury Loft", "Sarah Johnson", 5,
          "Absolutely stunning property! The views are incredible and the location is perfect. Everything was "
          "spotless and the host was very responsive. Would definitely stay here again.",
          "2024-01-15T10:30:00Z", "airbnb", "overall", True, ["cleanliness", "location", "views"],
          response="Thank you so much Sarah! We're thrilled you enjoyed your stay.",
          response_date="2024-01-16T09:15:00Z"),
    _seed("2", "1", "Downtown Luxury Loft", "Michael Chen", 4,
          "Great location and beautiful space. The only minor issue was the noise from the street at night, "
          "but overall a fantastic stay.",
          "2024-01-10T14:20:00Z", "booking", "location", True, ["location", "noise"]),
    _seed("3", "1", "Downtown Luxury Loft", "Emily Rodriguez", 5,
          "Perfect for our business trip. The workspace setup was excellent and check-in was seamless.",
          "2024-01-08T16:45:00Z", "direct", "checkin", True, ["business", "workspace", "checkin"]),
    _seed("4", "1", "Downtown Luxury Loft", "David Park", 3,
          "The apartment was nice but had some cleanliness issues. The bathroom could have been better "
          "maintained.",
          "2024-01-05T11:30:00Z", "vrbo", "cleanliness", False, ["cleanliness", "maintenance"]),
    # Cozy Marina Apartment
    _seed("5", "2", "Cozy Marina Apartment", "Lisa Thompson", 5,
          "Amazing waterfront location! The apartment was cozy and had everything we needed. The host provided "
          "excellent local recommendations.",
          "2024-01-12T09:15:00Z", "airbnb", "overall", True, ["location", "recommendations", "waterfront"],
          response="So happy you enjoyed the marina views Lisa! Thanks for being a wonderful guest.",
          response_date="2024-01-13T08:00:00Z"),
    _seed("6", "2", "Cozy Marina Apartment", "James Wilson", 4,
          "Good value for money. The location is excellent for walking and the apartment was clean and "
          "comfortable.",
          "2024-01-07T13:20:00Z", "booking", "value", True, ["value", "walking", "comfortable"]),
    _seed("7", "2", "Cozy Marina Apartment", "Anna Martinez", 4,
          "Lovely apartment with great views. Communication with the host was excellent throughout our stay.",
          "2024-01-03T15:45:00Z", "direct", "communication", True, ["views", "communication", "host"]),
    # Modern SoMa Studio
    _seed("8", "3", "Modern SoMa Studio", "Robert Kim", 5,
          "Perfect for a business trip. Great workspace setup and super fast WiFi. Location is ideal for "
          "accessing downtown.",
          "2024-01-14T12:00:00Z", "airbnb", "overall", True, ["business", "workspace", "wifi", "downtown"]),
    _seed("9", "3", "Modern SoMa Studio", "Jennifer Lee", 4,
          "Clean and modern studio with good amenities. The building has nice facilities and the check-in "
          "process was smooth.",
          "2024-01-09T10:30:00Z", "vrbo", "checkin", True, ["modern", "amenities", "facilities"]),
    _seed("10", "3", "Modern SoMa Studio", "Mark Davis", 3,
          "The studio was okay but felt a bit cramped for two people. Location is good though.",
          "2024-01-06T14:15:00Z", "booking", "accuracy", False, ["space", "cramped", "location"]),
    # Older reviews
    _seed("11", "1", "Downtown Luxury Loft", "Sophie Brown", 5,
          "Exceptional stay! The loft exceeded all expectations. Beautiful design, perfect location, and the "
          "host went above and beyond.",
          "2023-12-28T16:20:00Z", "airbnb", "overall", True, ["design", "expectations", "host"]),
    _seed("12", "2", "Cozy Marina Apartment", "Tom Anderson", 2,
          "The apartment had some maintenance issues and the WiFi was unreliable. The location was the only "
          "redeeming factor.",
          "2023-12-25T11:45:00Z", "vrbo", "overall", False, ["maintenance", "wifi", "issues"]),
]


class SyntheticReviewGenerator:
    """Generate demo reviews by cycling fixed pools; randomness comes from a per-call seeded RNG."""

    def __init__(self, seed: Optional[int] = None, properties: Optional[Sequence[Property]] = None,
                 clock: Callable[[], datetime] = utc_now, start_index: int = len(SEED_REVIEWS) + 1):
        self.seed = seed
        self.properties = list(properties or DEFAULT_PROPERTIES)
        self.clock = clock
        self.start_index = start_index

    def generate_additional(self, count: int) -> List[Review]:
        """Generate ``count`` reviews. A fixed seed gives the same reviews on every call."""
        rng = random.Random(self.seed)
        now = self.clock()
        window = timedelta(days=MockDataConstants.SYNTHETIC_WINDOW_DAYS)
        reviews = []
        for index in range(max(0, count)):
            prop = self.properties[index % len(self.properties)]
            rating = rng.randint(4, 5)
            date = now - window * rng.random()
            is_approved = rng.random() > MockDataConstants.APPROVED_THRESHOLD
            is_displayed = rng.random() > MockDataConstants.DISPLAYED_THRESHOLD
            reviews.append(Review(
                id=f"review-{index + self.start_index}",
                listing_id=prop.id,
                listing_name=prop.name,
                guest_name=MockDataConstants.GUEST_NAMES[index % len(MockDataConstants.GUEST_NAMES)],
                rating=rating,
                comment=MockDataConstants.COMMENTS[index % len(MockDataConstants.COMMENTS)],
                date=date,
                channel=Channel(MockDataConstants.CHANNELS[index % len(MockDataConstants.CHANNELS)]),
                category=Category(MockDataConstants.CATEGORIES[index % len(MockDataConstants.CATEGORIES)]),
                is_approved=is_approved,
                is_displayed=is_displayed,
            ))
        return reviews


class DemoDataFallback:
    """Seed reviews followed by ``count`` synthetic ones."""

    def __init__(self, generator: Optional[SyntheticReviewGenerator] = None,
                 count: int = MockDataConstants.SYNTHETIC_REVIEW_COUNT,
                 seed_reviews: Sequence[Review] = SEED_REVIEWS):
        self.generator = generator or SyntheticReviewGenerator()
        self.count = count
        self.seed_reviews = list(seed_reviews)

    def reviews(self) -> List[Review]:
        synthetic = self.generator.generate_additional(self.count)
        logger.info(f"Serving {len(self.seed_reviews)} seed and {len(synthetic)} synthetic reviews")
        return self.seed_reviews + synthetic
