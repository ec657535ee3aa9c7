"""Shared fixtures for GuestPulse tests."""

from datetime import datetime, timezone

import pytest

from guestpulse.core.models import Category, Channel, ConnectivityResult, Review, SourceResult
from guestpulse.services.aggregator import SourceFeed

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_review(**overrides) -> Review:
    values = dict(
        id="r1",
        listing_id="1",
        listing_name="Downtown Luxury Loft",
        guest_name="Sarah Johnson",
        rating=5,
        comment="Great stay",
        date=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        channel=Channel.AIRBNB,
        category=Category.OVERALL,
        is_approved=True,
        is_displayed=True,
        tags=(),
    )
    values.update(overrides)
    return Review(**values)


class StaticFeed(SourceFeed):
    """Feed returning a fixed result, counting how often it is collected."""

    def __init__(self, name, reviews, degraded=False, error=None):
        self.name = name
        self.reviews = list(reviews)
        self.degraded = degraded
        self.error = error
        self.calls = 0

    def collect(self):
        self.calls += 1
        return SourceResult(source=self.name, reviews=list(self.reviews), degraded=self.degraded, error=self.error)

    def test_connection(self):
        return ConnectivityResult(source=self.name, ok=True, detail="ok")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def review_factory():
    return make_review


@pytest.fixture
def sample_reviews():
    return [
        make_review(id="1", rating=5, guest_name="Sarah Johnson", channel=Channel.AIRBNB,
                    category=Category.OVERALL, date=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
                    comment="Stunning views and spotless", tags=("views",)),
        make_review(id="2", rating=4, guest_name="michael Chen", channel=Channel.BOOKING,
                    category=Category.LOCATION, date=datetime(2024, 1, 10, 14, 20, tzinfo=timezone.utc),
                    comment="Street noise at night", tags=("noise",)),
        make_review(id="3", rating=3, guest_name="David Park", listing_id="2",
                    listing_name="Cozy Marina Apartment", channel=Channel.VRBO,
                    category=Category.CLEANLINESS, date=datetime(2023, 12, 5, 11, 30, tzinfo=timezone.utc),
                    comment="Bathroom needed work", is_approved=False, is_displayed=False,
                    tags=("maintenance",)),
        make_review(id="4", rating=5, guest_name="Anna Martinez", listing_id="2",
                    listing_name="Cozy Marina Apartment", channel=Channel.DIRECT,
                    category=Category.COMMUNICATION, date=datetime(2024, 2, 3, 15, 45, tzinfo=timezone.utc),
                    comment="Host was great", tags=("host", "WiFi")),
    ]


@pytest.fixture
def static_feed():
    return StaticFeed
