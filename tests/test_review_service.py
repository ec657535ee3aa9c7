"""Tests for the review service: listing, moderation and public views."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from guestpulse.core.config import Settings
from guestpulse.core.errors import InvalidRequest, NotFound
from guestpulse.core.models import Channel, FilterSpec, Property
from guestpulse.services.aggregator import GooglePlacesFeed, HostawayFeed
from guestpulse.services.review_service import ReviewService, build_review_service


@pytest.fixture
def feed(static_feed, sample_reviews):
    return static_feed("hostaway", sample_reviews)


@pytest.fixture
def service(feed):
    return ReviewService([feed])


class TestReviewListing:
    """get_aggregated_reviews"""

    def test_default_listing(self, service):
        """Test the unfiltered listing, newest first."""
        listing = service.get_aggregated_reviews()

        assert [r.id for r in listing.reviews] == ["4", "1", "2", "3"]
        assert listing.total == 4
        assert listing.original_total == 4
        assert listing.degraded is False

    def test_stats_cover_the_filtered_set(self, service):
        """Test that stats describe the filtered reviews only."""
        listing = service.get_aggregated_reviews(FilterSpec(ratings={5}), "rating", "asc")

        assert [r.id for r in listing.reviews] == ["1", "4"]
        assert listing.total == 2
        assert listing.original_total == 4
        assert listing.stats.total_reviews == 2
        assert listing.stats.average_rating == 5.0

    def test_empty_filter_result(self, service):
        """Test a filter that matches nothing."""
        listing = service.get_aggregated_reviews(FilterSpec(search_term="no such text"))

        assert listing.reviews == []
        assert listing.stats.total_reviews == 0
        assert listing.stats.average_rating == 0

    def test_collection_is_loaded_once(self, service, feed):
        """Test that feeds are collected once until refresh."""
        service.get_aggregated_reviews()
        service.get_aggregated_reviews(FilterSpec(ratings={4}))
        assert feed.calls == 1

        service.refresh()
        assert feed.calls == 2

    def test_degraded_flag_is_reported(self, static_feed, sample_reviews):
        """Test that feed degradation reaches the listing."""
        feed = static_feed("hostaway", sample_reviews, degraded=True, error="hostaway: HTTP 500")
        listing = ReviewService([feed]).get_aggregated_reviews()

        assert listing.degraded is True
        assert listing.errors == {"hostaway": "hostaway: HTTP 500"}

    def test_bad_sort_is_rejected(self, service):
        """Test that an unknown sort field is rejected."""
        with pytest.raises(InvalidRequest):
            service.get_aggregated_reviews(sort_field="popularity")

    def test_listing_to_dict(self, service):
        """Test the listing wire format."""
        data = service.get_aggregated_reviews().to_dict()

        assert data["total"] == 4
        assert data["reviews"][0]["id"] == "4"
        assert data["reviews"][0]["date"] == "2024-02-03T15:45:00.000Z"
        assert data["stats"]["totalReviews"] == 4


class TestModeration:
    """update_review_flags"""

    def test_approve_and_display(self, service):
        """Test approving and showing a review."""
        updated = service.update_review_flags("3", {"isApproved": True, "isDisplayed": True})

        assert updated.is_approved is True
        assert updated.is_displayed is True
        assert service.get_aggregated_reviews(FilterSpec(is_approved=False)).total == 0

    def test_unapproving_also_hides(self, service):
        """Test that unapproving hides the review."""
        updated = service.update_review_flags("1", {"isApproved": False})

        assert updated.is_approved is False
        assert updated.is_displayed is False

    def test_unapproving_respects_explicit_display_flag(self, service):
        """Test that an explicit display flag wins on unapprove."""
        updated = service.update_review_flags("1", {"isApproved": False, "isDisplayed": True})
        assert updated.is_displayed is True

    def test_tags_and_response(self, service):
        """Test tag and host response updates."""
        updated = service.update_review_flags("2", {"tags": ["noise", "street"], "responseFromHost": "Sorry!"})

        assert updated.tags == ("noise", "street")
        assert updated.response_from_host == "Sorry!"

    def test_earlier_snapshots_are_untouched(self, service):
        """Test that updates do not mutate earlier snapshots."""
        before = service.get_aggregated_reviews().reviews
        service.update_review_flags("1", {"isDisplayed": False})

        original = next(r for r in before if r.id == "1")
        assert original.is_displayed is True

    def test_unknown_review(self, service):
        """Test that an unknown review id is NotFound."""
        with pytest.raises(NotFound):
            service.update_review_flags("999", {"isApproved": True})

    def test_unsupported_fields_are_rejected(self, service):
        """Test that unsupported fields are named in the error."""
        with pytest.raises(InvalidRequest) as exc_info:
            service.update_review_flags("1", {"rating": 1, "isApproved": True})
        assert exc_info.value.rejected_fields == ["rating"]

    @pytest.mark.parametrize("updates,field", [
        ({"isApproved": "yes"}, "isApproved"),
        ({"isDisplayed": 1}, "isDisplayed"),
        ({"tags": "wifi"}, "tags"),
        ({"tags": ["ok", 3]}, "tags"),
        ({"responseFromHost": 42}, "responseFromHost"),
    ])
    def test_wrong_types_are_rejected(self, service, updates, field):
        """Test that wrongly typed values are rejected."""
        with pytest.raises(InvalidRequest) as exc_info:
            service.update_review_flags("1", updates)
        assert exc_info.value.rejected_fields == [field]

    def test_empty_update_is_rejected(self, service):
        """Test that an empty update is rejected."""
        with pytest.raises(InvalidRequest):
            service.update_review_flags("1", {})


class TestPublicReviews:
    """public_reviews"""

    def test_only_approved_and_displayed_for_listing(self, service):
        """Test the public view of a listing."""
        assert [r.id for r in service.public_reviews("1")] == ["1", "2"]
        assert [r.id for r in service.public_reviews("2")] == ["4"]
        assert service.public_reviews("99") == []

    def test_newest_first(self, review_factory, static_feed):
        """Test public review ordering."""
        reviews = [
            review_factory(id="old", date=datetime(2023, 1, 1, tzinfo=timezone.utc)),
            review_factory(id="new", date=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ]
        service = ReviewService([static_feed("hostaway", reviews)])
        assert [r.id for r in service.public_reviews("1")] == ["new", "old"]

    def test_rating_and_category_filters(self, service):
        """Test public view filters."""
        assert [r.id for r in service.public_reviews("1", rating=4)] == ["2"]
        assert [r.id for r in service.public_reviews("1", category="location")] == ["2"]

    def test_hidden_after_moderation(self, service):
        """Test that hidden reviews leave the public view."""
        service.update_review_flags("2", {"isDisplayed": False})
        assert [r.id for r in service.public_reviews("1")] == ["1"]


def test_export_csv(service):
    """Test CSV export of a filtered listing."""
    lines = service.export_csv(FilterSpec(ratings={5})).split("\n")

    assert lines[0].startswith("ID,Guest Name")
    assert [line.split(",")[0] for line in lines[1:]] == ["4", "1"]


def test_connectivity_failures_are_reported(static_feed):
    """Test that a raising connectivity check is reported, not raised."""
    class Unreachable(static_feed):
        def test_connection(self):
            raise RuntimeError("dns failure")

    service = ReviewService([static_feed("hostaway", []), Unreachable("google", [])])
    results = service.test_source_connectivity()

    assert results["hostaway"].ok is True
    assert results["google"].ok is False
    assert "dns failure" in results["google"].detail


def test_build_review_service_wires_feeds():
    """Test service wiring from settings."""
    settings = Settings(_env_file=None, hostaway_api_key="", google_maps_api_key="", use_fallback_data=False,
                        properties_file=None)

    service = build_review_service(settings)

    hostaway, google = service.feeds
    assert isinstance(hostaway, HostawayFeed)
    assert hostaway.fallback is None
    assert isinstance(google, GooglePlacesFeed)
    assert google.client.is_configured() is False
    assert [p.id for p in google.properties] == ["1", "2", "3"]


class TestGoogleReviews:
    """google_reviews"""

    def setup_method(self):
        self.client = Mock()
        self.client.is_configured.return_value = True
        self.client.configuration_info.return_value = {"isConfigured": True, "requirements": []}
        self.client.get_place_reviews.return_value = [
            {"author_name": "Jane Doe", "rating": 4, "text": "Nice place", "time": 1700000000},
        ]
        self.properties = [Property(id="1", name="Downtown Luxury Loft", address="123 Main St", city="New York")]

    def make_service(self, static_feed):
        return ReviewService([static_feed("hostaway", []), GooglePlacesFeed(self.client, self.properties)])

    def test_known_property(self, static_feed):
        """Test Google reviews and configuration for a catalog property."""
        result = self.make_service(static_feed).google_reviews("1")

        assert result.property.name == "Downtown Luxury Loft"
        assert [r.id for r in result.reviews] == ["google-1-0"]
        assert result.reviews[0].channel == Channel.GOOGLE
        assert result.configuration["isConfigured"] is True
        self.client.get_place_reviews.assert_called_once_with("Downtown Luxury Loft", "123 Main St, New York")

        data = result.to_dict()
        assert data["property"] == {"id": "1", "name": "Downtown Luxury Loft", "address": "123 Main St",
                                    "city": "New York"}
        assert data["count"] == 1
        assert data["source"] == "Google Places API"

    def test_unknown_property(self, static_feed):
        """Test that an unknown property id is NotFound."""
        with pytest.raises(NotFound):
            self.make_service(static_feed).google_reviews("99")
        self.client.get_place_reviews.assert_not_called()

    def test_unconfigured_client_returns_configuration_only(self, static_feed):
        """Test that an unconfigured client yields no reviews but reports why."""
        self.client.is_configured.return_value = False
        self.client.configuration_info.return_value = {"isConfigured": False, "requirements": ["API key"]}

        result = self.make_service(static_feed).google_reviews("1")

        assert result.reviews == []
        assert result.configuration["isConfigured"] is False
        self.client.get_place_reviews.assert_not_called()

    def test_without_google_feed(self, service):
        """Test that a service without a Google feed is NotFound."""
        with pytest.raises(NotFound):
            service.google_reviews("1")
