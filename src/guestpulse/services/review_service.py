"""Review operations exposed to the dashboard and the public property page."""

import dataclasses
import logging
import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.catalog import find_property, load_properties
from ..core.config import Settings
from ..core.errors import InvalidRequest, NotFound
from ..core.filtering import filter_reviews
from ..core.models import ConnectivityResult, FilterSpec, PropertyReviews, Review, ReviewListing
from ..core.sorting import sort_reviews
from ..core.stats import compute_stats
from ..utils.data_prep import reviews_to_csv
from .aggregator import GooglePlacesFeed, HostawayFeed, ReviewAggregator, SourceFeed
from .google_client import GooglePlacesClient
from .hostaway_client import HostawayClient
from .mock_data import DemoDataFallback, SyntheticReviewGenerator

logger = logging.getLogger(__name__)

# Update keys accepted from the dashboard -> review attribute, expected type
UPDATABLE_FIELDS = {
    "isApproved": ("is_approved", bool),
    "isDisplayed": ("is_displayed", bool),
    "tags": ("tags", list),
    "responseFromHost": ("response_from_host", str),
}


class ReviewService:
    """Holds the current review collection and serves filtered views of it.

    The collection is replaced as a whole on refresh or update, so concurrent
    readers always see a complete snapshot.
    """

    def __init__(self, feeds: Sequence[SourceFeed], aggregator: Optional[ReviewAggregator] = None):
        self.feeds = list(feeds)
        self.aggregator = aggregator or ReviewAggregator()
        self._lock = threading.Lock()
        self._reviews: Optional[Tuple[Review, ...]] = None
        self.degraded = False
        self.errors: Dict[str, str] = {}

    def refresh(self) -> List[Review]:
        """Re-collect every feed and replace the collection."""
        aggregated = self.aggregator.aggregate(self.feeds)
        with self._lock:
            self._reviews = tuple(aggregated.reviews)
            self.degraded = aggregated.degraded
            self.errors = dict(aggregated.errors)
        if aggregated.degraded:
            logger.warning(f"Serving degraded review data: {aggregated.errors}")
        return list(aggregated.reviews)

    @property
    def reviews(self) -> Tuple[Review, ...]:
        if self._reviews is None:
            self.refresh()
        return self._reviews

    def get_aggregated_reviews(self, filter_spec: Optional[FilterSpec] = None, sort_field: str = "date",
                               direction: str = "desc") -> ReviewListing:
        """Filter, then sort; stats are computed over the filtered set."""
        start_time = time.time()
        reviews = self.reviews
        filtered = filter_reviews(reviews, filter_spec)
        logger.info(f"Filtered to {len(filtered)} reviews (from {len(reviews)})")
        ordered = sort_reviews(filtered, sort_field, direction)

        return ReviewListing(
            reviews=ordered,
            stats=compute_stats(filtered),
            total=len(ordered),
            original_total=len(reviews),
            degraded=self.degraded,
            errors=dict(self.errors),
            processing_time_ms=int((time.time() - start_time) * 1000),
        )

    def update_review_flags(self, review_id: str, updates: Mapping[str, Any]) -> Review:
        """Apply a moderation update and return the new review.

        Un-approving a review without saying otherwise also hides it.
        """
        changes = self._validate_updates(updates)
        self.reviews  # load the collection on first use

        with self._lock:
            current = self._reviews
            index = next((i for i, review in enumerate(current) if review.id == review_id), None)
            if index is None:
                raise NotFound(f"Review {review_id} not found")

            if changes.get("is_approved") is False and "is_displayed" not in changes:
                changes["is_displayed"] = False

            updated = dataclasses.replace(current[index], **changes)
            self._reviews = current[:index] + (updated,) + current[index + 1:]

        logger.info(f"Updated review {review_id} with: {updates}")
        return updated

    def _validate_updates(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(updates, Mapping) or not updates:
            raise InvalidRequest("Review updates are required", ["updates"])

        rejected = [key for key in updates if key not in UPDATABLE_FIELDS]
        if rejected:
            raise InvalidRequest(f"Unsupported update fields: {', '.join(rejected)}", rejected)

        changes: Dict[str, Any] = {}
        invalid = []
        for key, value in updates.items():
            attribute, expected = UPDATABLE_FIELDS[key]
            if not isinstance(value, expected):
                invalid.append(key)
            elif expected is list:
                if not all(isinstance(tag, str) for tag in value):
                    invalid.append(key)
                else:
                    changes[attribute] = tuple(value)
            else:
                changes[attribute] = value
        if invalid:
            raise InvalidRequest(f"Invalid values for: {', '.join(invalid)}", invalid)
        return changes

    def public_reviews(self, listing_id: str, rating: Optional[int] = None,
                       category: Optional[str] = None) -> List[Review]:
        """Approved and displayed reviews for one listing, newest first."""
        visible = [
            review for review in self.reviews
            if review.is_approved and review.is_displayed and review.listing_id == listing_id
        ]
        spec = FilterSpec(
            ratings={rating} if rating else None,
            categories={category} if category else None,
        )
        return sort_reviews(filter_reviews(visible, spec), "date", "desc")

    def google_reviews(self, property_id: str) -> PropertyReviews:
        """Live Google reviews for one catalog property, with the Places configuration.

        Raises NotFound for an unknown property or when no Google feed is wired.
        """
        feed = next((f for f in self.feeds if isinstance(f, GooglePlacesFeed)), None)
        if feed is None:
            raise NotFound("Google reviews feed is not configured")

        prop = find_property(feed.properties, property_id)
        if prop is None:
            raise NotFound(f"Property {property_id} not found")

        configuration = feed.client.configuration_info()
        if not configuration.get("isConfigured"):
            logger.warning("Google Places API not configured; no reviews to fetch")
        reviews = feed.reviews_for(prop)
        logger.info(f"Fetched {len(reviews)} Google reviews for {prop.name}")
        return PropertyReviews(property=prop, reviews=reviews, configuration=configuration)

    def export_csv(self, filter_spec: Optional[FilterSpec] = None, sort_field: str = "date",
                   direction: str = "desc") -> str:
        listing = self.get_aggregated_reviews(filter_spec, sort_field, direction)
        return reviews_to_csv(listing.reviews)

    def test_source_connectivity(self) -> Dict[str, ConnectivityResult]:
        results = {}
        for feed in self.feeds:
            try:
                results[feed.name] = feed.test_connection()
            except Exception as e:
                logger.error(f"Connectivity test for {feed.name} failed: {e}")
                results[feed.name] = ConnectivityResult(source=feed.name, ok=False, detail=str(e))
        return results


def build_review_service(settings: Settings) -> ReviewService:
    """Wire clients, feeds and fallback from settings."""
    properties = load_properties(settings.properties_file)

    fallback = None
    if settings.use_fallback_data:
        fallback = DemoDataFallback(
            generator=SyntheticReviewGenerator(seed=settings.synthetic_seed, properties=properties),
            count=settings.synthetic_review_count,
        )

    feeds: List[SourceFeed] = [
        HostawayFeed(HostawayClient.from_settings(settings), fallback=fallback),
        GooglePlacesFeed(GooglePlacesClient.from_settings(settings), properties),
    ]
    return ReviewService(feeds, ReviewAggregator(join_timeout=settings.source_join_timeout))
