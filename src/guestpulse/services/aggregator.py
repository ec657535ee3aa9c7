"""Cross-source review collection and aggregation."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import List, Optional, Sequence

from ..core.constants import ErrorConstants
from ..core.errors import SourceUnavailable
from ..core.models import AggregatedReviews, ConnectivityResult, Property, Review, SourceResult
from ..core.normalize import PlacesSourceNormalizer, PrimarySourceNormalizer
from .google_client import GooglePlacesClient
from .hostaway_client import HostawayClient
from .mock_data import DemoDataFallback

logger = logging.getLogger(__name__)


class SourceFeed:
    """A source client paired with its normalizer."""

    name = "source"

    def collect(self) -> SourceResult:
        raise NotImplementedError

    def test_connection(self) -> ConnectivityResult:
        raise NotImplementedError


class HostawayFeed(SourceFeed):
    """Primary feed. Falls back to demo data when Hostaway yields nothing."""

    name = "hostaway"

    def __init__(self, client: HostawayClient, normalizer: Optional[PrimarySourceNormalizer] = None,
                 fallback: Optional[DemoDataFallback] = None):
        self.client = client
        self.normalizer = normalizer or PrimarySourceNormalizer()
        self.fallback = fallback

    def collect(self) -> SourceResult:
        try:
            raw = self.client.fetch_raw()
        except SourceUnavailable as e:
            return self._fall_back(str(e))

        if not raw:
            return self._fall_back("no reviews returned")

        return SourceResult(source=self.name, reviews=self.normalizer.normalize(raw))

    def _fall_back(self, reason: str) -> SourceResult:
        if self.fallback is None:
            logger.warning(f"Hostaway unavailable ({reason}); fallback disabled")
            return SourceResult(source=self.name, reviews=[], degraded=True, error=reason)

        logger.warning(f"Hostaway unavailable ({reason}); using demo data")
        return SourceResult(source=self.name, reviews=self.fallback.reviews(), degraded=True, error=reason)

    def test_connection(self) -> ConnectivityResult:
        return self.client.test_connection()


class GooglePlacesFeed(SourceFeed):
    """Secondary feed: Google reviews for each catalog property. No fallback."""

    name = "google"

    def __init__(self, client: GooglePlacesClient, properties: Sequence[Property],
                 normalizer: Optional[PlacesSourceNormalizer] = None):
        self.client = client
        self.properties = list(properties)
        self.normalizer = normalizer or PlacesSourceNormalizer()

    def collect(self) -> SourceResult:
        if not self.client.is_configured():
            return SourceResult(source=self.name, reviews=[])

        reviews: List[Review] = []
        for prop in self.properties:
            reviews.extend(self.reviews_for(prop))
        logger.info(f"Collected {len(reviews)} Google reviews for {len(self.properties)} properties")
        return SourceResult(source=self.name, reviews=reviews)

    def reviews_for(self, prop: Property) -> List[Review]:
        """Google reviews for one property; empty when the client is not configured."""
        if not self.client.is_configured():
            return []
        entries = self.client.get_place_reviews(prop.name, prop.full_address)
        return self.normalizer.normalize(entries, prop.id, prop.name)

    def test_connection(self) -> ConnectivityResult:
        if not self.properties:
            return ConnectivityResult(source=self.name, ok=self.client.is_configured(), detail="No properties to look up")
        prop = self.properties[0]
        return self.client.test_connection(prop.name, prop.full_address)


class ReviewAggregator:
    """Collects every feed concurrently and merges the results in feed order."""

    def __init__(self, join_timeout: float = ErrorConstants.SOURCE_JOIN_TIMEOUT):
        self.join_timeout = join_timeout

    def collect_all(self, feeds: Sequence[SourceFeed]) -> List[SourceResult]:
        """Run feeds in parallel; a feed that raises or times out yields an empty degraded result."""
        if not feeds:
            return []

        executor = ThreadPoolExecutor(max_workers=len(feeds))
        try:
            futures = [executor.submit(feed.collect) for feed in feeds]
            results = []
            for feed, future in zip(feeds, futures):
                try:
                    result = future.result(timeout=self.join_timeout)
                    logger.info(f"✅ {feed.name}: collected {len(result.reviews)} reviews")
                except FutureTimeout:
                    logger.error(f"❌ {feed.name}: timed out after {self.join_timeout}s")
                    result = SourceResult(source=feed.name, reviews=[], degraded=True,
                                          error=str(SourceUnavailable(feed.name, "timed out")))
                except Exception as e:
                    logger.error(f"❌ {feed.name}: failed with error: {e}")
                    result = SourceResult(source=feed.name, reviews=[], degraded=True,
                                          error=str(SourceUnavailable(feed.name, str(e))))
                results.append(result)
            return results
        finally:
            # Do not block on a stuck feed; its thread finishes on its own
            executor.shutdown(wait=False)

    def aggregate(self, feeds: Sequence[SourceFeed]) -> AggregatedReviews:
        """Concatenate feed results. No cross-source deduplication."""
        start_time = time.time()
        results = self.collect_all(feeds)

        reviews: List[Review] = []
        aggregated = AggregatedReviews(reviews=reviews)
        for result in results:
            reviews.extend(result.reviews)
            aggregated.sources[result.source] = len(result.reviews)
            if result.degraded:
                aggregated.degraded = True
            if result.error:
                aggregated.errors[result.source] = result.error

        elapsed_time = time.time() - start_time
        logger.info(f"Aggregated {len(reviews)} reviews from {len(results)} sources in {elapsed_time:.1f}s")
        return aggregated
