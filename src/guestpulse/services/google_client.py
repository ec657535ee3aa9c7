"""Google Places/Reviews data collection service for GuestPulse."""

import hashlib
import logging
from typing import Any, Dict, List, Optional

import requests
from diskcache import Cache

from ..core.config import Settings
from ..core.constants import CacheConstants
from ..core.models import ConnectivityResult, PlaceDetails

logger = logging.getLogger(__name__)


class GooglePlacesClient:
    """Two-step Google Places lookup: text query -> place id -> place details.

    Every failure is logged and reported as None; an unconfigured client never
    touches the network.
    """

    source = "google"

    def __init__(self, api_key: str, base_url: str = "https://maps.googleapis.com/maps/api/place",
                 timeout: float = 10.0, cache: Optional[Cache] = None,
                 cache_ttl_hours: int = CacheConstants.CACHE_TTL_HOURS,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.cache_ttl_hours = cache_ttl_hours
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "GooglePlacesClient":
        cache = Cache(settings.place_cache_dir) if settings.google_maps_api_key else None
        return cls(
            api_key=settings.google_maps_api_key,
            base_url=settings.google_places_base_url,
            timeout=settings.google_timeout,
            cache=cache,
            cache_ttl_hours=settings.place_cache_ttl_hours,
            session=session,
        )

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def configuration_info(self) -> Dict[str, Any]:
        return {
            "isConfigured": self.is_configured(),
            "requirements": [
                "Google Cloud Project with Places API enabled",
                "API Key with Places API access",
                "Environment variable GOOGLE_MAPS_API_KEY set",
                "Billing account configured (Places API requires billing)",
            ],
            "limitations": [
                "Limited to 5 reviews per place (Google limitation)",
                "Reviews are not real-time, cached by Google",
                "No ability to respond to Google reviews via API",
                "Rate limits apply based on API usage tier",
            ],
        }

    def _get(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(
                f"{self.base_url}{path}",
                params={**params, "key": self.api_key},
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.error(f"Google Places request {path} failed: {response.status_code}")
                return None
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Google Places request {path} error: {e}")
            return None
        return data if isinstance(data, dict) else None

    def _cache_key(self, name: str, address: str) -> str:
        return "place:" + hashlib.md5(f"{name}|{address}".encode("utf-8", "surrogatepass")).hexdigest()

    def find_place(self, name: str, address: str) -> Optional[str]:
        """Resolve a property name and address to a place id."""
        if not self.is_configured():
            logger.warning("Google Maps API key not configured")
            return None

        cache_key = self._cache_key(name, address)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached:
                logger.debug(f"Cache hit for place lookup: {cache_key[6:6 + CacheConstants.CACHE_KEY_LENGTH]}...")
                return cached

        data = self._get("/findplacefromtext/json", {
            "input": f"{name} {address}",
            "inputtype": "textquery",
            "fields": "place_id,name,formatted_address",
        })
        if not data or data.get("status") != "OK" or not data.get("candidates"):
            return None

        place_id = data["candidates"][0].get("place_id") or None
        if place_id and self.cache is not None:
            self.cache.set(cache_key, place_id, expire=3600 * self.cache_ttl_hours)
        return place_id

    def get_details(self, place_id: str) -> Optional[PlaceDetails]:
        """Fetch rating summary and reviews for a place id."""
        if not self.is_configured():
            logger.warning("Google Maps API key not configured")
            return None

        data = self._get("/details/json", {
            "place_id": place_id,
            "fields": "reviews,rating,user_ratings_total,name",
        })
        if not data or data.get("status") != "OK" or not isinstance(data.get("result"), dict):
            return None

        result = data["result"]
        reviews = result.get("reviews") or []
        logger.info(f"Retrieved {len(reviews)} reviews for place {place_id}")
        return PlaceDetails(
            reviews=list(reviews) if isinstance(reviews, list) else [],
            rating=result.get("rating") or 0,
            total_ratings=result.get("user_ratings_total") or 0,
            name=result.get("name"),
        )

    def get_place_reviews(self, name: str, address: str) -> List[Dict[str, Any]]:
        """Raw review entries for a property; empty when either lookup step yields nothing."""
        place_id = self.find_place(name, address)
        if not place_id:
            logger.info(f"Could not find place ID for {name}")
            return []

        details = self.get_details(place_id)
        if not details or not details.reviews:
            logger.info(f"No reviews found for {name}")
            return []
        return details.reviews

    def test_connection(self, name: str, address: str) -> ConnectivityResult:
        """Run both lookup steps for one property and report what was found."""
        if not self.is_configured():
            return ConnectivityResult(source=self.source, ok=False, detail="Google Places API not configured")

        place_id = self.find_place(name, address)
        if not place_id:
            return ConnectivityResult(
                source=self.source,
                ok=True,
                detail="Property not found in Google Places, but API is working",
                data={"placeId": None, "found": False},
            )

        details = self.get_details(place_id)
        return ConnectivityResult(
            source=self.source,
            ok=True,
            detail="Google Places API is working correctly",
            data={
                "placeId": place_id,
                "found": True,
                "reviewsCount": len(details.reviews) if details else 0,
                "rating": details.rating if details else 0,
                "totalRatings": details.total_ratings if details else 0,
            },
        )
