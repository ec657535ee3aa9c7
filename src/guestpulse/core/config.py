"""Configuration management for GuestPulse."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from .constants import CacheConstants, ErrorConstants, FileConstants, MockDataConstants


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Hostaway API
    hostaway_base_url: str = Field("https://api.hostaway.com/v1", description="Hostaway API base URL")
    hostaway_account_id: str = Field("", description="Hostaway account ID")
    hostaway_api_key: str = Field("", description="Hostaway API key")
    hostaway_timeout: float = Field(ErrorConstants.HOSTAWAY_TIMEOUT, description="Hostaway request timeout in seconds")
    hostaway_page_limit: int = Field(100, description="Reviews requested per Hostaway call")

    # Google Places API
    google_maps_api_key: str = Field("", description="Google Maps API key")
    google_places_base_url: str = Field(
        "https://maps.googleapis.com/maps/api/place", description="Google Places API base URL"
    )
    google_timeout: float = Field(ErrorConstants.GOOGLE_TIMEOUT, description="Google request timeout in seconds")
    place_cache_dir: str = Field(FileConstants.CACHE_DIR, description="Directory for cached place lookups")
    place_cache_ttl_hours: int = Field(CacheConstants.CACHE_TTL_HOURS, description="Place lookup cache TTL")

    # Fallback data
    use_fallback_data: bool = Field(True, description="Serve demo reviews when Hostaway yields nothing")
    synthetic_review_count: int = Field(
        MockDataConstants.SYNTHETIC_REVIEW_COUNT, description="Synthetic reviews added to the seed set"
    )
    synthetic_seed: Optional[int] = Field(None, description="Seed for synthetic review generation")
    properties_file: Optional[str] = Field(None, description="YAML file listing known properties")

    # Aggregation
    source_join_timeout: float = Field(ErrorConstants.SOURCE_JOIN_TIMEOUT, description="Seconds to wait per feed")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    # Retry settings
    max_retries: int = Field(ErrorConstants.MAX_RETRY_ATTEMPTS, description="Maximum retry attempts")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")


# Global settings instance
settings = Settings()
