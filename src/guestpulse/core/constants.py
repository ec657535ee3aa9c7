"""Constants and configuration values for GuestPulse."""

# Review normalization constants
class ReviewConstants:
    """Constants related to canonical review normalization."""

    MIN_RATING = 1  # lowest star rating on the canonical scale
    MAX_RATING = 5  # highest star rating on the canonical scale
    DEFAULT_RATING = 5  # used when a source carries no usable rating
    TEN_POINT_THRESHOLD = 5  # category means above this are on a 10-point scale
    EXCELLENT_CATEGORY_RATING = 8  # native-scale sub-rating that earns an "excellent-" tag

    ANONYMOUS_GUEST = "Anonymous Guest"
    PUBLISHED_STATUS = "published"

    PRIMARY_SOURCE_TAG = "hostaway"
    PLACES_SOURCE_TAG = "google-reviews"

    MAX_MONTHLY_TRENDS = 12  # most recent month buckets kept in stats
    HASH_ID_LENGTH = 12  # hex chars kept from a derived review id digest

# Error Handling Constants
class ErrorConstants:
    """Constants for error handling and retries."""

    MAX_RETRY_ATTEMPTS = 3  # maximum retry attempts
    HOSTAWAY_TIMEOUT = 15  # seconds for Hostaway requests
    GOOGLE_TIMEOUT = 10  # seconds for Google Places requests
    SOURCE_JOIN_TIMEOUT = 30  # seconds the aggregator waits for a feed
    GENERIC_ERROR_MESSAGE = "An unexpected error occurred"

# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_HOURS = 24  # place id cache time-to-live in hours
    CACHE_KEY_LENGTH = 8  # length of cache key for logging

# Mock Data Constants
class MockDataConstants:
    """Constants for fallback and synthetic review generation."""

    SYNTHETIC_REVIEW_COUNT = 20  # synthetic reviews appended to the seed set
    SYNTHETIC_WINDOW_DAYS = 30  # synthetic dates fall inside this many past days
    APPROVED_THRESHOLD = 0.2  # random() above this -> approved (~80%)
    DISPLAYED_THRESHOLD = 0.3  # random() above this -> displayed (~70%)

    GUEST_NAMES = ["Alex Smith", "Jordan Taylor", "Casey Johnson", "Riley Davis", "Morgan Wilson"]
    CHANNELS = ["airbnb", "booking", "vrbo", "direct"]
    CATEGORIES = ["overall", "cleanliness", "communication", "location", "value"]
    COMMENTS = [
        "Great stay overall, would recommend!",
        "Clean and comfortable accommodation.",
        "Perfect location for our needs.",
        "Host was very responsive and helpful.",
        "Good value for the price point.",
        "Beautiful property with excellent amenities.",
        "Had a wonderful time, thank you!",
        "Everything was as described, very satisfied.",
    ]

# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    CACHE_DIR = ".cache/places"  # place lookup cache directory
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    CSV_COLUMNS = ["ID", "Guest Name", "Rating", "Comment", "Date", "Channel", "Category", "Approved", "Displayed"]

# Domain-Specific Constants
class DomainConstants:
    """Constants for domain-specific inference logic."""

    # Upstream category labels -> canonical category
    CATEGORY_MAPPINGS = {
        'cleanliness': 'cleanliness',
        'communication': 'communication',
        'location': 'location',
        'value': 'value',
        'accuracy': 'accuracy',
        'checkin': 'checkin',
        'check_in': 'checkin',
        'respect_house_rules': 'overall',
        'overall': 'overall',
    }

    # Explicit upstream channel labels -> canonical channel
    CHANNEL_MAPPINGS = {
        'airbnb': 'airbnb',
        'airbnbofficial': 'airbnb',
        'booking': 'booking',
        'booking.com': 'booking',
        'bookingcom': 'booking',
        'vrbo': 'vrbo',
        'homeaway': 'vrbo',
        'direct': 'direct',
        'google': 'google',
    }

    # Listing-name substrings checked in order; first hit wins
    CHANNEL_KEYWORDS = [
        ('airbnb', ['airbnb', 'air']),
        ('booking', ['booking', 'book']),
        ('vrbo', ['vrbo', 'homeaway']),
    ]
    DEFAULT_CHANNEL = 'direct'
    DEFAULT_CATEGORY = 'overall'

    # Listing id patterns tried against the listing name, in order
    LISTING_ID_PATTERNS = [
        r"(\d+)B?\s+N?\d*\s*A?\s*-",  # "2B N1 A - Spacious Loft"
        r"(?i)listing[_-]?(\d+)",
        r"(?i)property[_-]?(\d+)",
        r"(\d+)$",
    ]
