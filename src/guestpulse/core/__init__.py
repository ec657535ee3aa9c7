"""Core modules for GuestPulse."""

from .models import *
from .config import settings
from .errors import GuestPulseError, InternalError, InvalidRequest, MalformedRecord, NotFound, SourceUnavailable
from .filtering import filter_reviews
from .normalize import PlacesSourceNormalizer, PrimarySourceNormalizer
from .sorting import sort_reviews
from .stats import compute_stats

__all__ = [
    "settings",
    "Review",
    "Channel",
    "Category",
    "FilterSpec",
    "DateRange",
    "ReviewStats",
    "MonthlyTrend",
    "Property",
    "GuestPulseError",
    "SourceUnavailable",
    "MalformedRecord",
    "NotFound",
    "InvalidRequest",
    "InternalError",
    "PrimarySourceNormalizer",
    "PlacesSourceNormalizer",
    "filter_reviews",
    "sort_reviews",
    "compute_stats",
]
