"""GuestPulse - guest review aggregation for property managers."""

__version__ = "1.0.0"
__author__ = "GuestPulse Team"

from .core.models import *
from .core.config import settings
from .services.review_service import ReviewService, build_review_service

__all__ = [
    "settings",
    "ReviewService",
    "build_review_service",
]
