"""Utility modules for GuestPulse."""

from .dates import parse_timestamp, to_iso, utc_now
from .numeric import clamp, round_half_up

__all__ = [
    "parse_timestamp",
    "to_iso",
    "utc_now",
    "clamp",
    "round_half_up",
]
