"""Source normalizers: upstream review records -> canonical reviews.

Normalizers never drop a record. Anything missing or unusable is defaulted so
that record counts survive end-to-end.
"""

import hashlib
import logging
import re
import struct
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, List, Sequence

from .constants import DomainConstants, ReviewConstants
from .errors import MalformedRecord
from .models import Category, Channel, Review
from ..utils.dates import from_unix_seconds, parse_timestamp, utc_now
from ..utils.numeric import as_number, clamp, round_half_up

logger = logging.getLogger(__name__)

_LISTING_ID_PATTERNS = [re.compile(p) for p in DomainConstants.LISTING_ID_PATTERNS]


def clamp_rating(value: float) -> int:
    """Round half up and clamp into the canonical 1-5 scale."""
    return int(clamp(round_half_up(value), ReviewConstants.MIN_RATING, ReviewConstants.MAX_RATING))


def hash32(text: str) -> int:
    """31-multiplier rolling hash over UTF-16 code units, wrapped to signed 32 bits."""
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for (unit,) in struct.iter_unpack("<H", data):
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def extract_listing_id(listing_name: str) -> str:
    """Derive a listing id from the listing name, falling back to a stable hash."""
    for pattern in _LISTING_ID_PATTERNS:
        match = pattern.search(listing_name)
        if match and match.group(1):
            return match.group(1)
    return str(abs(hash32(listing_name)))


def infer_channel(listing_name: str, explicit: Any = None) -> Channel:
    """Pick the booking channel.

    An explicit upstream channel wins when it maps onto a known channel.
    Otherwise the listing name is searched for channel keywords, which is a
    heuristic and can misfire on names like "Airy Loft".
    """
    if isinstance(explicit, str):
        mapped = DomainConstants.CHANNEL_MAPPINGS.get(explicit.strip().lower())
        if mapped:
            return Channel(mapped)

    name = (listing_name or "").lower()
    for channel, keywords in DomainConstants.CHANNEL_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return Channel(channel)
    return Channel(DomainConstants.DEFAULT_CHANNEL)


def map_category(label: Any) -> Category:
    if not isinstance(label, str):
        return Category(DomainConstants.DEFAULT_CATEGORY)
    return Category(DomainConstants.CATEGORY_MAPPINGS.get(label.lower(), DomainConstants.DEFAULT_CATEGORY))


def _as_mapping(record: Any) -> Mapping:
    if not isinstance(record, Mapping):
        raise MalformedRecord(f"Expected a mapping, got {type(record).__name__}")
    return record


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class PrimarySourceNormalizer:
    """Normalize Hostaway review records."""

    source = ReviewConstants.PRIMARY_SOURCE_TAG

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def normalize(self, raw_records: Sequence[Any]) -> List[Review]:
        reviews = []
        for index, record in enumerate(raw_records or []):
            try:
                record = _as_mapping(record)
            except MalformedRecord as e:
                logger.warning(f"Hostaway record {index} is malformed ({e}); using defaults")
                record = {}
            reviews.append(self.normalize_record(record, index))
        logger.info(f"Normalized {len(reviews)} Hostaway reviews")
        return reviews

    def normalize_record(self, record: Mapping, index: int = 0) -> Review:
        listing_name = _text(record.get("listingName")).strip()
        explicit_listing_id = record.get("listingId")

        if explicit_listing_id not in (None, ""):
            listing_id = str(explicit_listing_id)
        elif listing_name:
            listing_id = extract_listing_id(listing_name)
        else:
            listing_id = f"listing-{index + 1}"

        is_published = record.get("status") == ReviewConstants.PUBLISHED_STATUS

        return Review(
            id=self._review_id(record, index),
            listing_id=listing_id,
            listing_name=listing_name or f"Property {listing_id}",
            guest_name=_text(record.get("guestName")).strip() or ReviewConstants.ANONYMOUS_GUEST,
            rating=self.overall_rating(record),
            comment=_text(record.get("publicReview")),
            date=self._date(record.get("submittedAt")),
            channel=infer_channel(listing_name, record.get("channel")),
            category=self.primary_category(record),
            is_approved=is_published,
            is_displayed=is_published,
            response_from_host=_text(record.get("hostResponse") or record.get("responseFromHost")) or None,
            response_date=parse_timestamp(record.get("responseDate")),
            tags=tuple(self.tags(record)),
        )

    def overall_rating(self, record: Mapping) -> int:
        direct = as_number(record.get("rating"))
        if direct is not None and direct > 0:
            return clamp_rating(direct)

        sub_ratings = [r for r in self._category_ratings(record) if r > 0]
        if sub_ratings:
            average = sum(sub_ratings) / len(sub_ratings)
            if average > ReviewConstants.TEN_POINT_THRESHOLD:
                average = average / 2
            return clamp_rating(average)

        return ReviewConstants.DEFAULT_RATING

    def primary_category(self, record: Mapping) -> Category:
        categories = self._categories(record)
        if not categories:
            return Category(DomainConstants.DEFAULT_CATEGORY)
        return map_category(categories[0].get("category"))

    def tags(self, record: Mapping) -> List[str]:
        tags = [self.source]
        status = record.get("status")
        if isinstance(status, str) and status:
            tags.append(status)
        for entry in self._categories(record):
            rating = as_number(entry.get("rating"))
            label = entry.get("category")
            if rating is not None and rating >= ReviewConstants.EXCELLENT_CATEGORY_RATING and label:
                tags.append(f"excellent-{label}")
        return tags

    def _categories(self, record: Mapping) -> List[Mapping]:
        entries = record.get("reviewCategory")
        if not isinstance(entries, (list, tuple)):
            return []
        return [entry for entry in entries if isinstance(entry, Mapping)]

    def _category_ratings(self, record: Mapping) -> List[float]:
        ratings = []
        for entry in self._categories(record):
            rating = as_number(entry.get("rating"))
            if rating is not None:
                ratings.append(rating)
        return ratings

    def _date(self, value: Any) -> datetime:
        parsed = parse_timestamp(value)
        if parsed is None:
            logger.warning(f"Failed to parse date: {value!r}; using current time")
            return self.clock()
        return parsed

    def _review_id(self, record: Mapping, index: int) -> str:
        native = record.get("id")
        if native not in (None, ""):
            return str(native)
        basis = "|".join(
            str(record.get(key, "")) for key in ("guestName", "listingName", "submittedAt", "publicReview")
        )
        digest = hashlib.sha1(f"{basis}|{index}".encode("utf-8", "surrogatepass")).hexdigest()
        return f"{self.source}-{digest[:ReviewConstants.HASH_ID_LENGTH]}"


class PlacesSourceNormalizer:
    """Normalize Google Places review entries for one listing."""

    source = Channel.GOOGLE.value

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def normalize(self, entries: Sequence[Any], listing_id: str, listing_name: str) -> List[Review]:
        reviews = []
        for index, entry in enumerate(entries or []):
            try:
                entry = _as_mapping(entry)
            except MalformedRecord as e:
                logger.warning(f"Google review {index} for {listing_name} is malformed ({e}); using defaults")
                entry = {}
            reviews.append(self.normalize_entry(entry, index, listing_id, listing_name))
        return reviews

    def normalize_entry(self, entry: Mapping, index: int, listing_id: str, listing_name: str) -> Review:
        rating = as_number(entry.get("rating"))
        return Review(
            id=f"{self.source}-{listing_id}-{index}",
            listing_id=listing_id,
            listing_name=listing_name,
            guest_name=_text(entry.get("author_name")).strip() or ReviewConstants.ANONYMOUS_GUEST,
            rating=clamp_rating(rating) if rating else ReviewConstants.DEFAULT_RATING,
            comment=_text(entry.get("text")),
            date=self._date(entry.get("time")),
            channel=Channel.GOOGLE,
            category=Category.OVERALL,
            is_approved=False,
            is_displayed=False,
            tags=(ReviewConstants.PLACES_SOURCE_TAG,),
        )

    def _date(self, value: Any) -> datetime:
        # Google reports unix seconds; some payloads carry a string instead
        seconds = as_number(value) if not isinstance(value, str) else None
        parsed = from_unix_seconds(seconds) if seconds is not None else parse_timestamp(value)
        if parsed is None:
            logger.warning(f"Failed to parse Google review time: {value!r}; using current time")
            return self.clock()
        return parsed

