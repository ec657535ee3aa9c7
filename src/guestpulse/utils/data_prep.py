"""Data preparation for export and response envelopes."""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from ..core.constants import FileConstants
from ..core.errors import GuestPulseError, InternalError
from ..core.models import Review
from .dates import to_iso, utc_now

logger = logging.getLogger(__name__)


def _quoted(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _csv_id(value: str) -> str:
    return _quoted(value) if "," in value or '"' in value else value


def review_to_csv_row(review: Review) -> str:
    return ",".join([
        _csv_id(review.id),
        _quoted(review.guest_name),
        str(review.rating),
        _quoted(review.comment),
        to_iso(review.date),
        review.channel.value,
        review.category.value,
        _flag(review.is_approved),
        _flag(review.is_displayed),
    ])


def reviews_to_csv(reviews: Iterable[Review]) -> str:
    """Render reviews as CSV. Guest name and comment are always quoted; the ID only when it needs it."""
    lines = [",".join(FileConstants.CSV_COLUMNS)]
    lines.extend(review_to_csv_row(review) for review in reviews)
    return "\n".join(lines)


def export_to_csv(reviews: Iterable[Review], filename: str) -> None:
    """Export reviews to a CSV file."""
    with open(filename, 'w', encoding='utf-8', newline='') as f:
        f.write(reviews_to_csv(reviews))


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    data.setdefault("meta", {})["exportTimestamp"] = to_iso(utc_now())

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def success_envelope(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "data": data,
        "meta": {"timestamp": to_iso(utc_now()), **(meta or {})},
    }


def error_envelope(exc: BaseException) -> Dict[str, Any]:
    """Failure envelope. Unexpected exceptions are reported as a generic internal error."""
    if not isinstance(exc, GuestPulseError):
        logger.error(f"Unexpected error: {exc}", exc_info=exc)
        exc = InternalError()
    return {
        "success": False,
        "status": exc.status_code,
        **exc.to_dict(),
        "timestamp": to_iso(utc_now()),
    }
