"""Error taxonomy for GuestPulse.

Every error carries the HTTP-equivalent status code a transport layer should
answer with. ``SourceUnavailable`` and ``MalformedRecord`` are recovered inside
the engine; the others reach the caller.
"""

from typing import Any, Dict, List, Optional

from .constants import ErrorConstants


class GuestPulseError(Exception):
    """Base class for all GuestPulse errors."""

    status_code = 500
    error_code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": self.message}


class SourceUnavailable(GuestPulseError):
    """An upstream provider could not be reached or rejected the request."""

    status_code = 503
    error_code = "source_unavailable"

    def __init__(self, source: str, message: str = ""):
        super().__init__(f"{source}: {message}" if message else f"{source} unavailable")
        self.source = source


class MalformedRecord(GuestPulseError):
    """A single raw record is missing expected structure."""

    status_code = 422
    error_code = "malformed_record"


class NotFound(GuestPulseError):
    """A referenced review does not exist."""

    status_code = 404
    error_code = "not_found"


class InvalidRequest(GuestPulseError):
    """A filter, sort or update payload failed validation."""

    status_code = 400
    error_code = "invalid_request"

    def __init__(self, message: str, rejected_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.rejected_fields = list(rejected_fields or [])

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.rejected_fields:
            data["rejectedFields"] = self.rejected_fields
        return data


class InternalError(GuestPulseError):
    """Any unexpected failure. Never carries internal detail."""

    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str = ErrorConstants.GENERIC_ERROR_MESSAGE):
        super().__init__(message)
