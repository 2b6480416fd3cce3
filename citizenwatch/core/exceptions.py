"""
CitizenWatch - Error taxonomy

Each error carries the HTTP status it maps to and a message that is safe
to show to the client.
"""

from contextlib import contextmanager
from typing import Iterator, Optional


class CitizenWatchError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CitizenWatchError):
    """Client-correctable input problem (missing field, bad photo, ...)."""

    status_code = 400
    default_message = "Invalid request"


class GeoRestrictionError(CitizenWatchError):
    """Coordinates fall outside the allowed region."""

    status_code = 400
    default_message = "Reporting is only allowed within India."


class UpstreamStorageError(CitizenWatchError):
    """Blob backend unavailable or rejected the write."""

    status_code = 500
    default_message = "Failed to upload image to cloud storage"


StorageError = UpstreamStorageError


class PersistenceError(CitizenWatchError):
    """Database unavailable or rejected the operation."""

    status_code = 500
    default_message = "Failed to submit report"


class NotFoundError(CitizenWatchError):
    status_code = 404
    default_message = "Report not found"


@contextmanager
def persistence_failure(message: str) -> Iterator[None]:
    """Re-raise store failures inside the block with an operation-specific message."""
    try:
        yield
    except PersistenceError as e:
        raise PersistenceError(message) from e
