"""
Submission validation for citizen photo reports
Parses raw form values and rejects bad input before any storage write.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Any

from citizenwatch.core.constants import (
    ALLOWED_MIME_PREFIX,
    DEFAULT_REPORTER_NOTE,
    MAX_PHOTO_BYTES,
    MAX_REPORTER_NOTE_LENGTH,
)
from citizenwatch.core.exceptions import GeoRestrictionError, ValidationError
from citizenwatch.core.geo_utils import is_valid_coordinate, is_within_region

logger = logging.getLogger(__name__)


@dataclass
class ValidatedSubmission:
    """Normalized submission, safe to persist."""
    photo: bytes
    mime_type: str
    description: str
    latitude: float
    longitude: float
    address: str = ""
    reporter_note: str = DEFAULT_REPORTER_NOTE
    filename: Optional[str] = None


def _parse_coordinate(value: Any) -> float:
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Latitude and longitude must be valid numbers")
    if not math.isfinite(number):
        raise ValidationError("Latitude and longitude must be valid numbers")
    return number


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


class SubmissionValidator:
    """
    Validates report submissions.

    Order of checks: photo presence, photo type, photo size, required
    fields, coordinate parsing, region, reporter note length.
    """

    def __init__(
        self,
        max_photo_bytes: int = MAX_PHOTO_BYTES,
        enforce_region: bool = True
    ):
        self.max_photo_bytes = max_photo_bytes
        self.enforce_region = enforce_region

    @property
    def size_limit_message(self) -> str:
        megabytes = self.max_photo_bytes / (1024 * 1024)
        return f"File size too large. Maximum size is {megabytes:g}MB."

    def check_photo(self, photo: Optional[bytes], mime_type: Optional[str]) -> None:
        if not photo:
            raise ValidationError("Photo is required")
        if not mime_type or not mime_type.lower().startswith(ALLOWED_MIME_PREFIX):
            raise ValidationError("Only image files are allowed!")
        if len(photo) > self.max_photo_bytes:
            raise ValidationError(self.size_limit_message)

    def validate(
        self,
        photo: Optional[bytes],
        mime_type: Optional[str],
        description: Any,
        latitude: Any,
        longitude: Any,
        address: Any = None,
        reporter_note: Any = None,
        filename: Optional[str] = None,
    ) -> ValidatedSubmission:
        """
        Validate and normalize a raw submission.

        Raises:
            ValidationError: missing/invalid fields, bad or oversized photo, long reporter note
            GeoRestrictionError: coordinates outside the allowed region
        """
        self.check_photo(photo, mime_type)

        if _is_blank(description) or _is_blank(latitude) or _is_blank(longitude):
            raise ValidationError("Description, latitude, and longitude are required")

        lat = _parse_coordinate(latitude)
        lng = _parse_coordinate(longitude)
        if not is_valid_coordinate(lat, lng):
            raise ValidationError("Latitude and longitude are out of range")

        if self.enforce_region and not is_within_region(lat, lng):
            logger.info(f"Rejected submission outside region at ({lat}, {lng})")
            raise GeoRestrictionError()

        note = "" if reporter_note is None else str(reporter_note).strip()
        if len(note) > MAX_REPORTER_NOTE_LENGTH:
            raise ValidationError(f"Reporter info must be at most {MAX_REPORTER_NOTE_LENGTH} characters")

        return ValidatedSubmission(
            photo=photo,
            mime_type=mime_type,
            description=str(description).strip(),
            latitude=lat,
            longitude=lng,
            address="" if address is None else str(address).strip(),
            reporter_note=note or DEFAULT_REPORTER_NOTE,
            filename=filename,
        )
