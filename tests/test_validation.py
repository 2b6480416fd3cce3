"""
Tests for submission validation
"""
import pytest

from citizenwatch.core.constants import MAX_REPORTER_NOTE_LENGTH
from citizenwatch.core.exceptions import GeoRestrictionError, ValidationError
from citizenwatch.crowdsource.validation import SubmissionValidator
from citizenwatch.database.models import ReportRecord

PHOTO = b"\xff\xd8\xff\xe0fake-jpeg"


class TestSubmissionValidator:
    """Test suite for SubmissionValidator."""

    def setup_method(self):
        """Setup test fixtures."""
        self.validator = SubmissionValidator()

    def _validate(self, **overrides):
        fields = {
            "photo": PHOTO,
            "mime_type": "image/jpeg",
            "description": "Overflowing garbage bin",
            "latitude": "28.6139",
            "longitude": "77.2090",
        }
        fields.update(overrides)
        return self.validator.validate(**fields)

    def test_valid_submission(self):
        result = self._validate(address="  Connaught Place  ", description="  Pothole  ")

        assert result.latitude == pytest.approx(28.6139)
        assert result.longitude == pytest.approx(77.2090)
        assert result.description == "Pothole"
        assert result.address == "Connaught Place"
        assert result.reporter_note == "Anonymous"

    def test_reporter_note_kept(self):
        assert self._validate(reporter_note="Ward 12 volunteer").reporter_note == "Ward 12 volunteer"
        assert self._validate(reporter_note="   ").reporter_note == "Anonymous"

    def test_reporter_note_too_long(self):
        with pytest.raises(ValidationError, match="at most 200 characters"):
            self._validate(reporter_note="x" * 300)

    def test_reporter_note_at_limit(self):
        note = "x" * MAX_REPORTER_NOTE_LENGTH
        assert self._validate(reporter_note=note).reporter_note == note

    def test_reporter_note_limit_matches_column(self):
        assert ReportRecord.__table__.c.reporter_note.type.length == MAX_REPORTER_NOTE_LENGTH

    def test_missing_photo(self):
        with pytest.raises(ValidationError, match="Photo is required"):
            self._validate(photo=None)
        with pytest.raises(ValidationError, match="Photo is required"):
            self._validate(photo=b"")

    def test_non_image_rejected(self):
        with pytest.raises(ValidationError, match="Only image files are allowed!"):
            self._validate(mime_type="application/pdf")
        with pytest.raises(ValidationError, match="Only image files are allowed!"):
            self._validate(mime_type=None)

    def test_oversized_photo(self):
        validator = SubmissionValidator(max_photo_bytes=1024)
        with pytest.raises(ValidationError):
            validator.check_photo(b"x" * 1025, "image/png")
        validator.check_photo(b"x" * 1024, "image/png")

    def test_size_limit_message(self):
        assert self.validator.size_limit_message == "File size too large. Maximum size is 5MB."

    @pytest.mark.parametrize("field", ["description", "latitude", "longitude"])
    def test_required_fields(self, field):
        with pytest.raises(ValidationError, match="Description, latitude, and longitude are required"):
            self._validate(**{field: "   "})

    def test_unparseable_coordinates(self):
        with pytest.raises(ValidationError, match="must be valid numbers"):
            self._validate(latitude="north")
        with pytest.raises(ValidationError, match="must be valid numbers"):
            self._validate(longitude="nan")

    def test_out_of_range(self):
        with pytest.raises(ValidationError, match="out of range"):
            self._validate(latitude="95")

    def test_outside_region(self):
        with pytest.raises(GeoRestrictionError) as exc_info:
            self._validate(latitude="51.5074", longitude="-0.1278")
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Reporting is only allowed within India."

    def test_region_enforcement_can_be_disabled(self):
        validator = SubmissionValidator(enforce_region=False)
        result = validator.validate(
            photo=PHOTO,
            mime_type="image/jpeg",
            description="Test",
            latitude="51.5074",
            longitude="-0.1278",
        )
        assert result.latitude == pytest.approx(51.5074)
