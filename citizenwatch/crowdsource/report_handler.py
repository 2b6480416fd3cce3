"""
Report ingestion for crowdsourced photo reports
Validates a submission, stores the photo, then persists the report.
"""

import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from citizenwatch.core.exceptions import PersistenceError, UpstreamStorageError
from citizenwatch.crowdsource.report import Report, ReportStatus
from citizenwatch.crowdsource.validation import SubmissionValidator
from citizenwatch.storage.blob_store import BlobStore, photo_object_name, temporary_upload

if TYPE_CHECKING:
    from citizenwatch.database.repository import ReportStore
    from citizenwatch.ingestion.nominatim_client import NominatimClient

logger = logging.getLogger(__name__)


class ReportHandler:
    """
    Handles report submissions from citizens.

    A submission either yields a persisted report or an error; the photo
    upload and the database write happen sequentially, one attempt each.
    """

    def __init__(
        self,
        report_store: "ReportStore",
        blob_store: BlobStore,
        validator: Optional[SubmissionValidator] = None,
        geocoder: Optional["NominatimClient"] = None,
        tmp_dir: Optional[str] = None
    ):
        """
        Initialize report handler.

        Args:
            report_store: Where reports are persisted
            blob_store: Where photos are stored
            validator: Submission rules (defaults to region enforcement on)
            geocoder: Optional reverse geocoder used when no address is given
            tmp_dir: Directory for temporary photo copies
        """
        self.report_store = report_store
        self.blob_store = blob_store
        self.validator = validator or SubmissionValidator()
        self.geocoder = geocoder
        self.tmp_dir = tmp_dir

        logger.info("ReportHandler initialized")

    def submit(
        self,
        photo: Optional[bytes],
        mime_type: Optional[str],
        description: Any,
        latitude: Any,
        longitude: Any,
        address: Any = None,
        reporter_note: Any = None,
        filename: Optional[str] = None,
    ) -> Report:
        """
        Create a new report from a raw submission.

        Args:
            photo: Photo bytes
            mime_type: Photo MIME type, must be image/*
            description: Free text, required
            latitude, longitude: Numbers or numeric strings
            address: Optional address label
            reporter_note: Optional reporter info, "Anonymous" when blank
            filename: Original upload filename, used for the extension

        Returns:
            The persisted Report

        Raises:
            ValidationError / GeoRestrictionError: before any storage write
            UpstreamStorageError: photo not stored, no report written
            PersistenceError: photo stored but report not written
        """
        submission = self.validator.validate(
            photo=photo,
            mime_type=mime_type,
            description=description,
            latitude=latitude,
            longitude=longitude,
            address=address,
            reporter_note=reporter_note,
            filename=filename,
        )

        address_label = submission.address
        if not address_label and self.geocoder is not None:
            address_label = self.geocoder.reverse(submission.latitude, submission.longitude) or ""

        object_name = photo_object_name(submission.filename, submission.mime_type)
        try:
            with temporary_upload(submission.photo, Path(object_name).suffix, self.tmp_dir) as tmp_path:
                photo_url = self.blob_store.put(tmp_path, object_name, content_type=submission.mime_type)
        except OSError as e:
            logger.error(f"Could not stage photo for upload: {e}")
            raise UpstreamStorageError() from e

        report = Report(
            id=uuid.uuid4().hex,
            description=submission.description,
            photo_url=photo_url,
            latitude=submission.latitude,
            longitude=submission.longitude,
            address=address_label,
            status=ReportStatus.PENDING,
            reporter_note=submission.reporter_note,
        )

        try:
            saved = self.report_store.save(report)
        except Exception as e:
            # No compensating delete: the orphaned photo is logged for manual cleanup.
            logger.error(f"Orphaned photo {photo_url}: report {report.id} was not saved ({e})")
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError() from e

        logger.info(f"New report created: {saved.id} at ({saved.latitude}, {saved.longitude})")
        return saved
