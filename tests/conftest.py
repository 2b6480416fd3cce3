"""
Pytest configuration and fixtures
"""
import pytest
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from citizenwatch.crowdsource.report import Report, ReportStatus, utcnow
from citizenwatch.database.repository import InMemoryReportStore
from citizenwatch.storage.blob_store import LocalBlobStore

DELHI = (28.6139, 77.2090)


@pytest.fixture
def jpeg_bytes():
    """A ~100 KB payload with JPEG markers."""
    return b"\xff\xd8\xff\xe0" + b"\x00" * (100 * 1024) + b"\xff\xd9"


@pytest.fixture
def store():
    return InMemoryReportStore()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def blob_store(upload_dir):
    return LocalBlobStore(str(upload_dir), url_path="/uploads")


@pytest.fixture
def make_report():
    """Factory for reports with sensible defaults."""
    counter = {"n": 0}

    def _make(
        latitude=DELHI[0],
        longitude=DELHI[1],
        age_days=0,
        status=ReportStatus.PENDING,
        photo_url=None,
        description="Broken streetlight",
    ):
        counter["n"] += 1
        return Report(
            id=f"report-{counter['n']}",
            description=description,
            photo_url=photo_url or f"https://storage.googleapis.com/bucket/report-{counter['n']}.jpg",
            latitude=latitude,
            longitude=longitude,
            submitted_at=utcnow() - timedelta(days=age_days),
            status=status,
        )

    return _make
