"""
Citizen report entity and its read projections
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from citizenwatch.core.constants import DEFAULT_REPORTER_NOTE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportStatus(str, Enum):
    """Moderation status of a report."""
    PENDING = "pending"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"


@dataclass
class Report:
    """
    Geotagged photo report submitted by a citizen.

    Everything except `status` is fixed at creation; status transitions
    belong to an external moderation process.
    """
    id: str
    description: str
    photo_url: str
    latitude: float
    longitude: float

    address: str = ""
    submitted_at: datetime = field(default_factory=utcnow)
    status: ReportStatus = ReportStatus.PENDING
    reporter_note: str = DEFAULT_REPORTER_NOTE

    @property
    def location(self) -> Dict[str, Any]:
        """GeoJSON point, coordinates in (longitude, latitude) order."""
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}

    def to_public_dict(self) -> Dict[str, Any]:
        """Acknowledgment returned to the submitter."""
        return {
            "id": self.id,
            "description": self.description,
            "imageUrl": self.photo_url,
            "location": self.location,
            "timestamp": self.submitted_at.isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Full projection used by listing endpoints."""
        return {
            "id": self.id,
            "description": self.description,
            "imageUrl": self.photo_url,
            "location": self.location,
            "address": self.address,
            "timestamp": self.submitted_at.isoformat(),
            "status": self.status.value,
            "reporterInfo": self.reporter_note,
        }


@dataclass(frozen=True)
class ReportPoint:
    """Aggregation projection: location, timestamp and status only."""
    latitude: float
    longitude: float
    submitted_at: datetime
    status: ReportStatus
