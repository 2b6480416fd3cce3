"""
SQLAlchemy models for CitizenWatch
Uses GeoAlchemy2 for PostGIS spatial types
"""

from sqlalchemy import (
    Column, Float, String, Text, DateTime, Index, Enum as SQLEnum
)
from sqlalchemy.orm import declarative_base
from geoalchemy2 import Geometry
from geoalchemy2.shape import from_shape
from shapely.geometry import Point

from citizenwatch.core.constants import DEFAULT_REPORTER_NOTE, MAX_REPORTER_NOTE_LENGTH
from citizenwatch.crowdsource.report import Report, ReportStatus, utcnow

Base = declarative_base()


class ReportRecord(Base):
    """
    Citizen photo report.

    `location` carries the GiST index used by proximity queries; the
    plain latitude/longitude columns avoid geometry decoding on reads.
    """
    __tablename__ = "reports"

    id = Column(String(32), primary_key=True)

    # Location (PostGIS point, lon/lat order)
    location = Column(Geometry("POINT", srid=4326, spatial_index=False), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(Text, default="")

    # Report details
    description = Column(Text, nullable=False)
    photo_url = Column(String(1024), nullable=False)
    reporter_note = Column(String(MAX_REPORTER_NOTE_LENGTH), default=DEFAULT_REPORTER_NOTE)

    status = Column(
        SQLEnum(
            ReportStatus,
            name="report_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=ReportStatus.PENDING,
    )

    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_report_location", location, postgresql_using="gist"),
        Index("idx_report_status", status),
        Index("idx_report_submitted_at", submitted_at),
    )

    def __repr__(self):
        return f"<ReportRecord({self.id}, status={self.status.value}, lat={self.latitude})>"

    @classmethod
    def from_report(cls, report: Report) -> "ReportRecord":
        point = Point(report.longitude, report.latitude)
        return cls(
            id=report.id,
            location=from_shape(point, srid=4326),
            latitude=report.latitude,
            longitude=report.longitude,
            address=report.address,
            description=report.description,
            photo_url=report.photo_url,
            reporter_note=report.reporter_note,
            status=report.status,
            submitted_at=report.submitted_at,
        )

    def to_report(self) -> Report:
        return Report(
            id=self.id,
            description=self.description,
            photo_url=self.photo_url,
            latitude=self.latitude,
            longitude=self.longitude,
            address=self.address or "",
            submitted_at=self.submitted_at,
            status=self.status,
            reporter_note=self.reporter_note or "Anonymous",
        )

