"""
Report Store - persistence for citizen reports

Two backends share one contract:
- InMemoryReportStore: development and tests, haversine proximity
- PostGISReportStore: PostgreSQL + PostGIS, GiST-indexed proximity
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, Generator, List, Optional

from geoalchemy2 import Geography
from sqlalchemy import cast, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citizenwatch.core.exceptions import NotFoundError, PersistenceError
from citizenwatch.core.geo_utils import haversine_distance_m
from citizenwatch.crowdsource.report import Report, ReportPoint, ReportStatus
from .connection import DatabaseConnection
from .models import ReportRecord

logger = logging.getLogger(__name__)


class ReportStore(ABC):
    """Persistence contract consumed by the ingestion and read services."""

    name: str = "abstract"

    @abstractmethod
    def save(self, report: Report) -> Report:
        """Persist a new report and return the stored version."""

    @abstractmethod
    def get(self, report_id: str) -> Optional[Report]:
        """Fetch a single report, None when unknown."""

    @abstractmethod
    def find_all(self, limit: Optional[int] = None) -> List[Report]:
        """All reports, newest first."""

    @abstractmethod
    def find_points(self) -> List[ReportPoint]:
        """Location, timestamp and status of every report."""

    @abstractmethod
    def find_near(self, latitude: float, longitude: float, radius_m: float) -> List[Report]:
        """Reports within `radius_m` meters of the point, newest first."""

    @abstractmethod
    def count(
        self,
        status: Optional[ReportStatus] = None,
        since: Optional[datetime] = None
    ) -> int:
        """Number of reports matching the optional status / minimum timestamp."""

    @abstractmethod
    def delete_many(self, photo_url_pattern: str) -> int:
        """Delete reports whose photo URL matches the regex; returns the count."""

    @abstractmethod
    def set_status(self, report_id: str, status: ReportStatus) -> None:
        """Move a report to `status`; raises NotFoundError for an unknown id."""

    def ping(self) -> bool:
        """Whether the backend is reachable."""
        return True

    def close(self) -> None:
        """Release backend resources."""


class InMemoryReportStore(ReportStore):
    """Dict-backed store. Each write is atomic under a lock."""

    name = "memory"

    def __init__(self):
        self._reports: Dict[str, Report] = {}
        self._lock = threading.Lock()

    def save(self, report: Report) -> Report:
        stored = replace(report)
        with self._lock:
            if stored.id in self._reports:
                raise PersistenceError()
            self._reports[stored.id] = stored
        return replace(stored)

    def get(self, report_id: str) -> Optional[Report]:
        report = self._reports.get(report_id)
        return replace(report) if report else None

    def _snapshot(self) -> List[Report]:
        with self._lock:
            return list(self._reports.values())

    def find_all(self, limit: Optional[int] = None) -> List[Report]:
        reports = sorted(self._snapshot(), key=lambda r: r.submitted_at, reverse=True)
        if limit is not None:
            reports = reports[:limit]
        return [replace(r) for r in reports]

    def find_points(self) -> List[ReportPoint]:
        return [
            ReportPoint(r.latitude, r.longitude, r.submitted_at, r.status)
            for r in self._snapshot()
        ]

    def find_near(self, latitude: float, longitude: float, radius_m: float) -> List[Report]:
        nearby = [
            r for r in self._snapshot()
            if haversine_distance_m(latitude, longitude, r.latitude, r.longitude) <= radius_m
        ]
        nearby.sort(key=lambda r: r.submitted_at, reverse=True)
        return [replace(r) for r in nearby]

    def count(
        self,
        status: Optional[ReportStatus] = None,
        since: Optional[datetime] = None
    ) -> int:
        return sum(
            1 for r in self._snapshot()
            if (status is None or r.status == status)
            and (since is None or r.submitted_at >= since)
        )

    def delete_many(self, photo_url_pattern: str) -> int:
        regex = re.compile(photo_url_pattern)
        with self._lock:
            doomed = [rid for rid, r in self._reports.items() if regex.search(r.photo_url)]
            for rid in doomed:
                del self._reports[rid]
        return len(doomed)

    def set_status(self, report_id: str, status: ReportStatus) -> None:
        with self._lock:
            report = self._reports.get(report_id)
            if report is None:
                raise NotFoundError()
            report.status = status


class PostGISReportStore(ReportStore):
    """PostgreSQL/PostGIS store; every operation runs in its own session."""

    name = "postgis"

    def __init__(self, db: DatabaseConnection):
        self.db = db

    @contextmanager
    def _session(self, action: str) -> Generator[Session, None, None]:
        try:
            with self.db.get_session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Report store {action} failed: {e}")
            raise PersistenceError() from e

    def save(self, report: Report) -> Report:
        with self._session("save") as session:
            record = ReportRecord.from_report(report)
            session.add(record)
            session.flush()
            return record.to_report()

    def ping(self) -> bool:
        return self.db.check_connection()

    def close(self) -> None:
        self.db.close()

    def get(self, report_id: str) -> Optional[Report]:
        with self._session("get") as session:
            record = session.get(ReportRecord, report_id)
            return record.to_report() if record else None

    def find_all(self, limit: Optional[int] = None) -> List[Report]:
        stmt = select(ReportRecord).order_by(ReportRecord.submitted_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session("find_all") as session:
            return [r.to_report() for r in session.scalars(stmt)]

    def find_points(self) -> List[ReportPoint]:
        stmt = select(
            ReportRecord.latitude,
            ReportRecord.longitude,
            ReportRecord.submitted_at,
            ReportRecord.status,
        )
        with self._session("find_points") as session:
            return [ReportPoint(*row) for row in session.execute(stmt)]

    def find_near(self, latitude: float, longitude: float, radius_m: float) -> List[Report]:
        center = func.ST_SetSRID(func.ST_MakePoint(longitude, latitude), 4326)
        stmt = (
            select(ReportRecord)
            .where(
                func.ST_DWithin(
                    cast(ReportRecord.location, Geography),
                    cast(center, Geography),
                    radius_m,
                )
            )
            .order_by(ReportRecord.submitted_at.desc())
        )
        with self._session("find_near") as session:
            return [r.to_report() for r in session.scalars(stmt)]

    def count(
        self,
        status: Optional[ReportStatus] = None,
        since: Optional[datetime] = None
    ) -> int:
        stmt = select(func.count()).select_from(ReportRecord)
        if status is not None:
            stmt = stmt.where(ReportRecord.status == status)
        if since is not None:
            stmt = stmt.where(ReportRecord.submitted_at >= since)
        with self._session("count") as session:
            return session.scalar(stmt) or 0

    def delete_many(self, photo_url_pattern: str) -> int:
        stmt = delete(ReportRecord).where(ReportRecord.photo_url.regexp_match(photo_url_pattern))
        with self._session("delete_many") as session:
            result = session.execute(stmt)
            return result.rowcount or 0

    def set_status(self, report_id: str, status: ReportStatus) -> None:
        stmt = update(ReportRecord).where(ReportRecord.id == report_id).values(status=status)
        with self._session("set_status") as session:
            result = session.execute(stmt)
            if not result.rowcount:
                raise NotFoundError()
