"""
Read paths over stored reports: listing, proximity and counters
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

from citizenwatch.core.constants import (
    DEFAULT_LIST_LIMIT,
    DEFAULT_NEARBY_RADIUS_M,
    LOCAL_PHOTO_URL_PATTERN,
    RECENT_WINDOW_DAYS,
)
from citizenwatch.core.exceptions import NotFoundError, persistence_failure
from citizenwatch.crowdsource.aggregation import recent_cutoff
from citizenwatch.crowdsource.report import Report, ReportStatus

if TYPE_CHECKING:
    from citizenwatch.database.repository import ReportStore

logger = logging.getLogger(__name__)


class ReportQueryService:
    """Read-only queries. No locking; results reflect a live snapshot."""

    def __init__(self, report_store: "ReportStore", recent_days: int = RECENT_WINDOW_DAYS):
        self.report_store = report_store
        self.recent_days = recent_days

    def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> List[Report]:
        """Newest reports first."""
        with persistence_failure("Failed to fetch reports"):
            return self.report_store.find_all(limit=limit)

    def get(self, report_id: str) -> Report:
        with persistence_failure("Failed to fetch reports"):
            report = self.report_store.get(report_id)
        if report is None:
            raise NotFoundError()
        return report

    def find_near(
        self,
        latitude: float,
        longitude: float,
        radius_m: float = DEFAULT_NEARBY_RADIUS_M
    ) -> List[Report]:
        """Reports within `radius_m` meters, newest first."""
        with persistence_failure("Failed to fetch nearby reports"):
            return self.report_store.find_near(latitude, longitude, radius_m)

    def compute_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Counters by status plus the trailing-window count.

        `total` is the sum of the per-status counts, so the two always agree.
        """
        with persistence_failure("Failed to fetch statistics"):
            by_status = {
                status.value: self.report_store.count(status=status)
                for status in ReportStatus
            }
            recent = self.report_store.count(since=recent_cutoff(now, self.recent_days))
        return {
            "total": sum(by_status.values()),
            **by_status,
            "recent": recent,
        }

    def cleanup_local_reports(self, pattern: str = LOCAL_PHOTO_URL_PATTERN) -> int:
        """Delete reports whose photo is served from the local upload path."""
        with persistence_failure("Failed to clean up reports"):
            deleted = self.report_store.delete_many(pattern)
        logger.info(f"Cleanup removed {deleted} reports matching {pattern!r}")
        return deleted
