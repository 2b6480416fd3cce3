"""
Heat map aggregation of citizen reports

Reports are bucketed on a ~110 m grid (coordinates rounded to 3 decimals)
and each bucket gets an intensity that weights recent activity more than
historical volume.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from citizenwatch.core.constants import (
    GRID_PRECISION,
    INTENSITY_CAP,
    INTENSITY_COUNT_WEIGHT,
    INTENSITY_RECENT_WEIGHT,
    RECENT_WINDOW_DAYS,
)
from citizenwatch.core.exceptions import persistence_failure
from citizenwatch.core.geo_utils import grid_key
from citizenwatch.crowdsource.report import ReportPoint, ReportStatus, utcnow

if TYPE_CHECKING:
    from citizenwatch.database.repository import ReportStore

logger = logging.getLogger(__name__)


def compute_intensity(count: int, recent_count: int) -> float:
    """min(count * 0.3 + recent * 0.7, 10)"""
    raw = count * INTENSITY_COUNT_WEIGHT + recent_count * INTENSITY_RECENT_WEIGHT
    return min(raw, INTENSITY_CAP)


def recent_cutoff(now: Optional[datetime] = None, days: int = RECENT_WINDOW_DAYS) -> datetime:
    """Start of the trailing recency window."""
    return (now or utcnow()) - timedelta(days=days)


@dataclass
class AggregateBucket:
    """Reports sharing one grid cell."""
    latitude: float
    longitude: float
    count: int = 0
    recent_count: int = 0
    status_counts: Dict[str, int] = field(
        default_factory=lambda: {status.value: 0 for status in ReportStatus}
    )

    @property
    def intensity(self) -> float:
        return compute_intensity(self.count, self.recent_count)

    def add(self, point: ReportPoint, cutoff: datetime) -> None:
        self.count += 1
        self.status_counts[ReportStatus(point.status).value] += 1
        if point.submitted_at >= cutoff:
            self.recent_count += 1

    def to_dict(self) -> dict:
        return {
            "lat": self.latitude,
            "lng": self.longitude,
            "count": self.count,
            "recent": self.recent_count,
            "intensity": round(self.intensity, 4),
            "statuses": dict(self.status_counts),
        }


def bucket_points(
    points: Iterable[ReportPoint],
    now: Optional[datetime] = None,
    recent_days: int = RECENT_WINDOW_DAYS,
    precision: int = GRID_PRECISION
) -> List[AggregateBucket]:
    """
    Group report points into grid buckets.

    Points with identical rounded coordinates always land in the same
    bucket regardless of input order. Output order is unspecified.
    """
    cutoff = recent_cutoff(now, recent_days)
    buckets: Dict[Tuple[float, float], AggregateBucket] = {}

    for point in points:
        key = grid_key(point.latitude, point.longitude, precision)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = AggregateBucket(latitude=key[0], longitude=key[1])
        bucket.add(point, cutoff)

    return list(buckets.values())


@dataclass
class Heatmap:
    """Aggregation result plus totals."""
    buckets: List[AggregateBucket]
    total_reports: int

    @property
    def total_locations(self) -> int:
        return len(self.buckets)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "data": [b.to_dict() for b in self.buckets],
            "totalReports": self.total_reports,
            "totalLocations": self.total_locations,
        }


class HeatmapAggregator:
    """Reads every report's location/timestamp/status and buckets them."""

    def __init__(self, report_store: "ReportStore", recent_days: int = RECENT_WINDOW_DAYS):
        self.report_store = report_store
        self.recent_days = recent_days

    def compute_heatmap(self, now: Optional[datetime] = None) -> Heatmap:
        with persistence_failure("Failed to fetch heat map data"):
            points = self.report_store.find_points()
        buckets = bucket_points(points, now=now, recent_days=self.recent_days)
        logger.debug(f"Heat map: {len(points)} reports in {len(buckets)} cells")
        return Heatmap(buckets=buckets, total_reports=len(points))
