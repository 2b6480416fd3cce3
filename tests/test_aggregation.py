"""
Tests for heat map aggregation
"""
from datetime import datetime, timedelta, timezone

import pytest

from citizenwatch.crowdsource.aggregation import (
    AggregateBucket,
    Heatmap,
    HeatmapAggregator,
    bucket_points,
    compute_intensity,
    recent_cutoff,
)
from citizenwatch.crowdsource.report import ReportPoint, ReportStatus

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def point(lat, lng, age_days=0, status=ReportStatus.PENDING):
    return ReportPoint(lat, lng, NOW - timedelta(days=age_days), status)


class TestIntensity:
    """Test suite for the intensity score."""

    def test_formula(self):
        assert compute_intensity(1, 0) == pytest.approx(0.3)
        assert compute_intensity(1, 1) == pytest.approx(1.0)
        assert compute_intensity(4, 2) == pytest.approx(2.6)

    def test_capped_at_ten(self):
        assert compute_intensity(10, 10) == 10
        assert compute_intensity(500, 500) == 10
        assert compute_intensity(40, 0) == 10

    def test_monotonic_in_both_arguments(self):
        for count in range(0, 40):
            for recent in range(0, count + 1):
                base = compute_intensity(count, recent)
                assert compute_intensity(count + 1, recent) >= base
                if recent + 1 <= count:
                    assert compute_intensity(count, recent + 1) >= base
                assert 0 <= base <= 10


class TestBucketPoints:
    """Test suite for grid bucketing."""

    def test_empty_input(self):
        assert bucket_points([], now=NOW) == []

    def test_nearby_points_merge(self):
        buckets = bucket_points(
            [point(12.34567, 77.65432), point(12.34561, 77.65439)],
            now=NOW,
        )

        assert len(buckets) == 1
        assert buckets[0].count == 2
        assert (buckets[0].latitude, buckets[0].longitude) == (12.346, 77.654)

    def test_merge_independent_of_order(self):
        points = [point(12.34567, 77.65432), point(28.6139, 77.2090), point(12.34561, 77.65439)]

        forward = {(b.latitude, b.longitude): b.count for b in bucket_points(points, now=NOW)}
        backward = {(b.latitude, b.longitude): b.count for b in bucket_points(points[::-1], now=NOW)}

        assert forward == backward
        assert forward[(12.346, 77.654)] == 2

    def test_distinct_cells_stay_separate(self):
        buckets = bucket_points([point(28.6139, 77.2090), point(19.0760, 72.8777)], now=NOW)
        assert len(buckets) == 2

    def test_recent_window(self):
        buckets = bucket_points(
            [
                point(28.6139, 77.2090, age_days=1),
                point(28.6139, 77.2090, age_days=30),
                point(28.6139, 77.2090, age_days=31),
            ],
            now=NOW,
        )

        bucket = buckets[0]
        assert bucket.count == 3
        # Exactly 30 days old is still inside the window
        assert bucket.recent_count == 2

    def test_status_counts(self):
        buckets = bucket_points(
            [
                point(28.6139, 77.2090, status=ReportStatus.PENDING),
                point(28.6139, 77.2090, status=ReportStatus.RESOLVED),
                point(28.6139, 77.2090, status=ReportStatus.RESOLVED),
            ],
            now=NOW,
        )

        assert buckets[0].status_counts == {"pending": 1, "investigating": 0, "resolved": 2}

    def test_bucket_to_dict(self):
        bucket = AggregateBucket(latitude=28.614, longitude=77.209)
        bucket.add(point(28.6139, 77.2090), recent_cutoff(NOW))

        data = bucket.to_dict()

        assert data == {
            "lat": 28.614,
            "lng": 77.209,
            "count": 1,
            "recent": 1,
            "intensity": 1.0,
            "statuses": {"pending": 1, "investigating": 0, "resolved": 0},
        }


class TestHeatmapAggregator:
    """Test suite for the store-backed aggregator."""

    def test_empty_store(self, store):
        result = HeatmapAggregator(store).compute_heatmap(now=NOW)

        assert result.to_dict() == {
            "success": True,
            "data": [],
            "totalReports": 0,
            "totalLocations": 0,
        }

    def test_totals(self, store, make_report):
        store.save(make_report(12.34567, 77.65432))
        store.save(make_report(12.34561, 77.65439))
        store.save(make_report(19.0760, 72.8777))

        result = HeatmapAggregator(store).compute_heatmap()

        assert isinstance(result, Heatmap)
        assert result.total_reports == 3
        assert result.total_locations == 2
        counts = sorted(b.count for b in result.buckets)
        assert counts == [1, 2]

    def test_recent_days_configurable(self, store, make_report):
        store.save(make_report(age_days=5))

        result = HeatmapAggregator(store, recent_days=3).compute_heatmap()

        assert result.buckets[0].recent_count == 0
