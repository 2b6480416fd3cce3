"""
Tests for read-only report queries
"""
import pytest

from citizenwatch.core.exceptions import NotFoundError
from citizenwatch.crowdsource.queries import ReportQueryService
from citizenwatch.crowdsource.report import ReportStatus


class TestReportQueryService:
    """Test suite for ReportQueryService."""

    def test_stats_empty(self, store):
        assert ReportQueryService(store).compute_stats() == {
            "total": 0,
            "pending": 0,
            "investigating": 0,
            "resolved": 0,
            "recent": 0,
        }

    def test_stats_total_equals_status_sum(self, store, make_report):
        statuses = [
            ReportStatus.PENDING,
            ReportStatus.PENDING,
            ReportStatus.INVESTIGATING,
            ReportStatus.RESOLVED,
        ]
        for i, status in enumerate(statuses):
            store.save(make_report(status=status, age_days=i * 20))

        stats = ReportQueryService(store).compute_stats()

        assert stats["total"] == stats["pending"] + stats["investigating"] + stats["resolved"]
        assert stats["total"] == 4
        assert stats["pending"] == 2
        # ages 0, 20 are inside the 30-day window; 40, 60 are not
        assert stats["recent"] == 2

    def test_list_recent_limit(self, store, make_report):
        for i in range(5):
            store.save(make_report(age_days=i))

        reports = ReportQueryService(store).list_recent(limit=3)

        assert len(reports) == 3
        assert reports[0].submitted_at > reports[-1].submitted_at

    def test_get_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            ReportQueryService(store).get("nope")

    def test_cleanup_local_reports(self, store, make_report):
        store.save(make_report(photo_url="/uploads/report-1.jpg"))
        store.save(make_report())

        service = ReportQueryService(store)

        assert service.cleanup_local_reports() == 1
        assert service.compute_stats()["total"] == 1
