"""
Tests for map visualization
"""
import folium
import pytest

from citizenwatch.core.constants import INDIA_CENTER
from citizenwatch.crowdsource.aggregation import bucket_points
from citizenwatch.crowdsource.report import ReportPoint, ReportStatus
from citizenwatch.visualization.map_generator import (
    STATUS_STYLES,
    create_report_map,
    heat_weight,
    render_report_map,
    status_style,
)


class TestStatusStyles:
    """Test suite for the status presentation mapping."""

    def test_every_status_has_a_style(self):
        assert set(STATUS_STYLES) == set(ReportStatus)

    def test_lookup_by_value(self):
        assert status_style("resolved") == STATUS_STYLES[ReportStatus.RESOLVED]

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            status_style("archived")


class TestReportMap:
    """Test suite for create_report_map."""

    def test_heat_weight_floor_and_cap(self):
        assert heat_weight(0) == 0.5
        assert heat_weight(8) == pytest.approx(0.8)
        assert heat_weight(50) == 1.0

    def test_empty_map_centered_on_region(self):
        report_map = create_report_map([], [])

        assert isinstance(report_map, folium.Map)
        assert report_map.location == list(INDIA_CENTER)

    def test_center_from_reports(self, make_report):
        reports = [make_report(20.0, 75.0), make_report(22.0, 77.0)]

        report_map = create_report_map(reports, [])

        assert report_map.location == pytest.approx([21.0, 76.0])

    def test_render_contains_reports(self, make_report):
        report = make_report(description="Water leak near school")
        buckets = bucket_points([
            ReportPoint(report.latitude, report.longitude, report.submitted_at, report.status)
        ])

        page = render_report_map([report], buckets)

        assert "Water leak near school" in page
        assert "1 reports in 1 locations" in page

    def test_description_is_escaped(self, make_report):
        report = make_report(description="<script>alert(1)</script>")

        page = render_report_map([report], [])

        assert "<script>alert(1)</script>" not in page
