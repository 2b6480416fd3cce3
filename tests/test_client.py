"""
Tests for the async reporting client
"""
import asyncio

import httpx
import pytest

from citizenwatch.client import (
    ReportClient,
    ReportClientError,
    ReportClientTimeout,
    ReportSession,
    SubmittedReport,
)
from citizenwatch.core.exceptions import GeoRestrictionError, ValidationError

ACK = {
    "success": True,
    "message": "Report submitted successfully",
    "report": {
        "id": "abc123",
        "description": "test",
        "imageUrl": "/uploads/report-1.jpg",
        "location": {"type": "Point", "coordinates": [77.209, 28.6139]},
        "timestamp": "2026-03-01T12:00:00+00:00",
    },
}


def ready_session():
    session = ReportSession()
    session.set_location(28.6139, 77.2090)
    session.set_photo(b"\xff\xd8jpeg", "image/jpeg", "photo.jpg")
    session.set_description("  test  ")
    return session


def run_with(handler, coro_factory):
    async def _run():
        async with ReportClient("http://api.test", timeout=2.0, transport=httpx.MockTransport(handler)) as client:
            return await coro_factory(client)
    return asyncio.run(_run())


class TestReportSession:
    """Test suite for per-session capture state."""

    def test_ready_after_all_fields(self):
        session = ready_session()

        assert session.is_ready
        assert session.description == "test"

    def test_missing_fields(self):
        session = ReportSession()
        assert session.missing_fields() == ["photo", "description", "location"]
        assert not session.is_ready

    def test_location_outside_region_rejected(self):
        session = ReportSession()
        with pytest.raises(GeoRestrictionError):
            session.set_location(48.8566, 2.3522)
        assert session.latitude is None

    def test_photo_checks(self):
        session = ReportSession(max_photo_bytes=10)
        with pytest.raises(ValidationError, match="Only image files are allowed!"):
            session.set_photo(b"data", "text/plain")
        with pytest.raises(ValidationError):
            session.set_photo(b"x" * 11, "image/png")
        assert session.photo is None

    def test_to_form(self):
        session = ready_session()
        session.reporter_note = "Resident"

        data, files = session.to_form()

        assert data["description"] == "test"
        assert float(data["latitude"]) == 28.6139
        assert data["reporterInfo"] == "Resident"
        assert files["photo"] == ("photo.jpg", b"\xff\xd8jpeg", "image/jpeg")

    def test_to_form_incomplete(self):
        session = ReportSession()
        session.set_photo(b"\xff\xd8jpeg", "image/jpeg")
        with pytest.raises(ValidationError, match="required"):
            session.to_form()

    def test_reset_keeps_location(self):
        session = ready_session()
        session.reset()

        assert session.photo is None
        assert session.description == ""
        assert session.latitude == 28.6139


class TestReportClient:
    """Test suite for ReportClient."""

    def test_submit_success(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = request.read()
            return httpx.Response(201, json=ACK)

        submitted = run_with(handler, lambda client: client.submit(ready_session()))

        assert isinstance(submitted, SubmittedReport)
        assert submitted.id == "abc123"
        assert (submitted.latitude, submitted.longitude) == (28.6139, 77.209)
        assert submitted.timestamp.year == 2026
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/report"
        assert b'name="photo"' in seen["body"]

    def test_server_error_message(self):
        def handler(request):
            return httpx.Response(400, json={"error": "File size too large. Maximum size is 5MB."})

        with pytest.raises(ReportClientError) as exc_info:
            run_with(handler, lambda client: client.submit(ready_session()))

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "File size too large. Maximum size is 5MB."

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(ReportClientTimeout):
            run_with(handler, lambda client: client.stats(timeout=0.5))

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ReportClientError) as exc_info:
            run_with(handler, lambda client: client.heatmap())

        assert exc_info.value.status_code is None

    def test_incomplete_session_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json=ACK)

        with pytest.raises(ValidationError):
            run_with(handler, lambda client: client.submit(ReportSession()))

        assert calls == []

    def test_stats_and_nearby(self):
        def handler(request):
            if request.url.path == "/api/stats":
                return httpx.Response(200, json={"success": True, "stats": {"total": 3}})
            assert request.url.params["radius"] == "1000"
            return httpx.Response(200, json={"success": True, "reports": [{"id": "a"}]})

        assert run_with(handler, lambda client: client.stats()) == {"total": 3}
        assert run_with(handler, lambda client: client.nearby(28.6, 77.2, radius_m=1000)) == [{"id": "a"}]
