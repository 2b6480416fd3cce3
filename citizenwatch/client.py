"""
CitizenWatch - Reporting Client

Async client for the reporting API. Capture state (location, photo,
description) lives in an explicit ReportSession instead of module globals,
and every network call takes a timeout and returns a typed result or raises.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import httpx

from citizenwatch.core.constants import DEFAULT_NEARBY_RADIUS_M, MAX_PHOTO_BYTES
from citizenwatch.core.exceptions import GeoRestrictionError, ValidationError
from citizenwatch.core.geo_utils import is_valid_coordinate, is_within_region
from citizenwatch.crowdsource.validation import SubmissionValidator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ReportClientError(Exception):
    """Request failed; carries the HTTP status (None when no response) and the server message."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}" if status_code else message)


class ReportClientTimeout(ReportClientError):
    """Request did not complete within its timeout."""

    def __init__(self, message: str = "Request timed out"):
        super().__init__(None, message)


@dataclass
class SubmittedReport:
    """Acknowledgment returned after a successful submission."""
    id: str
    description: str
    image_url: str
    latitude: float
    longitude: float
    timestamp: datetime

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SubmittedReport":
        longitude, latitude = payload["location"]["coordinates"]
        return cls(
            id=payload["id"],
            description=payload["description"],
            image_url=payload["imageUrl"],
            latitude=float(latitude),
            longitude=float(longitude),
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )


@dataclass
class ReportSession:
    """
    State of one report being composed.

    Setters apply the region gate and the photo checks immediately so the
    caller can surface problems before anything is sent.
    """
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: str = ""
    photo: Optional[bytes] = field(default=None, repr=False)
    photo_mime_type: Optional[str] = None
    photo_filename: Optional[str] = None
    description: str = ""
    reporter_note: str = ""
    max_photo_bytes: int = MAX_PHOTO_BYTES

    def set_location(self, latitude: float, longitude: float, address: Optional[str] = None) -> None:
        """
        Record the capture location.

        Raises:
            ValidationError: Coordinates are not valid numbers
            GeoRestrictionError: Coordinates fall outside the allowed region
        """
        if not is_valid_coordinate(latitude, longitude):
            raise ValidationError("Latitude and longitude are out of range")
        if not is_within_region(latitude, longitude):
            raise GeoRestrictionError()
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        if address is not None:
            self.address = address.strip()

    def set_photo(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> None:
        SubmissionValidator(max_photo_bytes=self.max_photo_bytes).check_photo(data, mime_type)
        self.photo = data
        self.photo_mime_type = mime_type
        self.photo_filename = filename or "photo"

    def set_description(self, text: str) -> None:
        self.description = (text or "").strip()

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.photo:
            missing.append("photo")
        if not self.description:
            missing.append("description")
        if self.latitude is None or self.longitude is None:
            missing.append("location")
        return missing

    @property
    def is_ready(self) -> bool:
        return not self.missing_fields()

    def to_form(self) -> Tuple[Dict[str, str], Dict[str, Tuple[str, bytes, str]]]:
        """Multipart fields and files for POST /api/report."""
        missing = self.missing_fields()
        if "photo" in missing:
            raise ValidationError("Photo is required")
        if missing:
            raise ValidationError("Description, latitude, and longitude are required")

        data = {
            "description": self.description,
            "latitude": repr(self.latitude),
            "longitude": repr(self.longitude),
        }
        if self.address:
            data["address"] = self.address
        if self.reporter_note:
            data["reporterInfo"] = self.reporter_note
        files = {"photo": (self.photo_filename, self.photo, self.photo_mime_type)}
        return data, files

    def reset(self) -> None:
        """Clear the composed report, keeping the location."""
        self.photo = None
        self.photo_mime_type = None
        self.photo_filename = None
        self.description = ""
        self.reporter_note = ""


class ReportClient:
    """
    Async client for the reporting API.

    Usage:
        async with ReportClient("http://localhost:8000") as client:
            submitted = await client.submit(session, timeout=10)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: API root, e.g. http://localhost:8000
            timeout: Default timeout in seconds for calls that do not pass one
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, transport=self._transport)
        return self._client

    async def _request(self, method: str, path: str, timeout: Optional[float], **kwargs) -> Dict[str, Any]:
        effective_timeout = self.timeout if timeout is None else timeout
        try:
            response = await self._get_client().request(method, path, timeout=effective_timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out after {effective_timeout}s")
            raise ReportClientTimeout() from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ReportClientError(None, "Network error") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ReportClientError(response.status_code, message or response.reason_phrase)

        return payload

    async def submit(self, session: ReportSession, timeout: Optional[float] = None) -> SubmittedReport:
        """
        Submit the session's report.

        Raises:
            ValidationError: The session is incomplete (nothing is sent)
            ReportClientError: The server rejected the report
            ReportClientTimeout: No answer within the timeout
        """
        data, files = session.to_form()
        payload = await self._request("POST", "/api/report", timeout, data=data, files=files)
        submitted = SubmittedReport.from_payload(payload["report"])
        logger.info(f"Report {submitted.id} submitted")
        return submitted

    async def list_reports(self, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        payload = await self._request("GET", "/api/reports", timeout)
        return payload.get("reports", [])

    async def nearby(
        self,
        latitude: float,
        longitude: float,
        radius_m: float = DEFAULT_NEARBY_RADIUS_M,
        timeout: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        params = {"lat": latitude, "lng": longitude, "radius": radius_m}
        payload = await self._request("GET", "/api/reports/nearby", timeout, params=params)
        return payload.get("reports", [])

    async def heatmap(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        return await self._request("GET", "/api/heatmap", timeout)

    async def stats(self, timeout: Optional[float] = None) -> Dict[str, int]:
        payload = await self._request("GET", "/api/stats", timeout)
        return payload.get("stats", {})

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
