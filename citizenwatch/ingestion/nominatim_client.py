"""
CitizenWatch - OpenStreetMap Nominatim Client
Reverse geocoding of report coordinates into a human-readable address.
"""

import logging
from typing import Optional

import httpx

from citizenwatch.core.config import settings

logger = logging.getLogger(__name__)


class NominatimClient:
    """
    Reverse geocoder backed by Nominatim.

    Never raises: network errors, bad statuses and malformed payloads all
    yield None so a report is never blocked on geocoding.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the Nominatim client.

        Args:
            base_url: Reverse endpoint URL
            user_agent: User-Agent header (required by the Nominatim usage policy)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url or settings.nominatim_url
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )
        return self._client

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Look up the display name for a coordinate.

        Returns:
            Address label, or None when unavailable
        """
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "zoom": 18,
            "addressdetails": 1,
        }
        try:
            response = self._get_client().get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reverse geocoding failed for ({latitude}, {longitude}): {e}")
            return None

        address = data.get("display_name") if isinstance(data, dict) else None
        return address or None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
