"""
CitizenWatch - External Data Clients
"""

from citizenwatch.ingestion.nominatim_client import NominatimClient

__all__ = [
    "NominatimClient",
]
