"""
CitizenWatch - Core Utilities
Central configuration, logging, errors and geo helpers.
"""

from citizenwatch.core.config import settings
from citizenwatch.core.constants import (
    INDIA_BBOX,
    GRID_PRECISION,
    RECENT_WINDOW_DAYS,
    MAX_PHOTO_BYTES,
)
from citizenwatch.core.exceptions import (
    CitizenWatchError,
    ValidationError,
    GeoRestrictionError,
    UpstreamStorageError,
    StorageError,
    PersistenceError,
    NotFoundError,
)
from citizenwatch.core.geo_utils import (
    ALLOWED_REGION,
    is_within_region,
    grid_key,
    haversine_distance,
    haversine_distance_m,
)

__all__ = [
    "settings",
    "INDIA_BBOX",
    "GRID_PRECISION",
    "RECENT_WINDOW_DAYS",
    "MAX_PHOTO_BYTES",
    "CitizenWatchError",
    "ValidationError",
    "GeoRestrictionError",
    "UpstreamStorageError",
    "StorageError",
    "PersistenceError",
    "NotFoundError",
    "ALLOWED_REGION",
    "is_within_region",
    "grid_key",
    "haversine_distance",
    "haversine_distance_m",
]
