"""
CitizenWatch - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, Tuple

# =============================================================================
# GEOGRAPHIC BOUNDARIES
# =============================================================================

# India bounding box (west, south, east, north)
INDIA_BBOX: Tuple[float, float, float, float] = (68.0, 6.0, 97.0, 37.0)

# India center coordinates (lat, lon)
INDIA_CENTER: Tuple[float, float] = (22.9734, 78.6569)

# =============================================================================
# SUBMISSIONS
# =============================================================================

MAX_PHOTO_BYTES: int = 5 * 1024 * 1024

DEFAULT_REPORTER_NOTE: str = "Anonymous"

# Matches the width of the reporter_note column
MAX_REPORTER_NOTE_LENGTH: int = 200

ALLOWED_MIME_PREFIX: str = "image/"

# Object name prefix for stored photos
PHOTO_NAME_PREFIX: str = "report"

PHOTO_CACHE_CONTROL: str = "public, max-age=31536000"

# =============================================================================
# HEAT MAP AGGREGATION
# =============================================================================

# 3 decimal places is roughly 110 m at the equator
GRID_PRECISION: int = 3

RECENT_WINDOW_DAYS: int = 30

INTENSITY_COUNT_WEIGHT: float = 0.3
INTENSITY_RECENT_WEIGHT: float = 0.7
INTENSITY_CAP: float = 10.0

# Leaflet-style gradient for the heat layer
HEATMAP_GRADIENT: Dict[float, str] = {
    0.0: "#00eaff",
    0.3: "#00bfff",
    0.5: "#00ff99",
    0.7: "#ffff00",
    1.0: "#ff0000",
}

# =============================================================================
# QUERIES
# =============================================================================

DEFAULT_LIST_LIMIT: int = 1000
DEFAULT_NEARBY_RADIUS_M: int = 5000

# Local URLs created before external blob storage was wired in
LOCAL_PHOTO_URL_PATTERN: str = "^/uploads/"
