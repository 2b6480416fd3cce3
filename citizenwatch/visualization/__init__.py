"""
CitizenWatch - Map Visualization
"""

from citizenwatch.visualization.map_generator import (
    STATUS_STYLES,
    StatusStyle,
    status_style,
    create_report_map,
    render_report_map,
)

__all__ = [
    "STATUS_STYLES",
    "StatusStyle",
    "status_style",
    "create_report_map",
    "render_report_map",
]
