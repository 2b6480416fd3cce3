"""
Map Visualization Module for CitizenWatch

Generates interactive maps using Folium: one marker per report coloured
by moderation status, and a heat layer built from the aggregated buckets.
"""

import html
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import folium
from folium.plugins import HeatMap, MarkerCluster

from citizenwatch.core.constants import HEATMAP_GRADIENT, INDIA_CENTER, INTENSITY_CAP
from citizenwatch.core.geo_utils import calculate_centroid, is_within_region
from citizenwatch.crowdsource.aggregation import AggregateBucket
from citizenwatch.crowdsource.report import Report, ReportStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusStyle:
    """Marker presentation for one report status."""
    label: str
    color: str
    icon: str


# Keyed by the closed ReportStatus enumeration; every member must be present.
STATUS_STYLES: Dict[ReportStatus, StatusStyle] = {
    ReportStatus.PENDING: StatusStyle("Pending", "orange", "clock"),
    ReportStatus.INVESTIGATING: StatusStyle("Investigating", "blue", "search"),
    ReportStatus.RESOLVED: StatusStyle("Resolved", "green", "check"),
}


def status_style(status: ReportStatus) -> StatusStyle:
    """Presentation for a status; raises ValueError for values outside the enum."""
    return STATUS_STYLES[ReportStatus(status)]


def heat_weight(intensity: float) -> float:
    """Normalize intensity to 0-1 with a floor so sparse cells stay visible."""
    return max(0.5, min(intensity / INTENSITY_CAP, 1.0))


def _report_popup(report: Report) -> str:
    style = status_style(report.status)
    address = html.escape(report.address) if report.address else "Unknown location"
    return f"""
    <div style="font-family: Arial; min-width: 200px;">
        <h4 style="margin: 0; color: {style.color};">{style.label}</h4>
        <hr style="margin: 5px 0;">
        <b>Description:</b> {html.escape(report.description)}<br>
        <b>Location:</b> {report.latitude:.4f}, {report.longitude:.4f}<br>
        <b>Address:</b> {address}<br>
        <b>Submitted:</b> {report.submitted_at.strftime("%Y-%m-%d %H:%M")} UTC<br>
        <a href="{html.escape(report.photo_url, quote=True)}" target="_blank">Photo</a>
    </div>
    """


def create_report_map(
    reports: List[Report],
    buckets: List[AggregateBucket],
    center: Optional[tuple] = None,
    zoom: int = 5,
    title: str = "CitizenWatch - Community Reports",
    show_heatmap: bool = True,
    show_markers: bool = True,
    cluster_markers: bool = True,
) -> folium.Map:
    """
    Create an interactive map with report markers and a heat layer.

    Args:
        reports: Reports to draw as markers
        buckets: Aggregated cells for the heat layer
        center: Map center (lat, lon). Defaults to the reports' centroid
            when every report is inside the region, else the region center.
        zoom: Initial zoom level (1-18)
        title: Map title
        show_heatmap: Include heatmap layer
        show_markers: Include marker layer
        cluster_markers: Cluster markers when zoomed out

    Returns:
        Folium Map object
    """
    if center is None:
        coords = [(r.latitude, r.longitude) for r in reports]
        if coords and all(is_within_region(lat, lng) for lat, lng in coords):
            center = calculate_centroid(coords)
        else:
            center = INDIA_CENTER

    report_map = folium.Map(location=list(center), zoom_start=zoom, tiles=None)

    folium.TileLayer(
        tiles="CartoDB dark_matter",
        name="Dark",
        attr="CartoDB",
    ).add_to(report_map)

    folium.TileLayer(
        tiles="OpenStreetMap",
        name="Street",
    ).add_to(report_map)

    if show_heatmap and buckets:
        heat_data = [[b.latitude, b.longitude, heat_weight(b.intensity)] for b in buckets]
        HeatMap(
            heat_data,
            name="Activity",
            radius=40,
            blur=30,
            max_zoom=10,
            min_opacity=0.5,
            gradient=HEATMAP_GRADIENT,
        ).add_to(report_map)

    if show_markers and reports:
        if cluster_markers:
            marker_group = MarkerCluster(name="Reports")
        else:
            marker_group = folium.FeatureGroup(name="Reports")

        for report in reports:
            style = status_style(report.status)
            folium.Marker(
                location=[report.latitude, report.longitude],
                popup=folium.Popup(_report_popup(report), max_width=300),
                tooltip=style.label,
                icon=folium.Icon(color=style.color, icon=style.icon, prefix="fa"),
            ).add_to(marker_group)

        marker_group.add_to(report_map)

    folium.LayerControl(position="topright").add_to(report_map)

    title_html = f'''
    <div style="position: fixed;
                top: 10px; left: 50px;
                background-color: rgba(0,0,0,0.8);
                padding: 10px 20px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;">
        <h3 style="margin: 0; color: white;">{html.escape(title)}</h3>
        <p style="margin: 5px 0 0 0; color: #ccc; font-size: 12px;">
            {len(reports)} reports in {len(buckets)} locations
        </p>
    </div>
    '''
    report_map.get_root().html.add_child(folium.Element(title_html))

    legend_rows = "".join(
        f'<span style="color: {s.color};">●</span> {s.label}<br>'
        for s in STATUS_STYLES.values()
    )
    legend_html = f'''
    <div style="position: fixed;
                bottom: 30px; right: 30px;
                background-color: rgba(0,0,0,0.8);
                padding: 10px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;
                font-size: 12px;
                color: white;">
        <b>Status</b><br>
        {legend_rows}
    </div>
    '''
    report_map.get_root().html.add_child(folium.Element(legend_html))

    logger.info(f"Created map with {len(reports)} reports and {len(buckets)} heat cells")
    return report_map


def render_report_map(reports: List[Report], buckets: List[AggregateBucket], **kwargs) -> str:
    """Render the map to a standalone HTML document."""
    return create_report_map(reports, buckets, **kwargs).get_root().render()
