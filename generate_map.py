#!/usr/bin/env python3
"""
CitizenWatch - Generate Interactive Report Map
Reads reports from the configured store and writes a standalone HTML map.
"""
import os
import sys
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from citizenwatch.api.main import get_report_store
from citizenwatch.core.config import settings
from citizenwatch.core.constants import DEFAULT_LIST_LIMIT
from citizenwatch.crowdsource import HeatmapAggregator, ReportQueryService
from citizenwatch.visualization.map_generator import create_report_map


def main():
    print("=" * 60)
    print("CitizenWatch - Generating Report Map")
    print("=" * 60)

    store = get_report_store()
    print(f"\nReport store: {store.name}")

    queries = ReportQueryService(store, recent_days=settings.recent_window_days)
    aggregator = HeatmapAggregator(store, recent_days=settings.recent_window_days)

    reports = queries.list_recent(DEFAULT_LIST_LIMIT)
    heatmap = aggregator.compute_heatmap()
    stats = queries.compute_stats()
    store.close()

    print(f"\nTotal reports: {stats['total']}")
    print(f"  - Pending:       {stats['pending']}")
    print(f"  - Investigating: {stats['investigating']}")
    print(f"  - Resolved:      {stats['resolved']}")
    print(f"  - Last {settings.recent_window_days} days:  {stats['recent']}")
    print(f"Heat map cells: {heatmap.total_locations}")

    if not reports:
        print("No reports yet; the map will be empty.")

    print("\nGenerating interactive map...")

    report_map = create_report_map(
        reports=reports,
        buckets=heatmap.buckets,
        title=f"CitizenWatch - Reports ({datetime.now().strftime('%Y-%m-%d %H:%M')})",
        show_heatmap=True,
        show_markers=True,
        cluster_markers=True
    )

    output_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "citizenwatch_map.html")
    report_map.save(output_path)

    print(f"\nMap saved to: {output_path}")
    print("\nOpen the file in your browser to view the interactive map!")
    print("=" * 60)

if __name__ == "__main__":
    main()
