"""
CitizenWatch - Crowdsource Module
Citizen photo reports: ingestion, heat map aggregation and queries.
"""

from citizenwatch.crowdsource.report import (
    Report,
    ReportPoint,
    ReportStatus,
)
from citizenwatch.crowdsource.validation import (
    SubmissionValidator,
    ValidatedSubmission,
)
from citizenwatch.crowdsource.report_handler import ReportHandler
from citizenwatch.crowdsource.aggregation import (
    AggregateBucket,
    Heatmap,
    HeatmapAggregator,
    bucket_points,
    compute_intensity,
)
from citizenwatch.crowdsource.queries import ReportQueryService

__all__ = [
    # Entities
    "Report",
    "ReportPoint",
    "ReportStatus",
    # Ingestion
    "SubmissionValidator",
    "ValidatedSubmission",
    "ReportHandler",
    # Aggregation
    "AggregateBucket",
    "Heatmap",
    "HeatmapAggregator",
    "bucket_points",
    "compute_intensity",
    # Queries
    "ReportQueryService",
]
