"""
Database module for CitizenWatch
PostgreSQL + PostGIS persistence for citizen reports, with an in-memory
store for development and tests.
"""

from .connection import DatabaseConnection, init_db
from .models import Base, ReportRecord
from .repository import ReportStore, InMemoryReportStore, PostGISReportStore

__all__ = [
    "DatabaseConnection",
    "init_db",
    "Base",
    "ReportRecord",
    "ReportStore",
    "InMemoryReportStore",
    "PostGISReportStore",
]
