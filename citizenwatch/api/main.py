"""
CitizenWatch - REST API

FastAPI application for submitting geotagged photo reports and reading
the aggregated activity back (listing, proximity, heat map, counters).

Run with: uvicorn citizenwatch.api.main:app --reload
"""

import logging
import math
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from citizenwatch.core.config import settings
from citizenwatch.core.constants import DEFAULT_LIST_LIMIT, DEFAULT_NEARBY_RADIUS_M
from citizenwatch.core.exceptions import CitizenWatchError, ValidationError
from citizenwatch.core.geo_utils import is_valid_coordinate
from citizenwatch.core.logging import setup_logging
from citizenwatch.crowdsource import (
    HeatmapAggregator,
    ReportHandler,
    ReportQueryService,
    SubmissionValidator,
)
from citizenwatch.database.connection import init_db
from citizenwatch.database.repository import InMemoryReportStore, PostGISReportStore, ReportStore
from citizenwatch.ingestion.nominatim_client import NominatimClient
from citizenwatch.storage.blob_store import BlobStore, GCSBlobStore, LocalBlobStore
from citizenwatch.visualization.map_generator import render_report_map

setup_logging(level=settings.log_level)
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"

# FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Citizen reporting API: geotagged photo reports, heat map and statistics",
    version=settings.app_version,
    # Interactive docs are not served in production
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.blob_store_backend.lower() == LocalBlobStore.name:
    app.mount(
        settings.upload_url_path,
        StaticFiles(directory=settings.local_upload_dir, check_dir=False),
        name="uploads",
    )


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(CitizenWatchError)
async def citizenwatch_error_handler(request: Request, exc: CitizenWatchError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ())[1:])
        message = f"Invalid value for {field}" if field else "Invalid request"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache()
def get_report_store() -> ReportStore:
    """Report store selected by REPORT_STORE_BACKEND."""
    backend = settings.report_store_backend.lower()
    if backend == PostGISReportStore.name:
        return PostGISReportStore(init_db(settings.database_url))
    if backend == InMemoryReportStore.name:
        logger.warning("Using in-memory report store; reports are lost on restart")
        return InMemoryReportStore()
    raise ValueError(f"Unknown report store backend: {settings.report_store_backend}")


@lru_cache()
def get_blob_store() -> BlobStore:
    """Blob store selected by BLOB_STORE_BACKEND."""
    backend = settings.blob_store_backend.lower()
    if backend == GCSBlobStore.name:
        return GCSBlobStore(
            bucket_name=settings.firebase_storage_bucket,
            credentials_path=settings.firebase_credentials_path,
        )
    if backend == LocalBlobStore.name:
        return LocalBlobStore(settings.local_upload_dir, url_path=settings.upload_url_path)
    raise ValueError(f"Unknown blob store backend: {settings.blob_store_backend}")


@lru_cache()
def get_geocoder() -> Optional[NominatimClient]:
    if not settings.reverse_geocoding_enabled:
        return None
    return NominatimClient(
        base_url=settings.nominatim_url,
        user_agent=settings.nominatim_user_agent,
        timeout=settings.geocoding_timeout_seconds,
    )


def get_validator() -> SubmissionValidator:
    return SubmissionValidator(
        max_photo_bytes=settings.max_photo_bytes,
        enforce_region=settings.enforce_region,
    )


def get_report_handler(
    report_store: ReportStore = Depends(get_report_store),
    blob_store: BlobStore = Depends(get_blob_store),
    validator: SubmissionValidator = Depends(get_validator),
    geocoder: Optional[NominatimClient] = Depends(get_geocoder),
) -> ReportHandler:
    return ReportHandler(
        report_store=report_store,
        blob_store=blob_store,
        validator=validator,
        geocoder=geocoder,
        tmp_dir=settings.upload_tmp_dir,
    )


def get_query_service(report_store: ReportStore = Depends(get_report_store)) -> ReportQueryService:
    return ReportQueryService(report_store, recent_days=settings.recent_window_days)


def get_aggregator(report_store: ReportStore = Depends(get_report_store)) -> HeatmapAggregator:
    return HeatmapAggregator(report_store, recent_days=settings.recent_window_days)


def _parse_float(value: Optional[str], message: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(number):
        raise ValidationError(message)
    return number


# ============================================================================
# System Routes
# ============================================================================

@app.get("/", tags=["System"])
async def root():
    """Service index."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": app.docs_url,
        "endpoints": {
            "submit_report": "POST /api/report",
            "list_reports": "GET /api/reports",
            "get_report": "GET /api/reports/{id}",
            "nearby_reports": "GET /api/reports/nearby?lat=&lng=&radius=",
            "heatmap": "GET /api/heatmap",
            "stats": "GET /api/stats",
            "cleanup": "DELETE /api/reports/cleanup",
            "map": "GET /map",
            "health": "GET /health",
        },
    }


@app.get("/health", tags=["System"])
async def health_check(
    report_store: ReportStore = Depends(get_report_store),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Check API health status and configured backends."""
    store_ok = await run_in_threadpool(report_store.ping)
    return {
        "status": "healthy" if store_ok else "degraded",
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "backends": {
            "report_store": report_store.name,
            "blob_store": blob_store.name,
        },
    }


# ============================================================================
# Report Routes
# ============================================================================

@app.post("/api/report", status_code=201, tags=["Reports"])
async def submit_report(
    photo: Optional[UploadFile] = File(None),
    description: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    reporter_info: Optional[str] = Form(None, alias="reporterInfo"),
    handler: ReportHandler = Depends(get_report_handler),
):
    """
    Submit a photo report.

    Only the first limit + 1 bytes of the photo reach the validator, which is
    enough to reject an oversized upload. The multipart body itself has
    already been spooled by the framework by the time this runs.
    """
    photo_data = None
    mime_type = None
    filename = None
    if photo is not None:
        photo_data = await photo.read(handler.validator.max_photo_bytes + 1)
        mime_type = photo.content_type
        filename = photo.filename

    report = await run_in_threadpool(
        handler.submit,
        photo=photo_data,
        mime_type=mime_type,
        description=description,
        latitude=latitude,
        longitude=longitude,
        address=address,
        reporter_note=reporter_info,
        filename=filename,
    )

    return {
        "success": True,
        "message": "Report submitted successfully",
        "report": report.to_public_dict(),
    }


@app.get("/api/reports", tags=["Reports"])
async def list_reports(queries: ReportQueryService = Depends(get_query_service)):
    """Most recent reports, newest first."""
    reports = await run_in_threadpool(queries.list_recent, DEFAULT_LIST_LIMIT)
    return {"success": True, "reports": [r.to_dict() for r in reports]}


@app.get("/api/reports/nearby", tags=["Reports"])
async def nearby_reports(
    lat: Optional[str] = Query(None, description="Latitude"),
    lng: Optional[str] = Query(None, description="Longitude"),
    radius: Optional[str] = Query(None, description="Radius in meters"),
    queries: ReportQueryService = Depends(get_query_service),
):
    """Reports within `radius` meters of a point, newest first."""
    if not lat or not lng:
        raise ValidationError("Latitude and longitude are required")

    latitude = _parse_float(lat, "Latitude and longitude must be valid numbers")
    longitude = _parse_float(lng, "Latitude and longitude must be valid numbers")
    if not is_valid_coordinate(latitude, longitude):
        raise ValidationError("Latitude and longitude are out of range")
    radius_m = DEFAULT_NEARBY_RADIUS_M
    if radius:
        radius_m = _parse_float(radius, "Radius must be a positive number")
        if radius_m <= 0:
            raise ValidationError("Radius must be a positive number")

    reports = await run_in_threadpool(queries.find_near, latitude, longitude, radius_m)
    return {"success": True, "reports": [r.to_dict() for r in reports]}


@app.delete("/api/reports/cleanup", tags=["Admin"])
async def cleanup_reports(queries: ReportQueryService = Depends(get_query_service)):
    """Remove reports whose photo was stored on the local upload path."""
    deleted = await run_in_threadpool(queries.cleanup_local_reports)
    return {
        "success": True,
        "message": f"Cleaned up {deleted} reports with local URLs",
        "deletedCount": deleted,
    }


@app.get("/api/reports/{report_id}", tags=["Reports"])
async def get_report(report_id: str, queries: ReportQueryService = Depends(get_query_service)):
    report = await run_in_threadpool(queries.get, report_id)
    return {"success": True, "report": report.to_dict()}


# ============================================================================
# Aggregate Routes
# ============================================================================

@app.get("/api/heatmap", tags=["Aggregates"])
async def heatmap(aggregator: HeatmapAggregator = Depends(get_aggregator)):
    """Reports bucketed on a ~110 m grid with a recency-weighted intensity."""
    result = await run_in_threadpool(aggregator.compute_heatmap)
    return result.to_dict()


@app.get("/api/stats", tags=["Aggregates"])
async def stats(queries: ReportQueryService = Depends(get_query_service)):
    counters = await run_in_threadpool(queries.compute_stats)
    return {"success": True, "stats": counters}


@app.get("/map", response_class=HTMLResponse, tags=["Map"])
async def report_map(
    queries: ReportQueryService = Depends(get_query_service),
    aggregator: HeatmapAggregator = Depends(get_aggregator),
):
    """
    Interactive map of reports.

    Markers are coloured by status and a heat layer shows activity.
    """
    reports = await run_in_threadpool(queries.list_recent, DEFAULT_LIST_LIMIT)
    result = await run_in_threadpool(aggregator.compute_heatmap)
    return HTMLResponse(render_report_map(reports, result.buckets))


# ============================================================================
# Main
# ============================================================================

def run() -> None:
    """Console entry point."""
    import uvicorn

    os.makedirs(settings.local_upload_dir, exist_ok=True)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
