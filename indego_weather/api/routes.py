"""
FastAPI REST API endpoints.
Exposes the poll cycle as a trigger endpoint and the snapshot query as read endpoints.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from indego_weather.auth import BearerAuthenticator, require_auth
from indego_weather.config import Settings
from indego_weather.exceptions import CycleError, NotFoundError, StorageError
from indego_weather.observability import RequestTimer, RuntimeObservability
from indego_weather.schemas.api import (
    ErrorResponse,
    FetchAndStoreResponse,
    HealthResponse,
    IngestionStatusResponse,
    MetricsResponse,
    SpecificStationSnapshotResponse,
    StationSnapshotResponse,
)
from indego_weather.services.snapshot_service import SnapshotOrchestrator, SnapshotQuery
from indego_weather.utils.validators import format_rfc3339, parse_rfc3339

logger = logging.getLogger(__name__)

router = APIRouter()
v1 = APIRouter(prefix="/api/v1", dependencies=[Depends(require_auth)], tags=["Indego"])

KIOSK_ID_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid kioskId or time format"},
    401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
    404: {"model": ErrorResponse, "description": "Snapshot or station not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _error(status_code: int, error: str, details: str) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details, status=status_code)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _flatten_validation_errors(exc: RequestValidationError) -> str:
    """Return a concise, stable validation message string."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(i) for i in err.get("loc", []) if i != "body")
        msg = err.get("msg", "Invalid value")
        parts.append(f"{loc}: {msg}")
    return "; ".join(parts)


def _parse_at(at: Optional[str]) -> datetime:
    try:
        return parse_rfc3339(at)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid time format")


def get_orchestrator(request: Request) -> SnapshotOrchestrator:
    return request.app.state.orchestrator


def get_query(request: Request) -> SnapshotQuery:
    return request.app.state.query


def create_app(
    settings: Settings,
    orchestrator: SnapshotOrchestrator,
    query: SnapshotQuery,
    observability: Optional[RuntimeObservability] = None,
    authenticator: Optional[BearerAuthenticator] = None,
    lifespan=None,
) -> FastAPI:
    app = FastAPI(
        title="Indego Weather Snapshots",
        description=(
            "Hourly snapshots of Indego bike-share stations linked with Philadelphia weather.\n\n"
            "Errors use the standardized shape `{error, details, status}`."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.query = query
    app.state.observability = observability or RuntimeObservability()
    app.state.authenticator = authenticator or BearerAuthenticator(settings)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException):
        details = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error(exc.status_code, "request_failed", details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
        return _error(400, "validation_error", _flatten_validation_errors(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_: Request, exc: NotFoundError):
        return _error(404, "not_found", str(exc))

    @app.exception_handler(StorageError)
    async def storage_error_handler(_: Request, exc: StorageError):
        logger.error(f"Snapshot lookup failed: {exc}")
        return _error(500, "internal_server_error", "Failed to fetch snapshot")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception):
        logger.error(f"Unhandled API exception: {exc}", exc_info=True)
        return _error(500, "internal_server_error", "Unexpected server error")

    @app.middleware("http")
    async def measure_request_latency(request: Request, call_next):
        """Capture request latency for all API calls."""
        timer = RequestTimer()
        response = await call_next(request)
        elapsed = timer.elapsed_ms()
        app.state.observability.mark_request_timing(elapsed)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.1f}ms")
        return response

    app.include_router(router)
    app.include_router(v1)
    return app


@router.get("/healthz", response_model=HealthResponse, summary="Liveness probe")
def healthz():
    return HealthResponse(status="ok")


@router.get("/status/ingestion", response_model=IngestionStatusResponse, summary="Poll status")
def ingestion_status(request: Request):
    """Expose poll freshness and the most recent failure."""
    observability: RuntimeObservability = request.app.state.observability
    settings: Settings = request.app.state.settings

    heartbeat_age = observability.seconds_since_last_ingestion()
    stale_threshold_seconds = settings.ingestion_interval_seconds * 2
    ingestion_alive = heartbeat_age is not None and heartbeat_age <= stale_threshold_seconds

    return IngestionStatusResponse(
        ingestion_status="alive" if ingestion_alive else "dead",
        ingestion_alive=ingestion_alive,
        stale_threshold_seconds=stale_threshold_seconds,
        last_successful_ingestion=observability.last_successful_ingestion,
        seconds_since_last_heartbeat=heartbeat_age,
        last_failure=observability.last_failure,
        last_failure_at=observability.last_failure_at,
        uptime_seconds=round(observability.uptime_seconds(), 3),
        process_started_at=observability.process_started_at,
    )


@router.get("/metrics", response_model=MetricsResponse, summary="Runtime metrics")
def metrics(request: Request):
    """Uptime, poll heartbeat and request latency aggregates."""
    observability: RuntimeObservability = request.app.state.observability
    settings: Settings = request.app.state.settings

    return MetricsResponse(
        service="indego-weather-snapshots",
        process_started_at=observability.process_started_at,
        uptime_seconds=round(observability.uptime_seconds(), 3),
        ingestion={
            "last_successful_write": observability.last_successful_ingestion,
            "seconds_since_last_successful_write": observability.seconds_since_last_ingestion(),
            "stale_after_seconds": settings.ingestion_interval_seconds * 2,
            "last_failure": observability.last_failure,
            "last_failure_at": observability.last_failure_at,
        },
        api_latency_ms=asdict(observability.request_metrics()),
        timestamp=datetime.now(timezone.utc),
    )


@v1.post(
    "/indego-data-fetch-and-store-it-db",
    status_code=201,
    response_model=FetchAndStoreResponse,
    responses={500: ERROR_RESPONSES[500], 401: ERROR_RESPONSES[401]},
    summary="Store the latest Indego and weather data",
)
def fetch_indego_data_and_store(orchestrator: SnapshotOrchestrator = Depends(get_orchestrator)):
    """Fetch both feeds, store them and link them, synchronously."""
    try:
        orchestrator.run_cycle()
    except CycleError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return FetchAndStoreResponse(message="Data stored successfully")


@v1.get(
    "/stations",
    response_model=StationSnapshotResponse,
    responses=ERROR_RESPONSES,
    summary="Snapshot of all stations at a specific time",
)
def get_station_snapshot(
    at: Optional[str] = Query(None, description="Timestamp in RFC3339 format", examples=["2019-09-01T10:00:00Z"]),
    query: SnapshotQuery = Depends(get_query),
):
    """Return the first snapshot at or after ``at``."""
    bundle = query.at(_parse_at(at))
    return StationSnapshotResponse(
        at=format_rfc3339(bundle.timestamp),
        stations=bundle.station,
        weather=bundle.weather,
    )


@v1.get(
    "/stations/{kioskId}",
    response_model=SpecificStationSnapshotResponse,
    responses=ERROR_RESPONSES,
    summary="Snapshot of one station at a specific time",
)
def get_specific_station_snapshot(
    kiosk_id: str = Path(..., alias="kioskId", description="Kiosk ID"),
    at: Optional[str] = Query(None, description="Timestamp in RFC3339 format", examples=["2019-09-01T10:00:00Z"]),
    query: SnapshotQuery = Depends(get_query),
):
    if not KIOSK_ID_PATTERN.fullmatch(kiosk_id):
        raise HTTPException(status_code=400, detail="Invalid kioskId format")

    bundle = query.station_at(int(kiosk_id), _parse_at(at))
    return SpecificStationSnapshotResponse(
        at=format_rfc3339(bundle.timestamp),
        station=bundle.station,
        weather=bundle.weather,
    )
