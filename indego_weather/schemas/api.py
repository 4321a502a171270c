"""
Pydantic schemas for API responses.
Defines the contract between the API and consumers.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from indego_weather.schemas.indego import IndegoData, StationFeature
from indego_weather.schemas.weather import WeatherData


class ErrorResponse(BaseModel):
    """Standardized error payload for all API and validation errors."""

    error: str
    details: str
    status: int

    class Config:
        json_schema_extra = {
            "example": {
                "error": "request_failed",
                "details": "Invalid time format",
                "status": 400,
            }
        }


class FetchAndStoreResponse(BaseModel):
    message: str

    class Config:
        json_schema_extra = {"example": {"message": "Data stored successfully"}}


class StationSnapshotResponse(BaseModel):
    """All stations and the weather at the matched snapshot time."""

    at: str
    stations: IndegoData
    weather: WeatherData

    class Config:
        json_schema_extra = {
            "example": {
                "at": "2019-09-01T10:00:00Z",
                "stations": {"last_updated": "2019-09-01T10:00:00Z", "features": [], "type": "FeatureCollection"},
                "weather": {"main": {"temp": 295.4}, "weather": [{"main": "Clear", "description": "clear sky"}]},
            }
        }


class SpecificStationSnapshotResponse(BaseModel):
    """One station and the weather at the matched snapshot time."""

    at: str
    station: StationFeature
    weather: WeatherData


class HealthResponse(BaseModel):
    status: str


class IngestionStatusResponse(BaseModel):
    """Response model for poll freshness endpoint."""

    ingestion_status: str
    ingestion_alive: bool
    stale_threshold_seconds: int
    last_successful_ingestion: Optional[datetime]
    seconds_since_last_heartbeat: Optional[float]
    last_failure: Optional[str]
    last_failure_at: Optional[datetime]
    uptime_seconds: float
    process_started_at: datetime


class IngestionMetrics(BaseModel):
    last_successful_write: Optional[datetime]
    seconds_since_last_successful_write: Optional[float]
    stale_after_seconds: int
    last_failure: Optional[str]
    last_failure_at: Optional[datetime]


class ApiLatencyMetrics(BaseModel):
    request_count: int
    average_ms: float
    max_ms: float
    last_ms: float


class MetricsResponse(BaseModel):
    """Response model for runtime service metrics."""

    service: str
    process_started_at: datetime
    uptime_seconds: float
    ingestion: IngestionMetrics
    api_latency_ms: ApiLatencyMetrics
    timestamp: datetime
