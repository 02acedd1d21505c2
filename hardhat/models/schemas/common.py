"""
Common schemas used across the API.
"""
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class ResponseStatus(BaseModel):
    """Base schema for API response status."""
    success: bool
    message: Optional[str] = None


class Pagination(BaseModel):
    """Pagination block returned alongside a page of records."""
    total: int
    limit: int
    offset: int
    has_more: bool


class DateRange(BaseModel):
    """Inclusive time bounds of an aggregation window."""
    start: Optional[datetime] = None
    end: datetime


class EnvironmentStatus(BaseModel):
    api_key: bool
    model_id: bool
    version: str


class DetectorStatus(BaseModel):
    connected: bool = False
    response_time_ms: int = 0
    error: Optional[str] = None


class SystemInfo(BaseModel):
    python_version: str
    platform: str
    uptime_seconds: float
    memory_rss_bytes: int
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    score: int
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    environment: EnvironmentStatus
    roboflow: DetectorStatus
    system: SystemInfo
    endpoints: Dict[str, str]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "score": 90,
                "version": "1.0.0",
                "timestamp": "2025-05-06T01:08:25.123Z",
                "environment": {"api_key": True, "model_id": True, "version": "1"},
                "roboflow": {"connected": True, "response_time_ms": 412, "error": None},
                "system": {
                    "python_version": "3.12.3",
                    "platform": "linux",
                    "uptime_seconds": 3600.5,
                    "memory_rss_bytes": 73400320,
                    "timestamp": "2025-05-06T01:08:25.123Z"
                },
                "endpoints": {"inference": "/api/v1/infer"}
            }
        }
    )


class ErrorResponse(BaseModel):
    """Shape of every error payload rendered by the exception handlers."""
    success: bool = False
    message: str
    fields: Optional[List[str]] = None
    upstream_status: Optional[int] = None
    detail: Optional[Any] = None
