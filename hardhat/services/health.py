"""
Service health probe and scoring.
"""
import platform
import sys
import time
from datetime import datetime, timezone
from typing import Dict, Optional

import psutil

from hardhat.core.config import settings
from hardhat.core.logging import logger
from hardhat.models.schemas.common import (
    DetectorStatus,
    EnvironmentStatus,
    HealthResponse,
    SystemInfo,
)
from hardhat.services.detector import Detector


def calculate_health_score(environment: EnvironmentStatus, detector: DetectorStatus) -> int:
    """
    Score service health out of 100.

    Credentials are worth 40 points, connectivity 40, and a fast
    response adds up to 10 more.
    """
    score = 0
    if environment.api_key:
        score += 20
    if environment.model_id:
        score += 20

    if detector.connected:
        score += 40
        if detector.response_time_ms < 1000:
            score += 10
        elif detector.response_time_ms < 3000:
            score += 5

    return min(100, score)


def system_info() -> SystemInfo:
    process = psutil.Process()
    return SystemInfo(
        python_version=platform.python_version(),
        platform=sys.platform,
        uptime_seconds=round(time.time() - process.create_time(), 3),
        memory_rss_bytes=process.memory_info().rss,
        timestamp=datetime.now(timezone.utc)
    )


def endpoint_map() -> Dict[str, str]:
    prefix = settings.API_V1_STR
    return {
        "inference": f"{prefix}/infer",
        "batch": f"{prefix}/detections/batch",
        "history": f"{prefix}/detections/history",
        "statistics": f"{prefix}/detections/statistics",
        "export": f"{prefix}/detections/export",
        "validation": f"{prefix}/detections/validate",
        "health": f"{prefix}/health",
    }


async def check_health(detector: Optional[Detector]) -> HealthResponse:
    """
    Check configuration and detector connectivity.

    Args:
        detector: Detector to probe, or None when credentials are missing
    """
    environment = EnvironmentStatus(
        api_key=bool(settings.ROBOFLOW_API_KEY),
        model_id=bool(settings.ROBOFLOW_MODEL_ID),
        version=settings.ROBOFLOW_MODEL_VERSION
    )

    if detector is None:
        detector_status = DetectorStatus(error="Missing API key or model ID")
    else:
        detector_status = await detector.check_connectivity()

    healthy = detector_status.connected and environment.api_key and environment.model_id
    if not healthy:
        logger.warning(f"Health check degraded: {detector_status.error or 'missing configuration'}")

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        score=calculate_health_score(environment, detector_status),
        version=settings.API_VERSION,
        timestamp=datetime.now(timezone.utc),
        environment=environment,
        roboflow=detector_status,
        system=system_info(),
        endpoints=endpoint_map()
    )
