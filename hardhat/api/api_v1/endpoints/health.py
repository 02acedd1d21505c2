"""
Health check API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, status

from hardhat.models.schemas.common import HealthResponse
from hardhat.services.detector import Detector, get_optional_detector
from hardhat.services.health import check_health


router = APIRouter()


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health Check",
    description="Check configuration, detector connectivity and process stats."
)
async def health_check(detector: Optional[Detector] = Depends(get_optional_detector)):
    """
    Check the health and status of the service.

    - **Checks detector credentials and connectivity**
    - **Reports a 0-100 score**
    - **Includes process uptime and memory**
    """
    return await check_health(detector)
