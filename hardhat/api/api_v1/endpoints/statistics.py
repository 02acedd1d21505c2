"""
Compliance statistics endpoint.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hardhat.core.config import settings
from hardhat.models.schemas.statistics import ComplianceStatistics
from hardhat.services.aggregation import build_statistics
from hardhat.services.store import DetectionStore, get_store


router = APIRouter()


@router.get(
    "",
    response_model=ComplianceStatistics,
    status_code=status.HTTP_200_OK,
    summary="Compliance Statistics",
    description="Totals, compliance rates, daily trends and site rollups for a period."
)
async def get_statistics(
    period: str = Query(settings.DEFAULT_PERIOD, description="1d, 7d, 30d, 90d or all"),
    site: Optional[str] = Query(None, description="Case-insensitive site substring"),
    supervisor: Optional[str] = Query(None, description="Case-insensitive supervisor substring"),
    store: DetectionStore = Depends(get_store)
):
    """
    Get aggregated compliance statistics.

    - **helmet/vest compliance**: positives / (positives + negatives) * 100
    - **daily_trends**: one bucket per UTC day, oldest first
    - **site_statistics**: top 10 sites by scan count
    """
    return build_statistics(store.list(), period=period, site=site, supervisor=supervisor)
