"""
Schemas for compliance statistics.
"""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from hardhat.models.schemas.common import DateRange


class StatisticsSummary(BaseModel):
    """Totals and compliance rates across the filtered records."""
    total_scans: int
    total_detections: int
    total_helmets: int
    total_vests: int
    total_no_helmets: int
    total_no_vests: int
    helmet_compliance_rate: float
    vest_compliance_rate: float


class DailyTrend(BaseModel):
    """Counts for one UTC calendar day."""
    date: str
    scans: int = 0
    detections: int = 0
    helmets: int = 0
    vests: int = 0
    no_helmets: int = 0
    no_vests: int = 0


class SiteStatistics(BaseModel):
    """Rollup of one site's records."""
    site: str
    scans: int
    total_detections: int
    helmet_compliance: float
    vest_compliance: float


class TopDetection(BaseModel):
    id: str
    filename: str
    timestamp: datetime
    detections: int
    site: Optional[str] = None


class TopDetections(BaseModel):
    most_detections: List[TopDetection]


class ComplianceStatistics(BaseModel):
    """Full statistics payload for a period."""
    period: str
    date_range: DateRange
    summary: StatisticsSummary
    daily_trends: List[DailyTrend]
    site_statistics: List[SiteStatistics]
    top_detections: TopDetections

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "period": "7d",
                "date_range": {"start": "2025-04-29T01:08:25Z", "end": "2025-05-06T01:08:25Z"},
                "summary": {
                    "total_scans": 12,
                    "total_detections": 48,
                    "total_helmets": 20,
                    "total_vests": 18,
                    "total_no_helmets": 4,
                    "total_no_vests": 6,
                    "helmet_compliance_rate": 83.33,
                    "vest_compliance_rate": 75.0
                },
                "daily_trends": [
                    {"date": "2025-05-05", "scans": 7, "detections": 30, "helmets": 12,
                     "vests": 11, "no_helmets": 3, "no_vests": 4}
                ],
                "site_statistics": [
                    {"site": "Site A", "scans": 8, "total_detections": 33,
                     "helmet_compliance": 85.71, "vest_compliance": 78.57}
                ],
                "top_detections": {"most_detections": []}
            }
        }
    )
