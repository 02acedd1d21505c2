"""
Schemas for detection records and their compliance summaries.
"""
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from hardhat.models.schemas.common import Pagination


class ExpectedDetection(BaseModel):
    """A class label, optionally with extra reviewer-supplied fields."""
    class_name: str = Field(..., alias="class")

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class Detection(ExpectedDetection):
    """One bounding-box prediction in source image pixel space."""
    confidence: float
    x: float
    y: float
    width: float
    height: float

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        frozen=True,
        json_schema_extra={
            "example": {
                "class": "helmet",
                "confidence": 0.91,
                "x": 320,
                "y": 220,
                "width": 180,
                "height": 160
            }
        }
    )


class ComplianceSummary(BaseModel):
    """Per-record class counts, computed once at insertion."""
    total_detections: int = 0
    helmet_count: int = 0
    vest_count: int = 0
    no_helmet_count: int = 0
    no_vest_count: int = 0

    model_config = ConfigDict(frozen=True)


class DetectionCreate(BaseModel):
    """Schema for ingesting a new detection record."""
    filename: str = Field(..., min_length=1)
    site: Optional[str] = None
    supervisor: Optional[str] = None
    detections: List[Detection]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filename": "site-a-gate.jpg",
                "site": "Site A",
                "supervisor": "J. Doe",
                "detections": [
                    {"class": "helmet", "confidence": 0.91, "x": 320, "y": 220, "width": 180, "height": 160},
                    {"class": "no-vest", "confidence": 0.77, "x": 315, "y": 360, "width": 220, "height": 240}
                ]
            }
        }
    )


class DetectionRecord(BaseModel):
    """A stored detection event. Never mutated after creation."""
    id: str
    timestamp: datetime
    filename: str
    site: Optional[str] = None
    supervisor: Optional[str] = None
    detections: List[Detection]
    summary: ComplianceSummary

    model_config = ConfigDict(frozen=True)


class DetectionCreated(BaseModel):
    success: bool = True
    id: str
    data: DetectionRecord


class DetectionHistoryPage(BaseModel):
    """A page of history records, newest first."""
    data: List[DetectionRecord]
    pagination: Pagination
