"""
Schemas for single and batch inference.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hardhat.models.schemas.detection import Detection


class InferenceResponse(BaseModel):
    """Detector output for one image."""
    time: float = 0.0
    predictions: List[Detection] = Field(default_factory=list)

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "time": 42,
                "predictions": [
                    {"class": "helmet", "confidence": 0.91, "x": 320, "y": 220, "width": 180, "height": 160}
                ]
            }
        }
    )


class BatchItemResult(BaseModel):
    """Outcome of one image in a batch."""
    filename: str
    success: bool
    data: Optional[InferenceResponse] = None
    error: Optional[str] = None
    detections: int = 0


class BatchSummary(BaseModel):
    total_files: int
    successful: int
    failed: int
    total_detections: int


class BatchResponse(BaseModel):
    summary: BatchSummary
    results: List[BatchItemResult]
