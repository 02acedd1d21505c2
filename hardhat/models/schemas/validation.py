"""
Schemas for model validation runs.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from hardhat.models.schemas.detection import Detection, ExpectedDetection


class ValidationCase(BaseModel):
    """One labelled test image."""
    image_url: Optional[str] = None
    expected_detections: List[ExpectedDetection] = []


class ValidationRequest(BaseModel):
    """Schema for a validation run."""
    test_images: List[ValidationCase]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "test_images": [
                    {
                        "image_url": "https://example.com/samples/gate-1.jpg",
                        "expected_detections": [{"class": "helmet"}, {"class": "vest"}]
                    }
                ]
            }
        }
    )


class MetricScores(BaseModel):
    """The four headline scores, each rounded to 3 decimals."""
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0


class ValidationMetrics(MetricScores):
    """Scores for one test case plus the underlying counts."""
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0


class Recommendation(BaseModel):
    type: str
    message: str
    severity: str


class ValidationCaseResult(BaseModel):
    """Outcome of one test case. Failed cases carry an error and no metrics."""
    test_case_index: int
    image_url: Optional[str] = None
    success: bool
    predictions: Optional[List[Detection]] = None
    expected_detections: Optional[List[ExpectedDetection]] = None
    validation: Optional[ValidationMetrics] = None
    error: Optional[str] = None


class ValidationSummary(BaseModel):
    total_tests: int
    successful_tests: int
    failed_tests: int
    overall_accuracy: float
    overall_precision: float
    overall_recall: float
    overall_f1_score: float


class ValidationReport(BaseModel):
    summary: ValidationSummary
    results: List[ValidationCaseResult]
    recommendations: List[Recommendation]
