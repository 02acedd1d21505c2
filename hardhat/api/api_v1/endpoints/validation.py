"""
Model validation endpoint.
"""
from fastapi import APIRouter, Depends, status

from hardhat.models.schemas.validation import ValidationReport, ValidationRequest
from hardhat.services.detector import Detector, get_detector
from hardhat.services.validation import run_validation


router = APIRouter()


@router.post(
    "",
    response_model=ValidationReport,
    status_code=status.HTTP_200_OK,
    summary="Validate Model",
    description="Score detector output against labelled test images."
)
async def validate_model(
    request: ValidationRequest,
    detector: Detector = Depends(get_detector)
):
    """
    Run the detector on each test image and compare with the expected labels.

    Metrics are count based per class (helmet, vest, no-helmet, no-vest);
    boxes are not matched by position.
    """
    return await run_validation(detector, request.test_images)
