"""
Batch inference endpoint.
"""
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status

from hardhat.core.config import settings
from hardhat.core.exceptions import ValidationError
from hardhat.models.schemas.inference import BatchResponse
from hardhat.services.detector import Detector, get_detector
from hardhat.services.inference import ImageUpload, run_batch


router = APIRouter()


@router.post(
    "",
    response_model=BatchResponse,
    status_code=status.HTTP_200_OK,
    summary="Batch Inference",
    description="Run the detector on several images; failures are reported per file."
)
async def batch_infer(
    files: List[UploadFile] = File(..., description="Images to analyse"),
    detector: Detector = Depends(get_detector)
):
    """
    Process up to MAX_BATCH_FILES images concurrently.

    The request succeeds even when some files fail; check
    `summary.failed` and each result's `error`.
    """
    if not files:
        raise ValidationError("No files provided", fields=["files"])
    if len(files) > settings.MAX_BATCH_FILES:
        raise ValidationError(
            f"Maximum {settings.MAX_BATCH_FILES} files allowed per batch",
            fields=["files"]
        )

    uploads = []
    for index, upload in enumerate(files):
        uploads.append(ImageUpload(
            filename=upload.filename or f"upload_{index}.jpg",
            content=await upload.read(),
            content_type=upload.content_type
        ))

    return await run_batch(detector, uploads)
