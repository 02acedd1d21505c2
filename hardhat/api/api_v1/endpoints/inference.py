"""
Single-image inference endpoint.
"""
from fastapi import APIRouter, Depends, File, UploadFile, status

from hardhat.core.logging import logger
from hardhat.models.schemas.inference import InferenceResponse
from hardhat.services.detector import Detector, get_detector


router = APIRouter()


@router.post(
    "",
    response_model=InferenceResponse,
    status_code=status.HTTP_200_OK,
    summary="Run Inference",
    description="Forward one image to the hosted detector and return its predictions."
)
async def infer(
    file: UploadFile = File(..., description="Image to analyse"),
    detector: Detector = Depends(get_detector)
):
    """
    Run helmet/vest detection on an uploaded image.

    - **Returns** bounding boxes in source image pixel space
    - **502** when the detector rejects the request, **504** on timeout
    """
    content = await file.read()
    logger.info(f"File received: {file.filename} {file.content_type} {len(content)} bytes")
    return await detector.infer(
        content,
        filename=file.filename,
        content_type=file.content_type
    )
