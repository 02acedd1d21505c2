"""
Single-image and batch inference orchestration.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from hardhat.core.logging import logger
from hardhat.models.schemas.inference import (
    BatchItemResult,
    BatchResponse,
    BatchSummary,
    InferenceResponse,
)
from hardhat.services.detector import Detector
from hardhat.services.fanout import run_all


@dataclass
class ImageUpload:
    """An uploaded image read into memory."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


async def run_batch(
    detector: Detector,
    uploads: Sequence[ImageUpload],
    max_concurrency: Optional[int] = None
) -> BatchResponse:
    """
    Run inference on every upload; failures are reported per file.

    The response always lists files in upload order.
    """
    logger.info(f"Processing batch of {len(uploads)} files")

    async def infer_one(index: int, upload: ImageUpload) -> InferenceResponse:
        return await detector.infer(
            upload.content,
            filename=upload.filename or f"upload_{index}.jpg",
            content_type=upload.content_type
        )

    outcomes = await run_all(uploads, infer_one, max_concurrency=max_concurrency)

    results: List[BatchItemResult] = []
    for outcome, upload in zip(outcomes, uploads):
        if outcome.success:
            results.append(BatchItemResult(
                filename=upload.filename,
                success=True,
                data=outcome.value,
                detections=len(outcome.value.predictions)
            ))
        else:
            results.append(BatchItemResult(
                filename=upload.filename,
                success=False,
                error=outcome.error_message
            ))

    successful = sum(1 for result in results if result.success)
    summary = BatchSummary(
        total_files=len(uploads),
        successful=successful,
        failed=len(uploads) - successful,
        total_detections=sum(result.detections for result in results if result.success)
    )
    if summary.failed:
        logger.warning(f"Batch finished with {summary.failed} of {summary.total_files} files failed")
    return BatchResponse(summary=summary, results=results)
