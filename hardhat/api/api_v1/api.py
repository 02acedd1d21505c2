"""
Main API router that includes all endpoint groups.
"""
from fastapi import APIRouter

from hardhat.api.api_v1.endpoints import (
    batch,
    export,
    health,
    history,
    inference,
    statistics,
    validation
)

# Create the main API router
api_router = APIRouter()

# Include all endpoint groups
api_router.include_router(
    inference.router,
    prefix="/infer",
    tags=["Inference"]
)

api_router.include_router(
    batch.router,
    prefix="/detections/batch",
    tags=["Inference"]
)

api_router.include_router(
    history.router,
    prefix="/detections/history",
    tags=["Detections"]
)

api_router.include_router(
    statistics.router,
    prefix="/detections/statistics",
    tags=["Statistics"]
)

api_router.include_router(
    export.router,
    prefix="/detections/export",
    tags=["Detections"]
)

api_router.include_router(
    validation.router,
    prefix="/detections/validate",
    tags=["Validation"]
)

api_router.include_router(
    health.router,
    prefix="/health",
    tags=["Health"]
)
