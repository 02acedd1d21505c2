"""
Detection history endpoints.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hardhat.core.exceptions import NotFoundError
from hardhat.models.schemas.common import ResponseStatus
from hardhat.models.schemas.detection import (
    DetectionCreate,
    DetectionCreated,
    DetectionHistoryPage,
    DetectionRecord,
)
from hardhat.services.query import RecordFilter, query_history
from hardhat.services.store import DetectionStore, get_store


router = APIRouter()


@router.post(
    "",
    response_model=DetectionCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Record Detection",
    description="Store the detections found in one image."
)
async def create_detection(
    detection_in: DetectionCreate,
    store: DetectionStore = Depends(get_store)
):
    """
    Store a detection record.

    The compliance summary is computed here, once; records are never
    updated afterwards.
    """
    record = store.insert(detection_in)
    return DetectionCreated(id=record.id, data=record)


@router.get(
    "",
    response_model=DetectionHistoryPage,
    status_code=status.HTTP_200_OK,
    summary="List Detections",
    description="Get a page of detection records, newest first, with optional filters."
)
async def list_detections(
    limit: Optional[int] = Query(None, description="Page size (default 50)"),
    offset: int = Query(0, description="Records to skip"),
    site: Optional[str] = Query(None, description="Case-insensitive site substring"),
    supervisor: Optional[str] = Query(None, description="Case-insensitive supervisor substring"),
    start_date: Optional[datetime] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[datetime] = Query(None, description="Inclusive upper bound"),
    store: DetectionStore = Depends(get_store)
):
    record_filter = RecordFilter(
        start_date=start_date,
        end_date=end_date,
        site=site,
        supervisor=supervisor
    )
    page = query_history(store.list(), record_filter, limit=limit, offset=offset)
    return DetectionHistoryPage(data=page.items, pagination=page.pagination)


@router.get(
    "/{detection_id}",
    response_model=DetectionRecord,
    status_code=status.HTTP_200_OK,
    summary="Get Detection"
)
async def get_detection(
    detection_id: str,
    store: DetectionStore = Depends(get_store)
):
    record = store.get(detection_id)
    if record is None:
        raise NotFoundError("Detection not found")
    return record


@router.delete(
    "/{detection_id}",
    response_model=ResponseStatus,
    status_code=status.HTTP_200_OK,
    summary="Delete Detection"
)
async def delete_detection(
    detection_id: str,
    store: DetectionStore = Depends(get_store)
):
    if not store.delete(detection_id):
        raise NotFoundError("Detection not found")
    return ResponseStatus(success=True, message="Detection deleted successfully")
