"""
Detection history export endpoint.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from hardhat.core.logging import logger
from hardhat.services.export import render_export
from hardhat.services.query import RecordFilter, sort_newest_first
from hardhat.services.store import DetectionStore, get_store


router = APIRouter()


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    summary="Export Detections",
    description="Download detection history as JSON, CSV or a simplified table."
)
async def export_detections(
    format: str = Query("json", description="Export format: json, csv or xlsx"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    site: Optional[str] = None,
    supervisor: Optional[str] = None,
    store: DetectionStore = Depends(get_store)
):
    record_filter = RecordFilter(
        start_date=start_date,
        end_date=end_date,
        site=site,
        supervisor=supervisor
    )
    records = sort_newest_first(record_filter.apply(store.list()))
    export = render_export(records, format)

    logger.info(f"Exporting {len(records)} records as {export.filename}")
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
