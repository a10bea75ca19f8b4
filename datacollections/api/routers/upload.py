"""Upload endpoint: parse a CSV or spreadsheet and replace all records."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from datacollections.api.middleware.rate_limit import limit_for, limiter
from datacollections.exceptions import EmptyUploadError, IngestError, MaintenanceError
from datacollections.ingest.readers import read_upload
from datacollections.models.errors import ErrorResponse
from datacollections.models.maintenance import FailedRecordModel, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
@limiter.limit(limit_for("upload"))
async def upload_file(request: Request, file: Optional[UploadFile] = File(None)):
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    maintenance = request.app.state.maintenance_service
    if maintenance.is_running():
        raise HTTPException(status_code=409, detail="Maintenance task already running")

    data = await file.read()
    try:
        records = await asyncio.to_thread(read_upload, file.filename, file.content_type, data)
    except IngestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not records:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        result = await maintenance.replace_from_records(records, source=file.filename or "upload")
    except EmptyUploadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except MaintenanceError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    if result.failed_records:
        logger.warning(
            "Upload %s: %d records rejected", file.filename, len(result.failed_records)
        )

    return UploadResponse(
        message="File uploaded successfully and data replaced",
        records_count=result.inserted_count,
        failed_count=len(result.failed_records),
        failed_records=[
            FailedRecordModel(index=failed.index, error=failed.error)
            for failed in result.failed_records
        ],
    )
