"""Maintenance API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request

from datacollections.api.middleware.rate_limit import limit_for, limiter
from datacollections.exceptions import MaintenanceError
from datacollections.models.errors import ErrorResponse
from datacollections.models.maintenance import (
    ConsolidationResponse,
    FailedRecordModel,
    MaintenanceHistoryEntry,
    MaintenanceStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@router.post(
    "/consolidate",
    response_model=ConsolidationResponse,
    responses={409: {"model": ErrorResponse}},
)
@limiter.limit(limit_for("consolidate"))
async def run_consolidation(request: Request):
    """Merge duplicate records sharing category, branch, supplier and article."""
    maintenance = request.app.state.maintenance_service

    if maintenance.is_running():
        raise HTTPException(status_code=409, detail="Maintenance task already running")

    try:
        result = await maintenance.run_consolidation()
    except MaintenanceError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    return ConsolidationResponse(
        status=result.status,
        original_count=result.original_count,
        consolidated_count=result.consolidated_count,
        duplicates_removed=result.duplicates_removed,
        inserted_count=result.inserted_count,
        space_saved_percent=result.space_saved_percent,
        failed_records=[
            FailedRecordModel(index=failed.index, error=failed.error)
            for failed in result.failed_records
        ],
        started_at=result.started_at,
        finished_at=result.finished_at,
    )


@router.get("/status", response_model=MaintenanceStatusResponse)
async def get_maintenance_status(request: Request):
    progress = request.app.state.maintenance_progress.load()
    maintenance = request.app.state.maintenance_service
    return MaintenanceStatusResponse(
        is_running=maintenance.is_running(),
        **progress.model_dump(),
    )


@router.get("/history", response_model=list[MaintenanceHistoryEntry])
async def get_maintenance_history(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
):
    return await request.app.state.maintenance_service.history(limit)
