"""Dashboard record endpoints: filter options, pages, totals and clear."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from datacollections.api.middleware.rate_limit import limit_for, limiter
from datacollections.exceptions import MaintenanceError
from datacollections.models.errors import ErrorResponse
from datacollections.models.records import RecordFilters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["records"])

# Keeps the OFFSET handed to SQLite inside a 64-bit integer
MAX_PAGE = 1_000_000


def _parse_filter_list(name: str, raw: Optional[str]) -> list:
    """Decode one JSON-array filter parameter (``?branches=["B1","B2"]``)."""
    if not raw:
        return []
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=422, detail=f"{name} must be a JSON array") from exc
    if not isinstance(values, list):
        raise HTTPException(status_code=422, detail=f"{name} must be a JSON array")
    return values


def get_record_filters(
    categories: Optional[str] = Query(None, description="JSON array of CategoryShortName values"),
    branches: Optional[str] = Query(None, description="JSON array of branch values"),
    suppliers: Optional[str] = Query(None, description="JSON array of SupplierAlias values"),
) -> RecordFilters:
    try:
        return RecordFilters(
            categories=_parse_filter_list("categories", categories),
            branches=_parse_filter_list("branches", branches),
            suppliers=_parse_filter_list("suppliers", suppliers),
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422, detail="Filter values must be strings or numbers"
        ) from exc


@router.get("/filters")
async def get_filters(request: Request):
    query_service = request.app.state.query_service
    options = await query_service.filter_options()
    return {"success": True, "filters": options.model_dump()}


@router.get("/data")
@limiter.limit(limit_for("read"))
async def get_data(
    request: Request,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: Optional[int] = Query(None, ge=1),
    filters: RecordFilters = Depends(get_record_filters),
):
    query_config = request.app.state.config.settings.query
    page_size = min(limit or query_config.default_page_size, query_config.max_page_size)

    result = await request.app.state.query_service.query_page(filters, page, page_size)
    return {
        "success": True,
        "data": result.records,
        "pagination": result.pagination.model_dump(by_alias=True),
    }


@router.get("/totals")
@limiter.limit(limit_for("read"))
async def get_totals(
    request: Request,
    filters: RecordFilters = Depends(get_record_filters),
):
    totals = await request.app.state.query_service.query_totals(filters)
    return {"success": True, "totals": totals.model_dump(by_alias=True)}


@router.delete("/data", responses={409: {"model": ErrorResponse}})
@limiter.limit(limit_for("clear"))
async def clear_data(request: Request):
    maintenance = request.app.state.maintenance_service
    try:
        deleted = await maintenance.clear()
    except MaintenanceError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    logger.info("All data cleared (%d records)", deleted)
    return {"message": "All data cleared successfully", "deleted_count": deleted}
