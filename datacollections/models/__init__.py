"""Pydantic models for DataCollections."""

from datacollections.models.errors import ErrorResponse
from datacollections.models.maintenance import (
    ConsolidationResponse,
    FailedRecordModel,
    MaintenanceHistoryEntry,
    MaintenanceStatusResponse,
    UploadResponse,
)
from datacollections.models.records import (
    FilterOptions,
    MeasureTotals,
    Pagination,
    RecordFilters,
    RecordPage,
)

__all__ = [
    "ConsolidationResponse",
    "ErrorResponse",
    "FailedRecordModel",
    "FilterOptions",
    "MaintenanceHistoryEntry",
    "MaintenanceStatusResponse",
    "MeasureTotals",
    "Pagination",
    "RecordFilters",
    "RecordPage",
    "UploadResponse",
]
