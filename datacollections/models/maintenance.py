"""Pydantic models for maintenance and upload APIs."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class FailedRecordModel(BaseModel):
    """A record rejected by the store, by position in the submitted set."""

    index: int
    error: str


class UploadResponse(BaseModel):
    message: str
    records_count: int
    failed_count: int = 0
    failed_records: list[FailedRecordModel] = Field(default_factory=list)


class ConsolidationResponse(BaseModel):
    status: str
    original_count: int
    consolidated_count: int
    duplicates_removed: int
    inserted_count: int
    space_saved_percent: float
    failed_records: list[FailedRecordModel] = Field(default_factory=list)
    started_at: datetime
    finished_at: datetime


class MaintenanceStatusResponse(BaseModel):
    is_running: bool
    status: str
    operation: str
    phase: str
    message: str
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    progress: dict = Field(default_factory=dict)
    error: Optional[str] = None


class MaintenanceHistoryEntry(BaseModel):
    operation: str
    started_at: str
    finished_at: str
    status: str
    original_count: int
    result_count: int
    failed_count: int
    error_message: Optional[str] = None
