"""Whole-table maintenance runs."""
from datacollections.maintenance.progress import MaintenanceProgress
from datacollections.maintenance.service import (
    ConsolidationResult,
    ImportResult,
    MaintenanceService,
)

__all__ = ["ConsolidationResult", "ImportResult", "MaintenanceProgress", "MaintenanceService"]
