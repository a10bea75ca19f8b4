"""Maintenance progress tracking utilities."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class MaintenanceProgressData(BaseModel):
    status: str = "idle"
    operation: str = ""
    phase: str = ""
    message: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    progress: dict = Field(default_factory=dict)
    error: Optional[str] = None


class MaintenanceProgress:
    """Persist maintenance run progress to disk for API consumption."""

    def __init__(self, status_file: Path):
        self.status_file = status_file
        self._data = MaintenanceProgressData()

    @property
    def current(self) -> MaintenanceProgressData:
        return self._data

    def start(self, operation: str) -> None:
        self._data = MaintenanceProgressData(
            status="running",
            operation=operation,
            phase="init",
            message=f"Starting {operation}...",
            started_at=datetime.now(timezone.utc),
        )
        self._save()

    def update(self, phase: str, message: str, **progress) -> None:
        self._data.phase = phase
        self._data.message = message
        self._data.progress.update(progress)
        self._save()

    def finish_success(self, message: str, status: str = "success") -> None:
        self._data.status = status
        self._data.phase = "complete"
        self._data.finished_at = datetime.now(timezone.utc)
        self._data.message = message
        self._save()

    def finish_error(self, error: str) -> None:
        self._data.status = "error"
        self._data.finished_at = datetime.now(timezone.utc)
        self._data.error = error
        self._save()

    def _save(self) -> None:
        self.status_file.parent.mkdir(parents=True, exist_ok=True)
        with self.status_file.open("w", encoding="utf-8") as handle:
            json.dump(self._data.model_dump(mode="json"), handle, indent=2, default=str)

    def load(self) -> MaintenanceProgressData:
        if self.status_file.exists():
            with self.status_file.open("r", encoding="utf-8") as handle:
                return MaintenanceProgressData(**json.load(handle))
        return MaintenanceProgressData()
