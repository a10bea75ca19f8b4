"""Persistent record store."""
from datacollections.store.record_store import FailedRecord, InsertReport, RecordStore

__all__ = ["FailedRecord", "InsertReport", "RecordStore"]
