"""Upload parsing into loose records."""
from datacollections.ingest.readers import read_csv, read_excel, read_path, read_upload

__all__ = ["read_csv", "read_excel", "read_path", "read_upload"]
