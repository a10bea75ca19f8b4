"""Router module exports."""
from datacollections.api.routers import maintenance, records, upload

__all__ = ["maintenance", "records", "upload"]
