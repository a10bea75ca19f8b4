"""Custom exceptions for DataCollections."""


class DataCollectionsError(Exception):
    """Base exception for all DataCollections errors."""


class ConfigError(DataCollectionsError):
    """Configuration-related errors."""


class DatabaseError(DataCollectionsError):
    """Record store operation errors."""


class StoreConnectionError(DatabaseError):
    """Connection to the record store failed or was never opened."""


class IngestError(DataCollectionsError):
    """Uploaded data could not be parsed into records."""


class UnsupportedFileError(IngestError):
    """Uploaded file is neither CSV nor a spreadsheet."""


class EmptyUploadError(IngestError):
    """Uploaded file parsed to zero records."""


class MaintenanceError(DataCollectionsError):
    """Consolidation, import or clear run errors."""
