"""DataCollections: sales record ingestion, consolidation and dashboard queries."""

__version__ = "2.0.0"
