"""Dashboard query handlers."""
from datacollections.query.record_query import (
    RecordQueryService,
    build_pagination,
    matches,
    sum_measures,
)

__all__ = ["RecordQueryService", "build_pagination", "matches", "sum_measures"]
