"""Duplicate record consolidation."""
from datacollections.consolidation.consolidator import (
    ConsolidationPlan,
    consolidate,
    group_by_key,
    merge_group,
)

__all__ = ["ConsolidationPlan", "consolidate", "group_by_key", "merge_group"]
