"""Merge records that share a composite business key.

Duplicates are rows with equal ``(CategoryShortName, branch, SupplierAlias,
ArticleNo)``. Each group collapses into one record whose four measures are
the group sums; every other field comes from the first member seen.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from datacollections.records.fields import (
    MEASURE_FIELDS,
    RecordKey,
    measure_values,
    record_key,
    strip_lifecycle,
)

logger = logging.getLogger(__name__)


@dataclass
class ConsolidationPlan:
    """Outcome of grouping a record set, before it is written back."""

    records: list[dict[str, Any]] = field(default_factory=list)
    original_count: int = 0
    duplicates_removed: int = 0
    group_count: int = 0

    @property
    def consolidated_count(self) -> int:
        return len(self.records)

    @property
    def is_noop(self) -> bool:
        """Nothing to write: empty input or no key occurs twice."""
        return self.original_count == 0 or self.duplicates_removed == 0

    @property
    def space_saved_percent(self) -> float:
        if not self.original_count:
            return 0.0
        return round(self.duplicates_removed / self.original_count * 100, 2)


def group_by_key(records: Iterable[Mapping[str, Any]]) -> dict[RecordKey, list[Mapping[str, Any]]]:
    """Group records by composite key, keeping first-seen and member order."""
    groups: dict[RecordKey, list[Mapping[str, Any]]] = {}
    for record in records:
        groups.setdefault(record_key(record), []).append(record)
    return groups


def merge_group(records: list[Mapping[str, Any]]) -> dict[str, Any]:
    """Collapse one key group into a single new record."""
    if not records:
        raise ValueError("Cannot merge an empty group")

    merged = strip_lifecycle(records[0])
    if len(records) == 1:
        return merged

    sums = dict.fromkeys(MEASURE_FIELDS, 0.0)
    for record in records:
        for measure, value in measure_values(record).items():
            sums[measure] += value
    merged.update(sums)
    return merged


def consolidate(records: Iterable[Mapping[str, Any]]) -> ConsolidationPlan:
    """Build the deduplicated record set for ``records``."""
    records = list(records)
    plan = ConsolidationPlan(original_count=len(records))
    if not records:
        return plan

    groups = group_by_key(records)
    plan.group_count = len(groups)
    logger.info("Found %d unique combinations in %d records", len(groups), len(records))

    for members in groups.values():
        if len(members) > 1:
            plan.duplicates_removed += len(members) - 1
        plan.records.append(merge_group(members))

    return plan
