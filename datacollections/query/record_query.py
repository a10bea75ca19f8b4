"""Filtered, paginated record views and measure totals for the dashboard."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from datacollections.models.records import (
    FilterOptions,
    MeasureTotals,
    Pagination,
    RecordFilters,
    RecordPage,
)
from datacollections.records.fields import (
    BRANCH_FIELD,
    CATEGORY_FIELD,
    FILTER_FIELDS,
    MEASURE_FIELDS,
    SUPPLIER_FIELD,
    measure_values,
)
from datacollections.store.record_store import RecordStore

logger = logging.getLogger(__name__)


def matches(record: Mapping[str, Any], filters: Optional[RecordFilters]) -> bool:
    """True when the record passes every restricted field's allow-list."""
    if filters is None:
        return True
    return all(
        record.get(field_name) in allowed
        for field_name, allowed in filters.restrictions().items()
    )


def build_pagination(page: int, page_size: int, total: int) -> Pagination:
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    total_pages = math.ceil(total / page_size) if total else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        page_size=page_size,
        total_records=total,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def sum_measures(records: Iterable[Mapping[str, Any]]) -> MeasureTotals:
    sums = dict.fromkeys(MEASURE_FIELDS, 0.0)
    for record in records:
        for measure, value in measure_values(record).items():
            sums[measure] += value
    return MeasureTotals.from_sums(sums)


class RecordQueryService:
    """Serve dashboard pages, totals and filter options from the store.

    Pages and totals take the same ``RecordFilters`` and hand them to the
    store unchanged, so both always describe the same record set.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def query_page(
        self, filters: Optional[RecordFilters], page: int = 1, page_size: int = 100
    ) -> RecordPage:
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be >= 1")
        total, records = await self.store.find_page(
            filters or RecordFilters(), skip=(page - 1) * page_size, limit=page_size
        )
        pagination = build_pagination(page, page_size, total)
        logger.debug(
            "Page %d/%d: %d of %d matching records",
            page, pagination.total_pages, len(records), total,
        )
        return RecordPage(records=records, pagination=pagination)

    async def query_totals(self, filters: Optional[RecordFilters]) -> MeasureTotals:
        return await self.store.totals(filters or RecordFilters())

    async def list_distinct_filter_values(self, field_name: str) -> list[Any]:
        """Sorted non-null values of one filterable field."""
        if field_name not in FILTER_FIELDS:
            raise ValueError(f"Field {field_name!r} is not filterable")
        values = await self.store.distinct(field_name)
        return sorted(values, key=str)

    async def filter_options(self) -> FilterOptions:
        return FilterOptions(
            categories=await self.list_distinct_filter_values(CATEGORY_FIELD),
            branches=await self.list_distinct_filter_values(BRANCH_FIELD),
            suppliers=await self.list_distinct_filter_values(SUPPLIER_FIELD),
        )
