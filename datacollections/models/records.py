"""Pydantic models for record queries."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from datacollections.records.fields import (
    BRANCH_FIELD,
    CATEGORY_FIELD,
    MEASURE_FIELDS,
    SUPPLIER_FIELD,
)

FilterValue = Union[str, int, float]


class RecordFilters(BaseModel):
    """Allow-lists per filterable field; an empty list means no restriction."""

    categories: list[FilterValue] = Field(default_factory=list)
    branches: list[FilterValue] = Field(default_factory=list)
    suppliers: list[FilterValue] = Field(default_factory=list)

    def restrictions(self) -> dict[str, list[FilterValue]]:
        """Record field -> allowed values, for restricted fields only."""
        allowed = {
            CATEGORY_FIELD: self.categories,
            BRANCH_FIELD: self.branches,
            SUPPLIER_FIELD: self.suppliers,
        }
        return {name: values for name, values in allowed.items() if values}


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    page_size: int = Field(alias="pageSize")
    total_records: int = Field(alias="totalRecords")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")


class RecordPage(BaseModel):
    records: list[dict[str, Any]]
    pagination: Pagination


class MeasureTotals(BaseModel):
    """Sums of the four measures over a filtered record set."""

    model_config = ConfigDict(populate_by_name=True)

    net_sls_qty: float = Field(0.0, alias="totalNetSlsQty")
    net_amount: float = Field(0.0, alias="totalNetAmount")
    net_sls_cost_value: float = Field(0.0, alias="totalNetSlsCostValue")
    sls_ext_cost_value: float = Field(0.0, alias="totalSlsExtCostValue")

    @classmethod
    def from_sums(cls, sums: dict[str, float]) -> "MeasureTotals":
        """Build from a ``measure field -> sum`` mapping."""
        return cls(**{f"total{measure}": sums.get(measure) or 0.0 for measure in MEASURE_FIELDS})

    def by_measure(self) -> dict[str, float]:
        return {
            measure: value
            for measure, value in zip(
                MEASURE_FIELDS,
                (self.net_sls_qty, self.net_amount, self.net_sls_cost_value, self.sls_ext_cost_value),
            )
        }


class FilterOptions(BaseModel):
    categories: list[Any] = Field(default_factory=list)
    branches: list[Any] = Field(default_factory=list)
    suppliers: list[Any] = Field(default_factory=list)
