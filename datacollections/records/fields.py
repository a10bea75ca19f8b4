"""Known record fields and the accessors shared by consolidation and queries.

Records are loose ``dict`` documents. Only the fields declared here are
interpreted; everything else travels through untouched.
"""

from __future__ import annotations

import json
import math
from collections.abc import Hashable, Mapping
from typing import Any

CATEGORY_FIELD = "CategoryShortName"
BRANCH_FIELD = "branch"
SUPPLIER_FIELD = "SupplierAlias"
ARTICLE_FIELD = "ArticleNo"

# Composite business key, in key order
KEY_FIELDS = (CATEGORY_FIELD, BRANCH_FIELD, SUPPLIER_FIELD, ARTICLE_FIELD)

# Fields the dashboard can filter on
FILTER_FIELDS = (CATEGORY_FIELD, BRANCH_FIELD, SUPPLIER_FIELD)

MEASURE_FIELDS = ("NetSlsQty", "NetAmount", "NetSlsCostValue", "SlsExtCostValue")

# Assigned by the store; never carried over into a consolidated record
ID_FIELD = "_id"
VERSION_FIELD = "_version"
CREATED_AT_FIELD = "created_at"
UPDATED_AT_FIELD = "updated_at"
LIFECYCLE_FIELDS = frozenset({ID_FIELD, VERSION_FIELD, CREATED_AT_FIELD, UPDATED_AT_FIELD})

RecordKey = tuple


def coerce_number(value: Any) -> float:
    """Interpret a measure value as a float, falling back to 0.

    Missing, empty and unparseable values contribute nothing. Booleans are
    not numbers here, and NaN or infinite results count as unparseable.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0

    if not math.isfinite(number):
        return 0.0
    return number


def key_component(value: Any) -> Hashable:
    """Normalise one key value so equal values always hash together.

    ``None`` stays ``None`` and is therefore distinct from ``""``.
    """
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, Hashable):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def record_key(record: Mapping[str, Any]) -> RecordKey:
    """Composite key ``(category, branch, supplier, article)``; absent -> None."""
    return tuple(key_component(record.get(field)) for field in KEY_FIELDS)


def measure_values(record: Mapping[str, Any]) -> dict[str, float]:
    return {field: coerce_number(record.get(field)) for field in MEASURE_FIELDS}


def strip_lifecycle(record: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow copy without the store-owned identity and timestamp fields."""
    return {name: value for name, value in record.items() if name not in LIFECYCLE_FIELDS}
