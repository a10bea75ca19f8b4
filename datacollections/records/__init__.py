"""Record field definitions and accessors."""
from datacollections.records.fields import (
    FILTER_FIELDS,
    KEY_FIELDS,
    LIFECYCLE_FIELDS,
    MEASURE_FIELDS,
    coerce_number,
    measure_values,
    record_key,
    strip_lifecycle,
)

__all__ = [
    "FILTER_FIELDS",
    "KEY_FIELDS",
    "LIFECYCLE_FIELDS",
    "MEASURE_FIELDS",
    "coerce_number",
    "measure_values",
    "record_key",
    "strip_lifecycle",
]
