"""Value and snapshot models for memfire.

This module exports the value kinds, sentinels and snapshot types.
"""

from memfire.models.field_value import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    FieldValue,
    FieldValueKind,
)
from memfire.models.snapshot import DocumentSnapshot
from memfire.models.values import (
    INT64_MAX,
    INT64_MIN,
    GeoPoint,
    Reference,
    Timestamp,
    clone_value,
    compare_values,
    values_equal,
)

__all__ = [
    "DELETE_FIELD",
    "INT64_MAX",
    "INT64_MIN",
    "SERVER_TIMESTAMP",
    "DocumentSnapshot",
    "FieldValue",
    "FieldValueKind",
    "GeoPoint",
    "Reference",
    "Timestamp",
    "clone_value",
    "compare_values",
    "values_equal",
]
