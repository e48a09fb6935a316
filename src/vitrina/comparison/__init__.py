"""
Comparación lado a lado de dos propiedades.
"""

from vitrina.comparison.diff import (
    COMPARED_FIELDS,
    PLACEHOLDER,
    CompareField,
    DiffRow,
    compute_diff,
    display_value,
)
from vitrina.comparison.view import (
    COMPARE_SLOTS,
    CompareMode,
    ComparisonResult,
    ComparisonStatus,
    ComparisonView,
    compare_url,
    parse_ids,
    require_pair,
)

__all__ = [
    "COMPARED_FIELDS",
    "PLACEHOLDER",
    "CompareField",
    "DiffRow",
    "compute_diff",
    "display_value",
    "COMPARE_SLOTS",
    "CompareMode",
    "ComparisonResult",
    "ComparisonStatus",
    "ComparisonView",
    "compare_url",
    "parse_ids",
    "require_pair",
]
