"""Report field registry and aggregation engine."""

from .formatting import (
    PLACEHOLDER,
    format_currency,
    format_currency_compact,
    format_date,
    format_number,
    format_percent,
    fmt_currency,
    fmt_date,
    fmt_number,
    fmt_percent,
    fmt_text,
)
from .fields import (
    AggregationMode,
    DEFAULT_REGISTRY,
    FieldDefinition,
    FieldRegistry,
    FieldType,
    REPORT_FIELDS,
)
from .engine import (
    GroupNode,
    ReportEngineResult,
    apply_filters,
    apply_sorting,
    build_group_tree,
    compute_aggregates,
    run_report_engine,
)
from .table import group_tree_to_dataframe, rows_to_dataframe

__all__ = [
    "PLACEHOLDER",
    "format_currency",
    "format_currency_compact",
    "format_date",
    "format_number",
    "format_percent",
    "fmt_currency",
    "fmt_date",
    "fmt_number",
    "fmt_percent",
    "fmt_text",
    "AggregationMode",
    "DEFAULT_REGISTRY",
    "FieldDefinition",
    "FieldRegistry",
    "FieldType",
    "REPORT_FIELDS",
    "GroupNode",
    "ReportEngineResult",
    "apply_filters",
    "apply_sorting",
    "build_group_tree",
    "compute_aggregates",
    "run_report_engine",
    "group_tree_to_dataframe",
    "rows_to_dataframe",
]
