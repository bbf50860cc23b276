"""Data models for the feasibility core."""

from .lookups import (
    SF_PER_ACRE,
    MIL_RATE_BASIS,
    MONTHS_PER_YEAR,
    UnitType,
    UNIT_TYPE_LABELS,
    unit_type_label,
)
from .scenario import (
    RentInputMode,
    PayrollLineType,
    UnitMixRow,
    PayrollRow,
    SoftCostDetailRow,
    Scenario,
)
from .report import (
    FilterOperator,
    SortDirection,
    ReportDataSource,
    PursuitStage,
    Pursuit,
    LandComp,
    KeyDateSummary,
    ReportRow,
    ReportFilter,
    SortSpec,
    ReportConfig,
)

__all__ = [
    "SF_PER_ACRE",
    "MIL_RATE_BASIS",
    "MONTHS_PER_YEAR",
    "UnitType",
    "UNIT_TYPE_LABELS",
    "unit_type_label",
    "RentInputMode",
    "PayrollLineType",
    "UnitMixRow",
    "PayrollRow",
    "SoftCostDetailRow",
    "Scenario",
    "FilterOperator",
    "SortDirection",
    "ReportDataSource",
    "PursuitStage",
    "Pursuit",
    "LandComp",
    "KeyDateSummary",
    "ReportRow",
    "ReportFilter",
    "SortSpec",
    "ReportConfig",
]
