"""Report rows and report configuration.

A ``ReportRow`` bundles a parent entity (a pursuit, or a land comp mapped
onto a pursuit stub, or a pursuit's key-date roll-up) with whatever
sub-entities were attached to it. Rows are read-only input to the report
engine; field accessors in ``feasibility.reports.fields`` decide what to read.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

from .scenario import Scenario, _coerce_enum, _known_fields

if TYPE_CHECKING:
    from ..calculations.engine import CalculationResults


class FilterOperator(str, Enum):
    """Comparison applied by a report filter."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"


class SortDirection(str, Enum):
    """Sort direction for the flat row list."""

    ASC = "asc"
    DESC = "desc"


class ReportDataSource(str, Enum):
    """Which entity a report is built over."""

    PURSUITS = "pursuits"
    LAND_COMPS = "land_comps"
    KEY_DATES = "key_dates"


# =============================================================================
# Entities
# =============================================================================

@dataclass
class PursuitStage:
    """Pipeline stage a pursuit sits in."""

    id: str
    name: str
    sort_order: int = 0


@dataclass
class Pursuit:
    """A site under consideration."""

    id: str = ""
    name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    county: Optional[str] = None
    zip: Optional[str] = None
    region: Optional[str] = None
    stage_id: Optional[str] = None
    stage: Optional[PursuitStage] = None
    site_area_sf: Optional[float] = None
    created_at: Optional[str] = None  # ISO timestamp
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pursuit":
        values = _known_fields(cls, data)
        stage = values.get("stage")
        if isinstance(stage, Mapping):
            values["stage"] = PursuitStage(**_known_fields(PursuitStage, stage))
        return cls(**values)


@dataclass
class LandComp:
    """A land sale comparable."""

    id: str = ""
    name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    county: Optional[str] = None
    zip: Optional[str] = None
    site_area_sf: Optional[float] = None
    sale_price: Optional[float] = None
    sale_price_psf: Optional[float] = None
    sale_date: Optional[str] = None
    buyer: Optional[str] = None
    seller: Optional[str] = None
    zoning: Optional[str] = None
    land_use: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LandComp":
        return cls(**_known_fields(cls, data))


@dataclass
class KeyDateSummary:
    """Key-date roll-up for one pursuit (one report row per pursuit)."""

    contract_execution: Optional[str] = None
    inspection_period: Optional[str] = None
    closing_date: Optional[str] = None
    next_date_label: Optional[str] = None
    next_date_value: Optional[str] = None
    next_date_days: Optional[int] = None
    total_dates: int = 0
    overdue_count: int = 0


@dataclass
class ReportRow:
    """One row fed to the report engine."""

    pursuit: Pursuit
    scenario: Optional[Scenario] = None
    results: Optional["CalculationResults"] = None
    comp: Optional[LandComp] = None
    stage: Optional[PursuitStage] = None
    key_dates: Optional[KeyDateSummary] = None
    source: str = "pursuit"

    @property
    def resolved_stage(self) -> Optional[PursuitStage]:
        """The row's stage, preferring the one joined onto the pursuit."""
        return self.pursuit.stage or self.stage


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class ReportFilter:
    """A single filter clause; all clauses are ANDed."""

    field: str
    operator: Union[FilterOperator, str]
    value: Any = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportFilter":
        return cls(
            field=data.get("field", ""),
            operator=_coerce_enum(FilterOperator, data.get("operator")),
            value=data.get("value", ""),
        )


@dataclass
class SortSpec:
    """Sort field and direction."""

    field: str
    direction: Union[SortDirection, str] = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC


@dataclass
class ReportConfig:
    """Declarative report definition (filters, sort, group-by, columns)."""

    filters: List[ReportFilter] = field(default_factory=list)
    sort_by: Optional[SortSpec] = None
    group_by: List[str] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)
    data_source: Union[ReportDataSource, str] = ReportDataSource.PURSUITS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportConfig":
        """Build a config from a saved template's JSON.

        Accepts both the camelCase keys the UI stores (``sortBy``,
        ``groupBy``, ``dataSource``) and snake_case keys.
        """
        sort = data.get("sort_by", data.get("sortBy"))
        sort_by = None
        if sort:
            sort_by = SortSpec(
                field=sort.get("field", ""),
                direction=_coerce_enum(SortDirection, sort.get("direction", "asc")),
            )

        return cls(
            filters=[ReportFilter.from_dict(f) for f in data.get("filters") or []],
            sort_by=sort_by,
            group_by=list(data.get("group_by", data.get("groupBy")) or []),
            columns=list(data.get("columns") or []),
            data_source=_coerce_enum(
                ReportDataSource,
                data.get("data_source", data.get("dataSource", ReportDataSource.PURSUITS)),
            ),
        )
