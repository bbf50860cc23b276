"""Report field registry.

A field knows how to read one value off a ``ReportRow``, how to display it,
whether rows can be grouped on it, and how it rolls up into group totals.
The report engine is generic over rows; everything entity-specific lives
in the accessors below.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from ..calculations.numeric import as_number
from ..exceptions import UnknownFieldError
from ..models.lookups import SF_PER_ACRE
from ..models.report import ReportDataSource, ReportRow
from .coercion import to_number
from .formatting import (
    PLACEHOLDER,
    fmt_currency,
    fmt_date,
    fmt_number,
    fmt_percent,
    fmt_text,
)

FieldValue = Union[str, float, int, None]


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENT = "percent"
    DATE = "date"


class AggregationMode(str, Enum):
    SUM = "sum"
    AVG = "avg"
    NONE = "none"


NUMERIC_TYPES = frozenset({FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENT})


@dataclass(frozen=True)
class FieldDefinition:
    """Metadata and accessor for one report column.

    Attributes:
        key: Stable identifier stored in saved report configurations
        label: Column header
        category: Config-panel section (also decides the data source)
        type: Value type; drives default aggregation
        get_value: Reads the raw value from a row (``None`` when absent)
        format: Renders a raw value for display
        groupable: Whether the field may be used as a group-by level
        filterable: Whether the field may be used in a filter
        aggregation: Override of the type's default roll-up
    """
    key: str
    label: str
    category: str
    type: FieldType
    get_value: Callable[[ReportRow], FieldValue]
    format: Callable[[FieldValue], str]
    groupable: bool = False
    filterable: bool = True
    aggregation: Optional[AggregationMode] = None

    @property
    def is_numeric(self) -> bool:
        return self.type in NUMERIC_TYPES

    def resolved_aggregation(self) -> Optional[AggregationMode]:
        """Roll-up mode for group totals, or ``None`` if the field has none.

        Percent fields average, number and currency fields sum; an explicit
        ``aggregation`` wins, and ``NONE`` excludes the field.
        """
        if not self.is_numeric:
            return None
        mode = self.aggregation
        if mode is None:
            mode = AggregationMode.AVG if self.type == FieldType.PERCENT else AggregationMode.SUM
        return None if mode == AggregationMode.NONE else mode


# Categories that belong to each data source
SOURCE_CATEGORIES: Dict[ReportDataSource, frozenset] = {
    ReportDataSource.PURSUITS: frozenset(
        {"Pursuit", "One-Pager", "Returns", "Budget", "Revenue", "OpEx", "Assumptions"}
    ),
    ReportDataSource.LAND_COMPS: frozenset({"Land Comp"}),
    ReportDataSource.KEY_DATES: frozenset({"Key Date"}),
}


class FieldRegistry(Mapping[str, FieldDefinition]):
    """Read-only, ordered mapping of field key -> FieldDefinition."""

    def __init__(self, fields: Iterable[FieldDefinition]):
        self._fields: Dict[str, FieldDefinition] = {}
        for f in fields:
            if f.key in self._fields:
                raise ValueError(f"Duplicate report field key: {f.key!r}")
            self._fields[f.key] = f

    def __getitem__(self, key: str) -> FieldDefinition:
        try:
            return self._fields[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def require(self, key: str) -> FieldDefinition:
        """Look up a field, raising UnknownFieldError if it is not registered."""
        return self[key]

    def numeric_fields(self) -> List[FieldDefinition]:
        """Fields that take part in aggregation."""
        return [f for f in self._fields.values() if f.resolved_aggregation() is not None]

    def groupable_fields(self, source: Optional[ReportDataSource] = None) -> List[FieldDefinition]:
        fields = self.for_source(source) if source is not None else self._fields.values()
        return [f for f in fields if f.groupable]

    def categories(self, source: Optional[ReportDataSource] = None) -> Dict[str, List[FieldDefinition]]:
        """Fields grouped by category, in registration order."""
        fields = self.for_source(source) if source is not None else self._fields.values()
        grouped: Dict[str, List[FieldDefinition]] = {}
        for f in fields:
            grouped.setdefault(f.category, []).append(f)
        return grouped

    def for_source(self, source: Union[ReportDataSource, str]) -> List[FieldDefinition]:
        """Fields offered for a data source; unknown sources fall back to pursuits."""
        try:
            source = ReportDataSource(source)
        except ValueError:
            source = ReportDataSource.PURSUITS
        allowed = SOURCE_CATEGORIES[source]
        return [f for f in self._fields.values() if f.category in allowed]


# =============================================================================
# Accessor helpers
# =============================================================================

def _truthy_ratio(numerator: Any, denominator: Any) -> Optional[float]:
    """numerator / denominator, or None when either side is missing or zero."""
    num, den = to_number(numerator), to_number(denominator)
    if not num or not den or math.isnan(num) or math.isnan(den):
        return None
    return num / den


def _acres(site_area_sf: Optional[float]) -> Optional[float]:
    area = to_number(site_area_sf)
    if math.isnan(area) or area <= 0:
        return None
    return area / SF_PER_ACRE


def _pursuit(attr: str) -> Callable[[ReportRow], FieldValue]:
    return lambda row: getattr(row.pursuit, attr)


def _scenario(attr: str) -> Callable[[ReportRow], FieldValue]:
    return lambda row: getattr(row.scenario, attr) if row.scenario is not None else None


def _result(attr: str) -> Callable[[ReportRow], FieldValue]:
    return lambda row: getattr(row.results, attr) if row.results is not None else None


def _comp(attr: str, default: FieldValue = None) -> Callable[[ReportRow], FieldValue]:
    def get(row: ReportRow) -> FieldValue:
        if row.comp is None:
            return default
        value = getattr(row.comp, attr)
        return default if value is None else value
    return get


def _key_date(attr: str) -> Callable[[ReportRow], FieldValue]:
    return lambda row: getattr(row.key_dates, attr) if row.key_dates is not None else None


def _stage_name(row: ReportRow) -> str:
    stage = row.resolved_stage
    return stage.name if stage is not None and stage.name else PLACEHOLDER


def _total_units(row: ReportRow) -> FieldValue:
    if row.results is not None:
        return row.results.total_units
    return row.scenario.total_units if row.scenario is not None else None


def _unit_avg_size(row: ReportRow) -> Optional[float]:
    if row.results is None:
        return None
    return _truthy_ratio(row.results.total_nrsf, _total_units(row))


def _land_cost_per_unit(row: ReportRow) -> Optional[float]:
    if row.scenario is None:
        return None
    return _truthy_ratio(row.scenario.land_cost, _total_units(row))


def _land_cost_per_site_sf(row: ReportRow) -> Optional[float]:
    if row.scenario is None:
        return None
    return _truthy_ratio(row.scenario.land_cost, row.pursuit.site_area_sf)


def _opex_ratio(row: ReportRow) -> Optional[float]:
    if row.results is None:
        return None
    return _truthy_ratio(row.results.total_opex, row.results.net_revenue)


CONTROLLABLE_OPEX_FIELDS = (
    "opex_utilities",
    "opex_repairs_maintenance",
    "opex_contract_services",
    "opex_marketing",
    "opex_general_admin",
    "opex_turnover",
    "opex_misc",
)


def _controllable_opex(row: ReportRow) -> Optional[float]:
    """Annual opex the operator controls (every category except insurance)."""
    if row.scenario is None:
        return None
    total = sum(as_number(getattr(row.scenario, name)) for name in CONTROLLABLE_OPEX_FIELDS)
    return total if total > 0 else None


def _fmt_acres(value: FieldValue) -> str:
    return PLACEHOLDER if value is None else fmt_number(value, 2)


def _fmt_mil_rate(value: FieldValue) -> str:
    return PLACEHOLDER if value is None else fmt_number(value, 4)


def _field(key, label, category, type_, get_value, fmt, groupable=False, **kwargs) -> FieldDefinition:
    return FieldDefinition(
        key=key,
        label=label,
        category=category,
        type=type_,
        get_value=get_value,
        format=fmt,
        groupable=groupable,
        **kwargs,
    )


TEXT, NUMBER, CURRENCY, PERCENT, DATE = (
    FieldType.TEXT, FieldType.NUMBER, FieldType.CURRENCY, FieldType.PERCENT, FieldType.DATE,
)


# =============================================================================
# Default fields
# =============================================================================

PURSUIT_FIELDS = [
    _field("pursuit_name", "Pursuit Name", "Pursuit", TEXT, _pursuit("name"), fmt_text),
    _field("address", "Address", "Pursuit", TEXT, _pursuit("address"), fmt_text),
    _field("city", "City", "Pursuit", TEXT, _pursuit("city"), fmt_text, groupable=True),
    _field("state", "State", "Pursuit", TEXT, _pursuit("state"), fmt_text, groupable=True),
    _field("county", "County", "Pursuit", TEXT, _pursuit("county"), fmt_text, groupable=True),
    _field("zip", "Zip", "Pursuit", TEXT, _pursuit("zip"), fmt_text, groupable=True),
    _field("region", "Region", "Pursuit", TEXT, _pursuit("region"), fmt_text, groupable=True),
    _field("stage", "Stage", "Pursuit", TEXT, _stage_name, fmt_text, groupable=True),
    _field("site_area_sf", "Site Area (SF)", "Pursuit", NUMBER, _pursuit("site_area_sf"), fmt_number),
    _field("site_area_acres", "Site Area (Ac)", "Pursuit", NUMBER,
           lambda row: _acres(row.pursuit.site_area_sf), _fmt_acres),
    _field("pursuit_created_at", "Date Created", "Pursuit", DATE, _pursuit("created_at"), fmt_date),
    _field("pursuit_updated_at", "Last Updated", "Pursuit", DATE, _pursuit("updated_at"), fmt_date),
]

SCENARIO_FIELDS = [
    _field("one_pager_name", "Scenario Name", "One-Pager", TEXT, _scenario("name"), fmt_text),
    _field("product_type", "Product Type", "One-Pager", TEXT, _scenario("product_type"), fmt_text, groupable=True),
    _field("total_units", "Total Units", "One-Pager", NUMBER, _total_units, fmt_number),
    _field("unit_avg_size", "Unit Avg Size (SF)", "One-Pager", NUMBER, _unit_avg_size, fmt_number),
]

CALCULATED_FIELDS = [
    # Returns
    _field("calc_yoc", "Unlevered YoC", "Returns", PERCENT, _result("unlevered_yield_on_cost"), fmt_percent),
    _field("calc_noi", "NOI", "Returns", CURRENCY, _result("noi"), fmt_currency),
    _field("calc_noi_per_unit", "NOI / Unit", "Returns", CURRENCY, _result("noi_per_unit"), fmt_currency),
    # Revenue
    _field("calc_gpr", "Gross Potential Revenue", "Revenue", CURRENCY,
           _result("gross_potential_revenue"), fmt_currency),
    _field("calc_net_revenue", "Net Revenue", "Revenue", CURRENCY, _result("net_revenue"), fmt_currency),
    # Budget
    _field("calc_total_budget", "Total Budget", "Budget", CURRENCY, _result("total_budget"), fmt_currency),
    _field("calc_hard_cost", "Hard Cost", "Budget", CURRENCY, _result("hard_cost"), fmt_currency),
    _field("calc_soft_cost", "Soft Cost", "Budget", CURRENCY, _result("soft_cost"), fmt_currency),
    _field("calc_cost_per_unit", "Cost / Unit", "Budget", CURRENCY, _result("cost_per_unit"), fmt_currency),
    _field("land_cost", "Land Cost", "Budget", CURRENCY, _scenario("land_cost"), fmt_currency),
    _field("land_cost_per_unit", "Land Cost / Unit", "Budget", CURRENCY, _land_cost_per_unit, fmt_currency),
    _field("land_cost_per_sf", "Land Cost / SF (Site)", "Budget", CURRENCY,
           _land_cost_per_site_sf, fmt_currency),
    # OpEx
    _field("calc_total_opex", "Total OpEx", "OpEx", CURRENCY, _result("total_opex"), fmt_currency),
    _field("opex_ratio", "OpEx Ratio", "OpEx", PERCENT, _opex_ratio, fmt_percent),
    _field("controllable_opex", "Controllable OpEx", "OpEx", CURRENCY, _controllable_opex, fmt_currency),
]

ASSUMPTION_FIELDS = [
    _field("calc_total_nrsf", "Total NRSF", "Assumptions", NUMBER, _result("total_nrsf"), fmt_number),
    _field("calc_total_gbsf", "Total GBSF", "Assumptions", NUMBER, _result("total_gbsf"), fmt_number),
    _field("efficiency_ratio", "Efficiency Ratio", "Assumptions", PERCENT,
           _scenario("efficiency_ratio"), fmt_percent),
    _field("vacancy_rate", "Vacancy Rate", "Assumptions", PERCENT, _scenario("vacancy_rate"), fmt_percent),
    _field("hard_cost_per_nrsf", "Hard Cost / NRSF", "Assumptions", CURRENCY,
           _scenario("hard_cost_per_nrsf"), fmt_currency),
    _field("soft_cost_pct", "Soft Cost %", "Assumptions", PERCENT, _scenario("soft_cost_pct"), fmt_percent),
    _field("other_income_per_unit_month", "Other Income/Unit/Mo", "Assumptions", CURRENCY,
           _scenario("other_income_per_unit_month"), fmt_currency),
    _field("mgmt_fee_pct", "Mgmt Fee %", "Assumptions", PERCENT, _scenario("mgmt_fee_pct"), fmt_percent),
    _field("payroll_burden_pct", "Payroll Burden %", "Assumptions", PERCENT,
           _scenario("payroll_burden_pct"), fmt_percent),
    _field("tax_mil_rate", "Tax Millage Rate", "Assumptions", NUMBER, _scenario("tax_mil_rate"), _fmt_mil_rate),
]

LAND_COMP_FIELDS = [
    _field("comp_name", "Comp Name", "Land Comp", TEXT,
           lambda row: row.comp.name if row.comp is not None and row.comp.name else row.pursuit.name,
           fmt_text),
    _field("comp_address", "Address", "Land Comp", TEXT, _comp("address", ""), fmt_text),
    _field("comp_city", "City", "Land Comp", TEXT, _comp("city", ""), fmt_text, groupable=True),
    _field("comp_state", "State", "Land Comp", TEXT, _comp("state", ""), fmt_text, groupable=True),
    _field("comp_county", "County", "Land Comp", TEXT, _comp("county", ""), fmt_text, groupable=True),
    _field("comp_zip", "Zip", "Land Comp", TEXT, _comp("zip", ""), fmt_text, groupable=True),
    _field("comp_site_area_sf", "Site Area (SF)", "Land Comp", NUMBER, _comp("site_area_sf"), fmt_number),
    _field("comp_site_area_acres", "Site Area (Ac)", "Land Comp", NUMBER,
           lambda row: _acres(row.comp.site_area_sf) if row.comp is not None else None, _fmt_acres),
    _field("comp_sale_price", "Sale Price", "Land Comp", CURRENCY, _comp("sale_price"), fmt_currency),
    _field("comp_sale_price_psf", "Price / SF", "Land Comp", CURRENCY, _comp("sale_price_psf"), fmt_currency),
    _field("comp_sale_date", "Sale Date", "Land Comp", DATE, _comp("sale_date"), fmt_date),
    _field("comp_buyer", "Buyer", "Land Comp", TEXT, _comp("buyer"), fmt_text, groupable=True),
    _field("comp_seller", "Seller", "Land Comp", TEXT, _comp("seller"), fmt_text, groupable=True),
    _field("comp_zoning", "Zoning", "Land Comp", TEXT, _comp("zoning"), fmt_text, groupable=True),
    _field("comp_land_use", "Land Use", "Land Comp", TEXT, _comp("land_use"), fmt_text, groupable=True),
    _field("comp_created_at", "Date Added", "Land Comp", DATE, _comp("created_at"), fmt_date),
]

KEY_DATE_FIELDS = [
    _field("kd_pursuit_name", "Pursuit", "Key Date", TEXT, _pursuit("name"), fmt_text),
    _field("kd_region", "Region", "Key Date", TEXT, _pursuit("region"), fmt_text, groupable=True),
    _field("kd_stage", "Stage", "Key Date", TEXT, _stage_name, fmt_text, groupable=True),
    _field("kd_contract_execution", "Contract Execution", "Key Date", DATE,
           _key_date("contract_execution"), fmt_date),
    _field("kd_inspection_period", "Inspection Period", "Key Date", DATE,
           _key_date("inspection_period"), fmt_date),
    _field("kd_closing_date", "Closing Date", "Key Date", DATE, _key_date("closing_date"), fmt_date),
    _field("kd_next_date_label", "Next Milestone", "Key Date", TEXT, _key_date("next_date_label"), fmt_text),
    _field("kd_next_date_value", "Next Date", "Key Date", DATE, _key_date("next_date_value"), fmt_date),
    _field("kd_next_date_days", "Days Until", "Key Date", NUMBER, _key_date("next_date_days"), fmt_number),
    _field("kd_total_dates", "Total Dates", "Key Date", NUMBER, _key_date("total_dates"), fmt_number),
    _field("kd_overdue_count", "Overdue", "Key Date", NUMBER, _key_date("overdue_count"), fmt_number),
]

REPORT_FIELDS: List[FieldDefinition] = (
    PURSUIT_FIELDS
    + SCENARIO_FIELDS
    + CALCULATED_FIELDS
    + ASSUMPTION_FIELDS
    + LAND_COMP_FIELDS
    + KEY_DATE_FIELDS
)

DEFAULT_REGISTRY = FieldRegistry(REPORT_FIELDS)
