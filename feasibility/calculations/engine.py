"""Unified feasibility calculation engine.

``calculate_all`` chains the stage modules in a fixed order:

    unit mix -> site -> revenue -> budget -> property tax -> opex -> returns

Each stage reads only raw inputs and earlier-stage outputs. The function is
pure: no I/O, no caching, and a fresh ``CalculationResults`` on every call.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from .budget import calculate_budget
from .numeric import safe_divide
from .opex import calculate_opex
from .property_tax import calculate_property_tax
from .returns import calculate_returns
from .revenue import calculate_revenue
from .site import calculate_site_metrics
from .unit_mix import calculate_unit_mix_aggregates, resolve_total_units
from ..core.logging import get_logger
from ..models.scenario import PayrollRow, Scenario, SoftCostDetailRow, UnitMixRow

logger = get_logger(__name__)

RowT = TypeVar("RowT", UnitMixRow, PayrollRow, SoftCostDetailRow)


@dataclass(frozen=True)
class CalculationResults:
    """Every derived feasibility metric for one scenario.

    Always fully populated; a metric whose denominator is zero is 0.0.
    """

    # === Site & Density ===
    site_area_acres: float
    density_units_per_acre: float
    recommended_units_low: float
    recommended_units_high: float

    # === Unit Mix ===
    total_units: float
    total_nrsf: float
    total_gbsf: float
    weighted_avg_unit_sf: float
    weighted_avg_rent_per_sf: float  # Monthly

    # === Revenue (annual) ===
    gross_potential_rent: float
    other_income: float
    gross_potential_revenue: float
    vacancy_loss: float
    net_revenue: float

    # === Budget ===
    hard_cost: float
    hard_cost_per_gbsf: float
    soft_cost: float
    total_budget: float
    cost_per_unit: float
    cost_per_nrsf: float
    cost_per_gbsf: float
    land_cost_per_unit: float
    land_cost_per_sf: float

    # === Operating Expenses (annual) ===
    opex_categories_total: float
    payroll_total: float
    mgmt_fee_total: float
    property_tax_total: float
    total_opex: float
    opex_per_unit: float
    opex_ratio: float

    # === Property Tax ===
    assessed_value: float
    property_tax_per_unit: float

    # === Returns ===
    noi: float
    noi_per_unit: float
    noi_per_sf: float
    unlevered_yield_on_cost: float

    def to_dict(self) -> Dict[str, float]:
        """Flat metric name -> value mapping."""
        return asdict(self)


def as_scenario(scenario: Union[Scenario, Mapping[str, Any], None]) -> Scenario:
    """Accept a Scenario, a flat record, or None (all inputs missing)."""
    if scenario is None:
        return Scenario()
    if isinstance(scenario, Mapping):
        return Scenario.from_dict(scenario)
    return scenario


def as_rows(
    rows: Optional[Iterable[Union[RowT, Mapping[str, Any]]]],
    row_cls: Type[RowT],
) -> List[RowT]:
    """Normalize a line-item collection; records become ``row_cls`` instances."""
    if rows is None:
        return []
    return [row_cls.from_dict(r) if isinstance(r, Mapping) else r for r in rows]


def calculate_all(
    scenario: Union[Scenario, Mapping[str, Any], None],
    unit_mix: Optional[Iterable[Union[UnitMixRow, Mapping[str, Any]]]] = None,
    payroll: Optional[Iterable[Union[PayrollRow, Mapping[str, Any]]]] = None,
    soft_cost_details: Optional[Iterable[Union[SoftCostDetailRow, Mapping[str, Any]]]] = None,
    site_area_sf: Optional[float] = 0.0,
    product_type_density_low: Optional[float] = None,
    product_type_density_high: Optional[float] = None,
) -> CalculationResults:
    """Calculate every feasibility metric for a scenario.

    Missing inputs (``None``, empty collections) are treated as zero and any
    ratio with a zero denominator is 0.0, so this never raises for bad
    numbers. Inputs are not range-checked.

    The unit count comes from ``scenario.total_units`` when it is set, and
    from the active unit mix rows otherwise.

    Args:
        scenario: Scenario assumptions (dataclass or flat record).
        unit_mix: Unit mix rows.
        payroll: Payroll rows.
        soft_cost_details: Soft cost line items.
        site_area_sf: Site area of the parent pursuit in SF.
        product_type_density_low: Product type low density bound (du/acre).
        product_type_density_high: Product type high density bound (du/acre).

    Returns:
        CalculationResults snapshot.

    Example:
        >>> results = calculate_all(
        ...     Scenario(total_units=100, efficiency_ratio=0.85, hard_cost_per_nrsf=180),
        ...     unit_mix=[UnitMixRow(unit_count=100, avg_unit_sf=850, rent_per_sf=1.80)],
        ... )
        >>> results.hard_cost
        15300000.0
    """
    scenario = as_scenario(scenario)
    unit_mix_rows = as_rows(unit_mix, UnitMixRow)
    payroll_rows = as_rows(payroll, PayrollRow)
    soft_cost_rows = as_rows(soft_cost_details, SoftCostDetailRow)

    # Unit Mix
    mix = calculate_unit_mix_aggregates(unit_mix_rows, scenario.efficiency_ratio)
    total_units = resolve_total_units(scenario.total_units, mix)

    # Site & Density
    site = calculate_site_metrics(
        site_area_sf,
        total_units,
        product_type_density_low,
        product_type_density_high,
    )

    # Revenue
    rev = calculate_revenue(
        mix.gross_potential_rent,
        scenario.other_income_per_unit_month,
        total_units,
        scenario.vacancy_rate,
    )

    # Budget
    bud = calculate_budget(
        scenario.hard_cost_per_nrsf,
        mix.total_nrsf,
        mix.total_gbsf,
        scenario.land_cost,
        scenario.soft_cost_pct,
        scenario.use_detailed_soft_costs,
        soft_cost_rows,
        total_units,
        site_area_sf,
    )

    # Property Tax (feeds OpEx)
    tax = calculate_property_tax(
        bud.hard_cost,
        bud.land_cost,
        bud.soft_cost,
        scenario.tax_assessed_pct_hard,
        scenario.tax_assessed_pct_land,
        scenario.tax_assessed_pct_soft,
        scenario.tax_mil_rate,
        total_units,
    )

    # OpEx
    opex = calculate_opex(
        scenario,
        total_units,
        rev.net_revenue,
        payroll_rows,
        tax.property_tax,
    )

    # Returns
    ret = calculate_returns(
        rev.net_revenue,
        opex.total_opex,
        bud.total_budget,
        total_units,
        mix.total_nrsf,
    )

    logger.debug(
        "Calculated scenario %s: units=%s budget=%.0f noi=%.0f yoc=%.4f",
        scenario.id or scenario.name or "<unsaved>",
        total_units,
        bud.total_budget,
        ret.noi,
        ret.unlevered_yield_on_cost,
    )

    return CalculationResults(
        # Site & Density
        site_area_acres=site.site_area_acres,
        density_units_per_acre=site.density_units_per_acre,
        recommended_units_low=site.recommended_units_low,
        recommended_units_high=site.recommended_units_high,
        # Unit Mix
        total_units=total_units,
        total_nrsf=mix.total_nrsf,
        total_gbsf=mix.total_gbsf,
        weighted_avg_unit_sf=safe_divide(mix.total_nrsf, total_units),
        weighted_avg_rent_per_sf=mix.weighted_avg_rent_per_sf,
        # Revenue
        gross_potential_rent=rev.gross_potential_rent,
        other_income=rev.other_income,
        gross_potential_revenue=rev.gross_potential_revenue,
        vacancy_loss=rev.vacancy_loss,
        net_revenue=rev.net_revenue,
        # Budget
        hard_cost=bud.hard_cost,
        hard_cost_per_gbsf=bud.hard_cost_per_gbsf,
        soft_cost=bud.soft_cost,
        total_budget=bud.total_budget,
        cost_per_unit=bud.cost_per_unit,
        cost_per_nrsf=bud.cost_per_nrsf,
        cost_per_gbsf=bud.cost_per_gbsf,
        land_cost_per_unit=bud.land_cost_per_unit,
        land_cost_per_sf=bud.land_cost_per_sf,
        # OpEx
        opex_categories_total=opex.opex_categories_total,
        payroll_total=opex.payroll_total,
        mgmt_fee_total=opex.mgmt_fee_total,
        property_tax_total=opex.property_tax_total,
        total_opex=opex.total_opex,
        opex_per_unit=opex.opex_per_unit,
        opex_ratio=opex.opex_ratio,
        # Property Tax
        assessed_value=tax.assessed_value,
        property_tax_per_unit=tax.property_tax_per_unit,
        # Returns
        noi=ret.noi,
        noi_per_unit=ret.noi_per_unit,
        noi_per_sf=ret.noi_per_sf,
        unlevered_yield_on_cost=ret.unlevered_yield_on_cost,
    )
