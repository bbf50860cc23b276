"""Development budget calculations (hard, soft and land cost)."""

from dataclasses import dataclass
from typing import Iterable, Optional

from .numeric import as_number, safe_divide
from ..models.scenario import SoftCostDetailRow


@dataclass
class BudgetResult:
    """Total development budget and its per-unit / per-SF ratios."""

    hard_cost: float
    hard_cost_per_gbsf: float
    soft_cost: float
    soft_cost_pct_display: float  # Effective soft cost as a share of hard cost
    land_cost: float
    total_budget: float
    cost_per_unit: float
    cost_per_nrsf: float
    cost_per_gbsf: float
    land_cost_per_unit: float
    land_cost_per_sf: float  # Per SF of site area


def calculate_soft_cost(
    hard_cost: float,
    soft_cost_pct: Optional[float],
    use_detailed_soft_costs: bool,
    soft_cost_details: Iterable[SoftCostDetailRow],
) -> float:
    """Soft cost from exactly one basis.

    When ``use_detailed_soft_costs`` is set the detail line items are summed
    and the percentage is ignored; otherwise soft cost is the percentage of
    hard cost and the detail rows are ignored.
    """
    if use_detailed_soft_costs:
        return sum(as_number(d.amount) for d in soft_cost_details)
    return hard_cost * as_number(soft_cost_pct)


def calculate_budget(
    hard_cost_per_nrsf: Optional[float],
    total_nrsf: float,
    total_gbsf: float,
    land_cost: Optional[float],
    soft_cost_pct: Optional[float],
    use_detailed_soft_costs: bool,
    soft_cost_details: Iterable[SoftCostDetailRow],
    total_units: float,
    site_area_sf: Optional[float],
) -> BudgetResult:
    """Calculate the total development budget.

    Total budget = hard cost + soft cost + land cost, where
    hard cost = $/NRSF x total NRSF.

    Args:
        hard_cost_per_nrsf: Hard cost per net rentable SF.
        total_nrsf: Total net rentable SF.
        total_gbsf: Total gross building SF.
        land_cost: Land acquisition cost.
        soft_cost_pct: Soft cost as a fraction of hard cost.
        use_detailed_soft_costs: Use the detail line items instead of the %.
        soft_cost_details: Soft cost line items.
        total_units: Number of units.
        site_area_sf: Site area in SF (for land cost per SF).

    Returns:
        BudgetResult with totals and ratios; every ratio is 0 when its
        denominator is 0.

    Example:
        >>> result = calculate_budget(180, 85_000, 100_000, 2_000_000, 0.30,
        ...                           False, [], 100, 217_800)
        >>> result.total_budget
        21890000.0
    """
    land = as_number(land_cost)
    hard_cost = as_number(hard_cost_per_nrsf) * as_number(total_nrsf)
    soft_cost = calculate_soft_cost(
        hard_cost, soft_cost_pct, use_detailed_soft_costs, soft_cost_details
    )

    if use_detailed_soft_costs:
        soft_cost_pct_display = safe_divide(soft_cost, hard_cost)
    else:
        soft_cost_pct_display = as_number(soft_cost_pct)

    total_budget = hard_cost + soft_cost + land

    return BudgetResult(
        hard_cost=hard_cost,
        hard_cost_per_gbsf=safe_divide(hard_cost, total_gbsf),
        soft_cost=soft_cost,
        soft_cost_pct_display=soft_cost_pct_display,
        land_cost=land,
        total_budget=total_budget,
        cost_per_unit=safe_divide(total_budget, total_units),
        cost_per_nrsf=safe_divide(total_budget, total_nrsf),
        cost_per_gbsf=safe_divide(total_budget, total_gbsf),
        land_cost_per_unit=safe_divide(land, total_units),
        land_cost_per_sf=safe_divide(land, site_area_sf),
    )
