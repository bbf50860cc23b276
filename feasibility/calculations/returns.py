"""NOI and unlevered yield on cost."""

from dataclasses import dataclass

from .numeric import as_number, safe_divide


@dataclass
class ReturnsResult:
    """Stabilized return metrics."""

    noi: float
    noi_per_unit: float
    noi_per_sf: float  # Per NRSF
    unlevered_yield_on_cost: float  # NOI / total budget


def calculate_returns(
    net_revenue: float,
    total_opex: float,
    total_budget: float,
    total_units: float,
    total_nrsf: float,
) -> ReturnsResult:
    """Calculate NOI and yield on cost.

    NOI = net revenue - total opex
    YoC = NOI / total budget

    Args:
        net_revenue: Annual net revenue.
        total_opex: Annual operating expenses including property tax.
        total_budget: Total development budget.
        total_units: Number of units.
        total_nrsf: Total net rentable SF.

    Returns:
        ReturnsResult.
    """
    noi = as_number(net_revenue) - as_number(total_opex)

    return ReturnsResult(
        noi=noi,
        noi_per_unit=safe_divide(noi, total_units),
        noi_per_sf=safe_divide(noi, total_nrsf),
        unlevered_yield_on_cost=safe_divide(noi, total_budget),
    )
