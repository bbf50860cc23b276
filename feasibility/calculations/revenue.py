"""Revenue calculations from Gross Potential Rent (GPR) to net revenue."""

from dataclasses import dataclass
from typing import Optional

from .numeric import as_number
from ..models.lookups import MONTHS_PER_YEAR


@dataclass
class RevenueResult:
    """Annual revenue build-up."""

    gross_potential_rent: float
    other_income: float
    gross_potential_revenue: float
    vacancy_loss: float
    net_revenue: float


def calculate_revenue(
    gross_potential_rent: Optional[float],
    other_income_per_unit_month: Optional[float],
    total_units: Optional[float],
    vacancy_rate: Optional[float],
) -> RevenueResult:
    """Calculate annual net revenue.

    - Other income = per-unit monthly other income x units x 12
    - Gross potential revenue = GPR + other income
    - Vacancy loss = gross potential revenue x vacancy rate
    - Net revenue = gross potential revenue - vacancy loss

    Args:
        gross_potential_rent: Annual GPR from the unit mix.
        other_income_per_unit_month: Parking, fees, etc. per unit per month.
        total_units: Number of units.
        vacancy_rate: Vacancy as decimal (e.g., 0.07 for 7%).

    Returns:
        RevenueResult with each step of the build-up.
    """
    gpr = as_number(gross_potential_rent)
    other_income = as_number(other_income_per_unit_month) * as_number(total_units) * MONTHS_PER_YEAR
    gross_potential_revenue = gpr + other_income
    vacancy_loss = gross_potential_revenue * as_number(vacancy_rate)

    return RevenueResult(
        gross_potential_rent=gpr,
        other_income=other_income,
        gross_potential_revenue=gross_potential_revenue,
        vacancy_loss=vacancy_loss,
        net_revenue=gross_potential_revenue - vacancy_loss,
    )
