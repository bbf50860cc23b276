"""Property tax from a cost-based assessed value and a mil rate."""

from dataclasses import dataclass
from typing import Optional

from .numeric import as_number, safe_divide
from ..models.lookups import MIL_RATE_BASIS


@dataclass
class PropertyTaxResult:
    """Assessed value by budget component and the resulting annual tax."""

    assessed_value_hard: float
    assessed_value_land: float
    assessed_value_soft: float
    assessed_value: float
    property_tax: float  # Annual
    property_tax_per_unit: float


def calculate_property_tax(
    hard_cost: float,
    land_cost: Optional[float],
    soft_cost: float,
    tax_assessed_pct_hard: Optional[float],
    tax_assessed_pct_land: Optional[float],
    tax_assessed_pct_soft: Optional[float],
    tax_mil_rate: Optional[float],
    total_units: float,
) -> PropertyTaxResult:
    """Calculate annual property tax.

    Assessed value is the taxable share of each budget component; the mil
    rate is applied per $1,000 of assessed value.

    Args:
        hard_cost: Total hard cost.
        land_cost: Land cost.
        soft_cost: Total soft cost.
        tax_assessed_pct_hard: Share of hard cost that is assessed (0-1).
        tax_assessed_pct_land: Share of land cost that is assessed (0-1).
        tax_assessed_pct_soft: Share of soft cost that is assessed (0-1).
        tax_mil_rate: Tax per $1,000 of assessed value.
        total_units: Number of units.

    Returns:
        PropertyTaxResult.

    Example:
        >>> calculate_property_tax(10_000_000, 0, 0, 0.8, 0, 0, 20, 100).property_tax
        160000.0
    """
    assessed_value_hard = as_number(hard_cost) * as_number(tax_assessed_pct_hard)
    assessed_value_land = as_number(land_cost) * as_number(tax_assessed_pct_land)
    assessed_value_soft = as_number(soft_cost) * as_number(tax_assessed_pct_soft)
    assessed_value = assessed_value_hard + assessed_value_land + assessed_value_soft

    property_tax = assessed_value * (as_number(tax_mil_rate) / MIL_RATE_BASIS)

    return PropertyTaxResult(
        assessed_value_hard=assessed_value_hard,
        assessed_value_land=assessed_value_land,
        assessed_value_soft=assessed_value_soft,
        assessed_value=assessed_value,
        property_tax=property_tax,
        property_tax_per_unit=safe_divide(property_tax, total_units),
    )
