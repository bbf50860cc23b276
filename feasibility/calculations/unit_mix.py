"""Unit mix calculations: per-row rent and square footage, and roll-ups."""

from dataclasses import dataclass
from typing import Iterable, Optional

from .numeric import as_number, safe_divide
from ..models.lookups import MONTHS_PER_YEAR
from ..models.scenario import UnitMixRow


@dataclass
class UnitMixRowCalc:
    """Derived values for a single unit mix row."""

    total_sf: float
    effective_monthly_rent: float  # Per unit
    effective_rent_per_sf: float  # Monthly
    annual_rental_revenue: float


@dataclass
class UnitMixAggregates:
    """Unit mix totals across all active rows."""

    total_units: float
    total_nrsf: float
    total_gbsf: float
    weighted_avg_unit_sf: float
    weighted_avg_rent_per_sf: float  # Monthly, per NRSF
    gross_potential_rent: float  # Annual


def effective_monthly_rent(row: UnitMixRow) -> float:
    """Monthly rent per unit under the row's rent input mode.

    Per-SF rows use ``rent_per_sf * avg_unit_sf``; whole-dollar rows use
    ``rent_whole_dollar``. The other basis is ignored entirely.
    """
    if row.is_per_sf:
        return as_number(row.rent_per_sf) * as_number(row.avg_unit_sf)
    return as_number(row.rent_whole_dollar)


def calculate_unit_mix_row(row: UnitMixRow) -> UnitMixRowCalc:
    """Calculate derived values for a single unit mix row.

    Args:
        row: Unit mix row.

    Returns:
        UnitMixRowCalc with total SF, rent and annual revenue.
    """
    unit_count = as_number(row.unit_count)
    avg_unit_sf = as_number(row.avg_unit_sf)
    monthly_rent = effective_monthly_rent(row)

    return UnitMixRowCalc(
        total_sf=unit_count * avg_unit_sf,
        effective_monthly_rent=monthly_rent,
        effective_rent_per_sf=safe_divide(monthly_rent, avg_unit_sf),
        annual_rental_revenue=unit_count * monthly_rent * MONTHS_PER_YEAR,
    )


def active_rows(rows: Iterable[UnitMixRow]) -> list[UnitMixRow]:
    """Rows that contribute to the roll-ups (``unit_count > 0``)."""
    return [r for r in rows if as_number(r.unit_count) > 0]


def calculate_unit_mix_aggregates(
    rows: Iterable[UnitMixRow],
    efficiency_ratio: Optional[float],
) -> UnitMixAggregates:
    """Roll up the unit mix into NRSF, GBSF and gross potential rent.

    Rows with a zero unit count stay in the caller's list but are excluded
    here, so they contribute nothing to any total or average.

    Args:
        rows: Unit mix rows.
        efficiency_ratio: NRSF / GBSF. Zero or missing gives GBSF of 0.

    Returns:
        UnitMixAggregates for the scenario.

    Example:
        >>> agg = calculate_unit_mix_aggregates(
        ...     [UnitMixRow(unit_count=100, avg_unit_sf=850, rent_per_sf=1.80)],
        ...     efficiency_ratio=0.85,
        ... )
        >>> agg.total_nrsf
        85000.0
    """
    calcs = [(row, calculate_unit_mix_row(row)) for row in active_rows(rows)]

    total_units = sum(as_number(row.unit_count) for row, _ in calcs)
    total_nrsf = sum(calc.total_sf for _, calc in calcs)
    gross_potential_rent = sum(calc.annual_rental_revenue for _, calc in calcs)

    return UnitMixAggregates(
        total_units=total_units,
        total_nrsf=total_nrsf,
        total_gbsf=safe_divide(total_nrsf, efficiency_ratio),
        weighted_avg_unit_sf=safe_divide(total_nrsf, total_units),
        weighted_avg_rent_per_sf=safe_divide(gross_potential_rent / MONTHS_PER_YEAR, total_nrsf),
        gross_potential_rent=gross_potential_rent,
    )


def resolve_total_units(
    scenario_total_units: Optional[float],
    aggregates: UnitMixAggregates,
) -> float:
    """Unit count used by every per-unit metric.

    The scenario's own ``total_units`` wins when it is set; otherwise the
    active unit mix rows are counted.
    """
    if scenario_total_units is not None:
        return as_number(scenario_total_units)
    return aggregates.total_units
