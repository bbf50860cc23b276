"""Operating expense calculations: categories, payroll and management fee."""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .numeric import as_number, safe_divide
from ..models.scenario import PayrollRow, Scenario


@dataclass
class OpExResult:
    """Annual operating expenses.

    ``total_opex`` includes property tax, which is calculated separately
    from the budget and passed in.
    """

    category_totals: Dict[str, float]  # opex_* field name -> annual dollars
    opex_categories_total: float
    payroll_total: float
    mgmt_fee_total: float
    property_tax_total: float
    total_opex: float
    opex_per_unit: float
    opex_ratio: float  # Total opex / net revenue


def calculate_payroll_row_total(
    row: PayrollRow,
    payroll_burden_pct: Optional[float],
) -> float:
    """Annual cost of a single payroll line.

    Employee lines: headcount x base x (1 + bonus %) x (1 + burden %).
    Contract lines: the fixed amount, with no bonus or burden.

    Args:
        row: Payroll row.
        payroll_burden_pct: Taxes and benefits as a fraction of base pay.

    Returns:
        Annual cost of the line.
    """
    if row.is_contract:
        return as_number(row.fixed_amount)

    return (
        as_number(row.headcount)
        * as_number(row.base_compensation)
        * (1 + as_number(row.bonus_pct))
        * (1 + as_number(payroll_burden_pct))
    )


def calculate_opex(
    scenario: Scenario,
    total_units: float,
    net_revenue: float,
    payroll: Iterable[PayrollRow],
    property_tax_total: float,
) -> OpExResult:
    """Calculate annual operating expenses.

    The eight category inputs are summed as annual dollar amounts; they
    are not scaled by the unit count.

    Args:
        scenario: Scenario holding the category inputs, management fee %
            and payroll burden %.
        total_units: Number of units.
        net_revenue: Annual net revenue (basis for the management fee).
        payroll: Payroll rows.
        property_tax_total: Annual property tax.

    Returns:
        OpExResult with the category breakdown and totals.
    """
    category_totals = {
        key: as_number(value) for key, value in scenario.opex_category_values.items()
    }
    opex_categories_total = sum(category_totals.values())

    payroll_total = sum(
        calculate_payroll_row_total(row, scenario.payroll_burden_pct) for row in payroll
    )

    mgmt_fee_total = as_number(net_revenue) * as_number(scenario.mgmt_fee_pct)
    property_tax_total = as_number(property_tax_total)

    total_opex = opex_categories_total + payroll_total + mgmt_fee_total + property_tax_total

    return OpExResult(
        category_totals=category_totals,
        opex_categories_total=opex_categories_total,
        payroll_total=payroll_total,
        mgmt_fee_total=mgmt_fee_total,
        property_tax_total=property_tax_total,
        total_opex=total_opex,
        opex_per_unit=safe_divide(total_opex, total_units),
        opex_ratio=safe_divide(total_opex, net_revenue),
    )
