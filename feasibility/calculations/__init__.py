"""Calculation modules for the development feasibility engine."""

from .numeric import as_number, safe_divide
from .site import calculate_site_metrics, SiteMetrics
from .unit_mix import (
    calculate_unit_mix_row,
    calculate_unit_mix_aggregates,
    effective_monthly_rent,
    resolve_total_units,
    UnitMixRowCalc,
    UnitMixAggregates,
)
from .revenue import calculate_revenue, RevenueResult
from .budget import calculate_budget, calculate_soft_cost, BudgetResult
from .property_tax import calculate_property_tax, PropertyTaxResult
from .opex import calculate_opex, calculate_payroll_row_total, OpExResult
from .returns import calculate_returns, ReturnsResult

# Unified entry point
from .engine import calculate_all, CalculationResults

# Sensitivity analysis
from .sensitivity import (
    SensitivityRow,
    SensitivityMatrix,
    calculate_rent_sensitivity,
    calculate_hard_cost_sensitivity,
    calculate_land_cost_sensitivity,
    calculate_sensitivity_matrix,
)

from .formula_registry import FormulaCategory, FormulaDefinition, FormulaRegistry

__all__ = [
    "as_number",
    "safe_divide",
    "calculate_site_metrics",
    "SiteMetrics",
    "calculate_unit_mix_row",
    "calculate_unit_mix_aggregates",
    "effective_monthly_rent",
    "resolve_total_units",
    "UnitMixRowCalc",
    "UnitMixAggregates",
    "calculate_revenue",
    "RevenueResult",
    "calculate_budget",
    "calculate_soft_cost",
    "BudgetResult",
    "calculate_property_tax",
    "PropertyTaxResult",
    "calculate_opex",
    "calculate_payroll_row_total",
    "OpExResult",
    "calculate_returns",
    "ReturnsResult",
    "calculate_all",
    "CalculationResults",
    # Sensitivity
    "SensitivityRow",
    "SensitivityMatrix",
    "calculate_rent_sensitivity",
    "calculate_hard_cost_sensitivity",
    "calculate_land_cost_sensitivity",
    "calculate_sensitivity_matrix",
    # Formula registry
    "FormulaCategory",
    "FormulaDefinition",
    "FormulaRegistry",
]
