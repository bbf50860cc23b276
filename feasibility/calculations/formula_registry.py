"""Formula Registry for transparent calculation auditing.

Every metric produced by ``calculate_all`` is registered here with its
symbolic formula and the inputs it reads, so a reviewer can trace any
number on a one-pager back to the assumptions behind it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set


class FormulaCategory(str, Enum):
    """Calculation stages, declared in evaluation order."""
    INPUT = "Input"
    UNIT_MIX = "Unit Mix"
    SITE = "Site"
    REVENUE = "Revenue"
    BUDGET = "Budget"
    PROPERTY_TAX = "Property Tax"
    OPERATING_EXPENSES = "Operating Expenses"
    RETURNS = "Returns"

    @property
    def stage(self) -> int:
        """Position of the category in the calculation chain."""
        return list(FormulaCategory).index(self)


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path ("inputs.<field>" or "results.<field>")
        name: Human-readable name (e.g., "Total Budget")
        formula: Symbolic formula (e.g., "hard_cost + soft_cost + land_cost")
        inputs: Field paths that feed into this formula
        category: Calculation stage the value belongs to
        unit: Display unit (e.g., "$", "%", "units")
        notes: Optional explanation or caveats
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str]
    category: FormulaCategory
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of all calculation formulas.

    Populated lazily on first lookup; ``reset`` clears it for tests.
    """
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        """Register a formula definition."""
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        """Get formula definition by field path."""
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        """Get all registered formulas."""
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        """Get all formulas in a category."""
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        """Get the input field paths for a formula."""
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as an input."""
        cls._ensure_initialized()
        return [path for path, formula in cls._formulas.items() if field_path in formula.inputs]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        cls._ensure_initialized()
        ancestors = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def get_all_descendants(cls, field_path: str) -> Set[str]:
        """Get all downstream dependencies recursively."""
        cls._ensure_initialized()
        descendants = set()
        to_process = list(cls.get_dependents(field_path))

        while to_process:
            current = to_process.pop()
            if current not in descendants:
                descendants.add(current)
                to_process.extend(cls.get_dependents(current))

        return descendants

    @classmethod
    def build_dependency_graph(cls):
        """Build a networkx DiGraph of all dependencies.

        Returns:
            nx.DiGraph with a node per field path and an edge from each
            input to the formula that reads it.
        """
        try:
            import networkx as nx
        except ImportError:
            raise ImportError("networkx is required for dependency graphs. Install with: pip install networkx")

        cls._ensure_initialized()
        graph = nx.DiGraph()

        for path, formula in cls._formulas.items():
            graph.add_node(path, **{
                "name": formula.name,
                "category": formula.category.value,
                "formula": formula.formula,
            })

        for path, formula in cls._formulas.items():
            for input_path in formula.inputs:
                graph.add_edge(input_path, path)

        return graph

    @classmethod
    def evaluation_order(cls) -> List[str]:
        """Result paths in an order where every input precedes its dependents.

        Ties are broken by stage, then by path, so the order is stable.
        """
        import networkx as nx

        graph = cls.build_dependency_graph()

        def stage_key(path: str):
            formula = cls._formulas.get(path)
            stage = formula.category.stage if formula else FormulaCategory.INPUT.stage
            return (stage, path)

        return [
            path
            for path in nx.lexicographical_topological_sort(graph, key=stage_key)
            if path.startswith("results.")
        ]

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the registry is populated with formulas."""
        if not cls._initialized:
            _populate_registry()
            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset the registry (mainly for testing)."""
        cls._formulas = {}
        cls._initialized = False


def _input(field: str, name: str, unit: str = "$", notes: str = "") -> FormulaDefinition:
    return FormulaDefinition(
        field_path=f"inputs.{field}",
        name=name,
        formula="user input",
        inputs=[],
        category=FormulaCategory.INPUT,
        unit=unit,
        notes=notes,
    )


def _populate_registry() -> None:
    """Populate the registry with all calculation formulas."""

    # =========================================================================
    # INPUT FIELDS (scenario record, line items, pursuit site)
    # =========================================================================
    inputs = [
        _input("site_area_sf", "Site Area", "SF", "From the parent pursuit"),
        _input("product_type_density_low", "Density Low", "du/ac"),
        _input("product_type_density_high", "Density High", "du/ac"),
        _input("total_units", "Total Units (override)", "units",
               "When blank, the unit mix unit count is used"),
        _input("efficiency_ratio", "Efficiency Ratio", "%"),
        _input("unit_mix", "Unit Mix Rows", "rows"),
        _input("other_income_per_unit_month", "Other Income / Unit / Month"),
        _input("vacancy_rate", "Vacancy Rate", "%"),
        _input("hard_cost_per_nrsf", "Hard Cost / NRSF", "$/SF"),
        _input("land_cost", "Land Cost"),
        _input("soft_cost_pct", "Soft Cost %", "%"),
        _input("use_detailed_soft_costs", "Use Detailed Soft Costs", "flag"),
        _input("soft_cost_details", "Soft Cost Line Items", "rows"),
        _input("opex_categories", "OpEx Categories", "$/yr",
               "Utilities, R&M, contract services, marketing, G&A, turnover, misc, insurance"),
        _input("payroll", "Payroll Rows", "rows"),
        _input("payroll_burden_pct", "Payroll Burden %", "%"),
        _input("mgmt_fee_pct", "Management Fee %", "%"),
        _input("tax_mil_rate", "Mil Rate", "mils"),
        _input("tax_assessed_pct_hard", "Assessed % of Hard Cost", "%"),
        _input("tax_assessed_pct_land", "Assessed % of Land Cost", "%"),
        _input("tax_assessed_pct_soft", "Assessed % of Soft Cost", "%"),
    ]

    # =========================================================================
    # UNIT MIX
    # =========================================================================
    unit_mix = [
        FormulaDefinition(
            field_path="results.total_nrsf",
            name="Total NRSF",
            formula="Σ unit_count × avg_unit_sf (rows with unit_count > 0)",
            inputs=["inputs.unit_mix"],
            category=FormulaCategory.UNIT_MIX,
            unit="SF",
        ),
        FormulaDefinition(
            field_path="results.total_units",
            name="Total Units",
            formula="total_units input, else Σ unit_count",
            inputs=["inputs.total_units", "inputs.unit_mix"],
            category=FormulaCategory.UNIT_MIX,
            unit="units",
        ),
        FormulaDefinition(
            field_path="results.total_gbsf",
            name="Total GBSF",
            formula="total_nrsf / efficiency_ratio",
            inputs=["results.total_nrsf", "inputs.efficiency_ratio"],
            category=FormulaCategory.UNIT_MIX,
            unit="SF",
        ),
        FormulaDefinition(
            field_path="results.weighted_avg_unit_sf",
            name="Average Unit Size",
            formula="total_nrsf / total_units",
            inputs=["results.total_nrsf", "results.total_units"],
            category=FormulaCategory.UNIT_MIX,
            unit="SF",
        ),
        FormulaDefinition(
            field_path="results.gross_potential_rent",
            name="Gross Potential Rent",
            formula="Σ unit_count × monthly_rent × 12",
            inputs=["inputs.unit_mix"],
            category=FormulaCategory.UNIT_MIX,
            notes="Monthly rent is rent_per_sf × avg_unit_sf or the whole-dollar rent, per row mode",
        ),
        FormulaDefinition(
            field_path="results.weighted_avg_rent_per_sf",
            name="Average Rent / SF",
            formula="(gross_potential_rent / 12) / total_nrsf",
            inputs=["results.gross_potential_rent", "results.total_nrsf"],
            category=FormulaCategory.UNIT_MIX,
            unit="$/SF/mo",
        ),
    ]

    # =========================================================================
    # SITE & DENSITY
    # =========================================================================
    site = [
        FormulaDefinition(
            field_path="results.site_area_acres",
            name="Site Area (Acres)",
            formula="site_area_sf / 43,560",
            inputs=["inputs.site_area_sf"],
            category=FormulaCategory.SITE,
            unit="ac",
        ),
        FormulaDefinition(
            field_path="results.density_units_per_acre",
            name="Density",
            formula="total_units / site_area_acres",
            inputs=["results.total_units", "results.site_area_acres"],
            category=FormulaCategory.SITE,
            unit="du/ac",
        ),
        FormulaDefinition(
            field_path="results.recommended_units_low",
            name="Recommended Units (Low)",
            formula="site_area_acres × density_low",
            inputs=["results.site_area_acres", "inputs.product_type_density_low"],
            category=FormulaCategory.SITE,
            unit="units",
        ),
        FormulaDefinition(
            field_path="results.recommended_units_high",
            name="Recommended Units (High)",
            formula="site_area_acres × density_high",
            inputs=["results.site_area_acres", "inputs.product_type_density_high"],
            category=FormulaCategory.SITE,
            unit="units",
        ),
    ]

    # =========================================================================
    # REVENUE
    # =========================================================================
    revenue = [
        FormulaDefinition(
            field_path="results.other_income",
            name="Other Income",
            formula="other_income_per_unit_month × total_units × 12",
            inputs=["inputs.other_income_per_unit_month", "results.total_units"],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="results.gross_potential_revenue",
            name="Gross Potential Revenue",
            formula="gross_potential_rent + other_income",
            inputs=["results.gross_potential_rent", "results.other_income"],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="results.vacancy_loss",
            name="Vacancy Loss",
            formula="gross_potential_revenue × vacancy_rate",
            inputs=["results.gross_potential_revenue", "inputs.vacancy_rate"],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="results.net_revenue",
            name="Net Revenue",
            formula="gross_potential_revenue - vacancy_loss",
            inputs=["results.gross_potential_revenue", "results.vacancy_loss"],
            category=FormulaCategory.REVENUE,
        ),
    ]

    # =========================================================================
    # BUDGET
    # =========================================================================
    budget = [
        FormulaDefinition(
            field_path="results.hard_cost",
            name="Hard Cost",
            formula="hard_cost_per_nrsf × total_nrsf",
            inputs=["inputs.hard_cost_per_nrsf", "results.total_nrsf"],
            category=FormulaCategory.BUDGET,
        ),
        FormulaDefinition(
            field_path="results.hard_cost_per_gbsf",
            name="Hard Cost / GBSF",
            formula="hard_cost / total_gbsf",
            inputs=["results.hard_cost", "results.total_gbsf"],
            category=FormulaCategory.BUDGET,
            unit="$/SF",
        ),
        FormulaDefinition(
            field_path="results.soft_cost",
            name="Soft Cost",
            formula="Σ soft_cost_details.amount if detailed else hard_cost × soft_cost_pct",
            inputs=[
                "results.hard_cost",
                "inputs.soft_cost_pct",
                "inputs.use_detailed_soft_costs",
                "inputs.soft_cost_details",
            ],
            category=FormulaCategory.BUDGET,
            notes="Exactly one basis applies",
        ),
        FormulaDefinition(
            field_path="results.total_budget",
            name="Total Budget",
            formula="hard_cost + soft_cost + land_cost",
            inputs=["results.hard_cost", "results.soft_cost", "inputs.land_cost"],
            category=FormulaCategory.BUDGET,
        ),
        FormulaDefinition(
            field_path="results.cost_per_unit",
            name="Cost / Unit",
            formula="total_budget / total_units",
            inputs=["results.total_budget", "results.total_units"],
            category=FormulaCategory.BUDGET,
        ),
        FormulaDefinition(
            field_path="results.cost_per_nrsf",
            name="Cost / NRSF",
            formula="total_budget / total_nrsf",
            inputs=["results.total_budget", "results.total_nrsf"],
            category=FormulaCategory.BUDGET,
            unit="$/SF",
        ),
        FormulaDefinition(
            field_path="results.cost_per_gbsf",
            name="Cost / GBSF",
            formula="total_budget / total_gbsf",
            inputs=["results.total_budget", "results.total_gbsf"],
            category=FormulaCategory.BUDGET,
            unit="$/SF",
        ),
        FormulaDefinition(
            field_path="results.land_cost_per_unit",
            name="Land Cost / Unit",
            formula="land_cost / total_units",
            inputs=["inputs.land_cost", "results.total_units"],
            category=FormulaCategory.BUDGET,
        ),
        FormulaDefinition(
            field_path="results.land_cost_per_sf",
            name="Land Cost / SF",
            formula="land_cost / site_area_sf",
            inputs=["inputs.land_cost", "inputs.site_area_sf"],
            category=FormulaCategory.BUDGET,
            unit="$/SF",
        ),
    ]

    # =========================================================================
    # PROPERTY TAX
    # =========================================================================
    property_tax = [
        FormulaDefinition(
            field_path="results.assessed_value",
            name="Assessed Value",
            formula="hard_cost × pct_hard + land_cost × pct_land + soft_cost × pct_soft",
            inputs=[
                "results.hard_cost",
                "inputs.land_cost",
                "results.soft_cost",
                "inputs.tax_assessed_pct_hard",
                "inputs.tax_assessed_pct_land",
                "inputs.tax_assessed_pct_soft",
            ],
            category=FormulaCategory.PROPERTY_TAX,
        ),
        FormulaDefinition(
            field_path="results.property_tax_total",
            name="Property Tax",
            formula="assessed_value × (mil_rate / 1,000)",
            inputs=["results.assessed_value", "inputs.tax_mil_rate"],
            category=FormulaCategory.PROPERTY_TAX,
            notes="Mil rate is tax per $1,000 of assessed value",
        ),
        FormulaDefinition(
            field_path="results.property_tax_per_unit",
            name="Property Tax / Unit",
            formula="property_tax_total / total_units",
            inputs=["results.property_tax_total", "results.total_units"],
            category=FormulaCategory.PROPERTY_TAX,
        ),
    ]

    # =========================================================================
    # OPERATING EXPENSES
    # =========================================================================
    operating_expenses = [
        FormulaDefinition(
            field_path="results.opex_categories_total",
            name="OpEx Categories",
            formula="Σ opex_* category amounts",
            inputs=["inputs.opex_categories"],
            category=FormulaCategory.OPERATING_EXPENSES,
            notes="Category amounts are annual totals, not per unit",
        ),
        FormulaDefinition(
            field_path="results.payroll_total",
            name="Payroll",
            formula="Σ headcount × base × (1 + bonus) × (1 + burden) | contract fixed_amount",
            inputs=["inputs.payroll", "inputs.payroll_burden_pct"],
            category=FormulaCategory.OPERATING_EXPENSES,
        ),
        FormulaDefinition(
            field_path="results.mgmt_fee_total",
            name="Management Fee",
            formula="net_revenue × mgmt_fee_pct",
            inputs=["results.net_revenue", "inputs.mgmt_fee_pct"],
            category=FormulaCategory.OPERATING_EXPENSES,
        ),
        FormulaDefinition(
            field_path="results.total_opex",
            name="Total OpEx",
            formula="opex_categories_total + payroll_total + mgmt_fee_total + property_tax_total",
            inputs=[
                "results.opex_categories_total",
                "results.payroll_total",
                "results.mgmt_fee_total",
                "results.property_tax_total",
            ],
            category=FormulaCategory.OPERATING_EXPENSES,
        ),
        FormulaDefinition(
            field_path="results.opex_per_unit",
            name="OpEx / Unit",
            formula="total_opex / total_units",
            inputs=["results.total_opex", "results.total_units"],
            category=FormulaCategory.OPERATING_EXPENSES,
        ),
        FormulaDefinition(
            field_path="results.opex_ratio",
            name="OpEx Ratio",
            formula="total_opex / net_revenue",
            inputs=["results.total_opex", "results.net_revenue"],
            category=FormulaCategory.OPERATING_EXPENSES,
            unit="%",
        ),
    ]

    # =========================================================================
    # RETURNS
    # =========================================================================
    returns = [
        FormulaDefinition(
            field_path="results.noi",
            name="Net Operating Income",
            formula="net_revenue - total_opex",
            inputs=["results.net_revenue", "results.total_opex"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="results.noi_per_unit",
            name="NOI / Unit",
            formula="noi / total_units",
            inputs=["results.noi", "results.total_units"],
            category=FormulaCategory.RETURNS,
        ),
        FormulaDefinition(
            field_path="results.noi_per_sf",
            name="NOI / SF",
            formula="noi / total_nrsf",
            inputs=["results.noi", "results.total_nrsf"],
            category=FormulaCategory.RETURNS,
            unit="$/SF",
        ),
        FormulaDefinition(
            field_path="results.unlevered_yield_on_cost",
            name="Unlevered Yield on Cost",
            formula="noi / total_budget",
            inputs=["results.noi", "results.total_budget"],
            category=FormulaCategory.RETURNS,
            unit="%",
            notes="Headline feasibility metric",
        ),
    ]

    all_formulas = (
        inputs + unit_mix + site + revenue + budget + property_tax + operating_expenses + returns
    )
    for formula in all_formulas:
        FormulaRegistry.register(formula)
