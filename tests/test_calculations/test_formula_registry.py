"""Tests for the metric formula registry."""

import dataclasses

import networkx as nx
import pytest

from feasibility.calculations import CalculationResults
from feasibility.calculations.formula_registry import FormulaCategory, FormulaRegistry

RESULT_FIELDS = [f.name for f in dataclasses.fields(CalculationResults)]


class TestFormulaRegistry:
    """Test the formula registry."""

    def test_every_result_is_registered(self):
        """Each CalculationResults field has a formula."""
        for name in RESULT_FIELDS:
            assert FormulaRegistry.get(f"results.{name}") is not None, name

    def test_no_unknown_results(self):
        """The registry has no result paths that the engine does not produce."""
        registered = {p for p in FormulaRegistry.get_all() if p.startswith("results.")}
        assert registered == {f"results.{name}" for name in RESULT_FIELDS}

    def test_can_get_formula_by_path(self):
        """Can retrieve a specific formula."""
        formula = FormulaRegistry.get("results.total_budget")

        assert formula is not None
        assert formula.name == "Total Budget"
        assert "land_cost" in formula.formula

    def test_can_get_by_category(self):
        """Can filter formulas by category."""
        budget = FormulaRegistry.get_by_category(FormulaCategory.BUDGET)

        assert len(budget) > 0
        for formula in budget:
            assert formula.category == FormulaCategory.BUDGET

    def test_inputs_are_registered(self):
        """Every input a formula reads is itself registered."""
        all_formulas = FormulaRegistry.get_all()
        for path, formula in all_formulas.items():
            for input_path in formula.inputs:
                assert input_path in all_formulas, f"{path} reads unknown {input_path}"

    def test_no_input_from_later_stage(self):
        """A formula only reads inputs from its own or an earlier stage."""
        all_formulas = FormulaRegistry.get_all()
        for path, formula in all_formulas.items():
            for input_path in formula.inputs:
                upstream = all_formulas[input_path]
                assert upstream.category.stage <= formula.category.stage, (
                    f"{path} ({formula.category.value}) reads {input_path} "
                    f"({upstream.category.value})"
                )

    def test_dependents(self):
        """Total budget feeds the per-unit costs and yield on cost."""
        dependents = FormulaRegistry.get_dependents("results.total_budget")

        assert "results.cost_per_unit" in dependents
        assert "results.unlevered_yield_on_cost" in dependents

    def test_ancestors(self):
        """Yield on cost traces back to the unit mix and the land cost."""
        ancestors = FormulaRegistry.get_all_ancestors("results.unlevered_yield_on_cost")

        assert "inputs.unit_mix" in ancestors
        assert "inputs.land_cost" in ancestors
        assert "results.property_tax_total" in ancestors

    def test_descendants(self):
        """The mil rate only reaches opex-and-later metrics."""
        descendants = FormulaRegistry.get_all_descendants("inputs.tax_mil_rate")

        assert "results.noi" in descendants
        assert "results.total_budget" not in descendants


class TestDependencyGraph:
    """Tests for the networkx dependency graph."""

    def test_graph_is_acyclic(self):
        """The dependency graph has no cycles."""
        graph = FormulaRegistry.build_dependency_graph()

        assert isinstance(graph, nx.DiGraph)
        assert nx.is_directed_acyclic_graph(graph)

    def test_node_attributes(self):
        """Nodes carry the formula name and category."""
        graph = FormulaRegistry.build_dependency_graph()
        node = graph.nodes["results.noi"]

        assert node["name"] == "Net Operating Income"
        assert node["category"] == "Returns"

    def test_evaluation_order(self):
        """Every result comes after the results it reads."""
        order = FormulaRegistry.evaluation_order()
        position = {path: i for i, path in enumerate(order)}

        assert len(order) == len(RESULT_FIELDS)
        for path in order:
            for input_path in FormulaRegistry.get_inputs(path):
                if input_path.startswith("results."):
                    assert position[input_path] < position[path]

    def test_evaluation_order_is_stable(self):
        """Repeated calls give the same order."""
        assert FormulaRegistry.evaluation_order() == FormulaRegistry.evaluation_order()


class TestReset:
    """Tests for clearing the registry."""

    def test_reset_repopulates_lazily(self):
        """After reset the registry is rebuilt on next lookup."""
        before = len(FormulaRegistry.get_all())
        FormulaRegistry.reset()

        assert len(FormulaRegistry.get_all()) == before
