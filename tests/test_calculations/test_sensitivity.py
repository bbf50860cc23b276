"""Tests for rent, hard cost and land cost sensitivity."""

import numpy as np
import pytest

from feasibility.calculations import calculate_all
from feasibility.calculations.sensitivity import (
    calculate_hard_cost_sensitivity,
    calculate_land_cost_sensitivity,
    calculate_rent_sensitivity,
    calculate_sensitivity_matrix,
)
from feasibility.core.config import settings


class TestRentSensitivity:
    """Tests for one-way rent sensitivity."""

    def test_zero_step_matches_base(self, baseline_scenario, baseline_unit_mix):
        """The zero step reproduces the base calculation."""
        base = calculate_all(baseline_scenario, baseline_unit_mix)
        rows = calculate_rent_sensitivity(baseline_scenario, baseline_unit_mix, rent_steps=[0])

        assert rows[0].yoc == pytest.approx(base.unlevered_yield_on_cost)
        assert rows[0].noi == pytest.approx(base.noi)
        assert rows[0].gpr == pytest.approx(base.gross_potential_rent)

    def test_gpr_scales_with_rent(self, baseline_scenario, baseline_unit_mix):
        """A +10% rent/SF step scales GPR by 1.1; budget is unchanged."""
        rows = calculate_rent_sensitivity(baseline_scenario, baseline_unit_mix, rent_steps=[0.18])

        assert rows[0].adjusted_value == pytest.approx(1.98)
        assert rows[0].gpr == pytest.approx(1_836_000 * 1.1)
        assert rows[0].total_budget == pytest.approx(21_890_000)

    def test_yoc_increases_with_rent(self, baseline_scenario, baseline_unit_mix):
        """Higher rent steps give higher yield on cost."""
        rows = calculate_rent_sensitivity(
            baseline_scenario, baseline_unit_mix, rent_steps=[-0.10, 0, 0.10]
        )
        yocs = [r.yoc for r in rows]

        assert yocs == sorted(yocs)
        assert [r.step for r in rows] == [-0.10, 0, 0.10]

    def test_zero_base_rent(self, baseline_scenario):
        """With no base rent the GPR scale factor is 1."""
        rows = calculate_rent_sensitivity(baseline_scenario, [], rent_steps=[0.5])

        assert rows[0].gpr == 0.0
        assert rows[0].adjusted_value == pytest.approx(0.5)

    def test_default_steps_from_settings(self, baseline_scenario, baseline_unit_mix):
        """Without caller or scenario steps the configured defaults are used."""
        rows = calculate_rent_sensitivity(baseline_scenario, baseline_unit_mix)
        assert [r.step for r in rows] == settings.DEFAULT_RENT_STEPS

    def test_scenario_steps_override_settings(self, baseline_scenario, baseline_unit_mix):
        """Scenario-level steps win over the configured defaults."""
        baseline_scenario.sensitivity_rent_steps = [-0.2, 0.2]
        rows = calculate_rent_sensitivity(baseline_scenario, baseline_unit_mix)
        assert [r.step for r in rows] == [-0.2, 0.2]


class TestCostSensitivity:
    """Tests for hard cost and land cost sensitivity."""

    def test_hard_cost_step(self, baseline_scenario, baseline_unit_mix):
        """+$10/NRSF raises hard and soft cost together."""
        rows = calculate_hard_cost_sensitivity(
            baseline_scenario, baseline_unit_mix, hard_cost_steps=[10]
        )

        assert rows[0].adjusted_value == pytest.approx(190)
        assert rows[0].total_budget == pytest.approx(16_150_000 * 1.3 + 2_000_000)
        assert rows[0].gpr == pytest.approx(1_836_000)

    def test_yoc_falls_with_hard_cost(self, baseline_scenario, baseline_unit_mix):
        """Higher hard cost gives lower yield on cost."""
        rows = calculate_hard_cost_sensitivity(
            baseline_scenario, baseline_unit_mix, hard_cost_steps=[-10, 0, 10]
        )
        yocs = [r.yoc for r in rows]
        assert yocs == sorted(yocs, reverse=True)

    def test_land_cost_step(self, baseline_scenario, baseline_unit_mix):
        """+$1M land adds $1M to the budget and leaves NOI unchanged without land tax."""
        base, up = calculate_land_cost_sensitivity(
            baseline_scenario, baseline_unit_mix, land_cost_steps=[0, 1_000_000]
        )

        assert up.adjusted_value == pytest.approx(3_000_000)
        assert up.total_budget == pytest.approx(base.total_budget + 1_000_000)
        assert up.noi == pytest.approx(base.noi)

    def test_land_cost_changes_land_tax(self, baseline_scenario, baseline_unit_mix):
        """Assessed land follows the adjusted land cost."""
        baseline_scenario.tax_mil_rate = 20
        baseline_scenario.tax_assessed_pct_land = 1.0
        base, up = calculate_land_cost_sensitivity(
            baseline_scenario, baseline_unit_mix, land_cost_steps=[0, 1_000_000]
        )

        assert base.noi - up.noi == pytest.approx(20_000)


class TestSensitivityMatrix:
    """Tests for the two-way YoC grid."""

    def test_shape_and_base(self, baseline_scenario, baseline_unit_mix):
        """Grid is rent steps x hard cost steps; the base cell is the base YoC."""
        base = calculate_all(baseline_scenario, baseline_unit_mix)
        matrix = calculate_sensitivity_matrix(
            baseline_scenario,
            baseline_unit_mix,
            rent_steps=[-0.1, 0, 0.1],
            hard_cost_steps=[-10, -5, 0, 5, 10],
        )

        assert matrix.values.shape == (3, 5)
        assert matrix.base_rent_idx == 1
        assert matrix.base_hc_idx == 2
        assert matrix.base_yoc == pytest.approx(base.unlevered_yield_on_cost)

    def test_monotonic(self, baseline_scenario, baseline_unit_mix):
        """YoC rises down the rent axis and falls along the hard cost axis."""
        matrix = calculate_sensitivity_matrix(
            baseline_scenario, baseline_unit_mix,
            rent_steps=[-0.1, 0, 0.1], hard_cost_steps=[-10, 0, 10],
        )

        assert np.all(np.diff(matrix.values, axis=0) > 0)
        assert np.all(np.diff(matrix.values, axis=1) < 0)

    def test_matches_one_way_rows(self, baseline_scenario, baseline_unit_mix):
        """The zero hard cost column equals the rent sensitivity."""
        steps = [-0.1, 0, 0.1]
        matrix = calculate_sensitivity_matrix(
            baseline_scenario, baseline_unit_mix, rent_steps=steps, hard_cost_steps=[0]
        )
        rows = calculate_rent_sensitivity(baseline_scenario, baseline_unit_mix, rent_steps=steps)

        assert list(matrix.values[:, 0]) == pytest.approx([r.yoc for r in rows])

    def test_no_zero_step_uses_middle(self, baseline_scenario, baseline_unit_mix):
        """Without a zero step the base index is the middle of the axis."""
        matrix = calculate_sensitivity_matrix(
            baseline_scenario, baseline_unit_mix,
            rent_steps=[0.05, 0.1, 0.15, 0.2], hard_cost_steps=[5, 10, 15],
        )

        assert matrix.base_rent_idx == 2
        assert matrix.base_hc_idx == 1

    def test_to_dataframe(self, baseline_scenario, baseline_unit_mix):
        """DataFrame is indexed by rent step with hard cost steps as columns."""
        matrix = calculate_sensitivity_matrix(
            baseline_scenario, baseline_unit_mix,
            rent_steps=[-0.1, 0, 0.1], hard_cost_steps=[-10, 0, 10],
        )
        df = matrix.to_dataframe()

        assert list(df.index) == [-0.1, 0, 0.1]
        assert list(df.columns) == [-10, 0, 10]
        assert df.loc[0.0, 0.0] == pytest.approx(matrix.base_yoc)
