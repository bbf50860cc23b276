"""Sensitivity analysis on rent, hard cost and land cost.

Each function re-runs the revenue -> budget -> property tax -> opex ->
returns chain with one input shifted by a list of deltas. The unit mix is
rolled up once per call; site area plays no part in any output here.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .budget import calculate_budget
from .engine import as_rows, as_scenario
from .numeric import as_number
from .opex import calculate_opex
from .property_tax import calculate_property_tax
from .returns import calculate_returns
from .revenue import calculate_revenue
from .unit_mix import UnitMixAggregates, calculate_unit_mix_aggregates, resolve_total_units
from ..core.config import settings
from ..core.logging import get_logger
from ..models.scenario import PayrollRow, Scenario, SoftCostDetailRow, UnitMixRow

logger = get_logger(__name__)

ScenarioLike = Union[Scenario, Mapping[str, Any], None]
UnitMixLike = Optional[Iterable[Union[UnitMixRow, Mapping[str, Any]]]]
PayrollLike = Optional[Iterable[Union[PayrollRow, Mapping[str, Any]]]]
SoftCostLike = Optional[Iterable[Union[SoftCostDetailRow, Mapping[str, Any]]]]


@dataclass
class SensitivityRow:
    """Outcome of one step of a one-way sensitivity."""

    step: float
    adjusted_value: float
    total_budget: float
    gpr: float
    noi: float
    yoc: float


@dataclass
class SensitivityMatrix:
    """Yield on cost for every (rent step, hard cost step) pair.

    ``values[i, j]`` is the YoC with ``rent_steps[i]`` applied to rent/SF and
    ``hard_cost_steps[j]`` applied to hard cost/NRSF.
    """

    rent_steps: List[float]
    hard_cost_steps: List[float]
    values: np.ndarray
    base_rent_idx: int
    base_hc_idx: int

    @property
    def base_yoc(self) -> float:
        if self.values.size == 0:
            return 0.0
        return float(self.values[self.base_rent_idx, self.base_hc_idx])

    def to_dataframe(self) -> pd.DataFrame:
        """YoC grid with rent steps as the index and hard cost steps as columns."""
        return pd.DataFrame(
            self.values,
            index=pd.Index(self.rent_steps, name="rent_step"),
            columns=pd.Index(self.hard_cost_steps, name="hard_cost_step"),
        )


@dataclass
class _Base:
    scenario: Scenario
    mix: UnitMixAggregates
    total_units: float
    payroll: List[PayrollRow]
    soft_cost_details: List[SoftCostDetailRow]


def _prepare(
    scenario: ScenarioLike,
    unit_mix: UnitMixLike,
    payroll: PayrollLike,
    soft_cost_details: SoftCostLike,
) -> _Base:
    scenario = as_scenario(scenario)
    mix = calculate_unit_mix_aggregates(as_rows(unit_mix, UnitMixRow), scenario.efficiency_ratio)
    return _Base(
        scenario=scenario,
        mix=mix,
        total_units=resolve_total_units(scenario.total_units, mix),
        payroll=as_rows(payroll, PayrollRow),
        soft_cost_details=as_rows(soft_cost_details, SoftCostDetailRow),
    )


def _evaluate(
    base: _Base,
    step: float,
    adjusted_value: float,
    gpr: float,
    hard_cost_per_nrsf: Optional[float],
    land_cost: Optional[float],
) -> SensitivityRow:
    s = base.scenario

    rev = calculate_revenue(gpr, s.other_income_per_unit_month, base.total_units, s.vacancy_rate)
    bud = calculate_budget(
        hard_cost_per_nrsf,
        base.mix.total_nrsf,
        base.mix.total_gbsf,
        land_cost,
        s.soft_cost_pct,
        s.use_detailed_soft_costs,
        base.soft_cost_details,
        base.total_units,
        0.0,
    )
    tax = calculate_property_tax(
        bud.hard_cost,
        bud.land_cost,
        bud.soft_cost,
        s.tax_assessed_pct_hard,
        s.tax_assessed_pct_land,
        s.tax_assessed_pct_soft,
        s.tax_mil_rate,
        base.total_units,
    )
    opex = calculate_opex(s, base.total_units, rev.net_revenue, base.payroll, tax.property_tax)
    ret = calculate_returns(
        rev.net_revenue,
        opex.total_opex,
        bud.total_budget,
        base.total_units,
        base.mix.total_nrsf,
    )

    return SensitivityRow(
        step=step,
        adjusted_value=adjusted_value,
        total_budget=bud.total_budget,
        gpr=gpr,
        noi=ret.noi,
        yoc=ret.unlevered_yield_on_cost,
    )


def _rent_adjustment(mix: UnitMixAggregates, step: float) -> tuple[float, float]:
    """Adjusted rent/SF and the GPR scaled to match it."""
    base_rent_psf = mix.weighted_avg_rent_per_sf
    adjusted_rent_psf = base_rent_psf + step
    scale_factor = adjusted_rent_psf / base_rent_psf if base_rent_psf > 0 else 1.0
    return adjusted_rent_psf, mix.gross_potential_rent * scale_factor


def _resolve_steps(
    steps: Optional[Sequence[float]],
    scenario_steps: Optional[Sequence[float]],
    default_steps: Sequence[float],
) -> List[float]:
    if steps is not None:
        return [float(s) for s in steps]
    if scenario_steps is not None:
        return [float(s) for s in scenario_steps]
    return [float(s) for s in default_steps]


def _base_index(steps: Sequence[float]) -> int:
    """Index of the zero step, or the middle index when there is none."""
    for i, step in enumerate(steps):
        if step == 0:
            return i
    return len(steps) // 2


def calculate_rent_sensitivity(
    scenario: ScenarioLike,
    unit_mix: UnitMixLike = None,
    payroll: PayrollLike = None,
    soft_cost_details: SoftCostLike = None,
    rent_steps: Optional[Sequence[float]] = None,
) -> List[SensitivityRow]:
    """Vary the weighted average rent/SF by each step delta.

    GPR is scaled by ``adjusted / base`` rent/SF (factor 1 when the base rent
    is zero). Costs are held at the scenario values.

    Args:
        scenario: Scenario assumptions.
        unit_mix: Unit mix rows.
        payroll: Payroll rows.
        soft_cost_details: Soft cost line items.
        rent_steps: Monthly $/SF deltas. Defaults to the scenario's own steps,
            then ``settings.DEFAULT_RENT_STEPS``.

    Returns:
        One SensitivityRow per step, in step order.
    """
    base = _prepare(scenario, unit_mix, payroll, soft_cost_details)
    steps = _resolve_steps(
        rent_steps, base.scenario.sensitivity_rent_steps, settings.DEFAULT_RENT_STEPS
    )

    rows = []
    for step in steps:
        adjusted_rent_psf, adjusted_gpr = _rent_adjustment(base.mix, step)
        rows.append(
            _evaluate(
                base,
                step,
                adjusted_rent_psf,
                adjusted_gpr,
                base.scenario.hard_cost_per_nrsf,
                base.scenario.land_cost,
            )
        )
    return rows


def calculate_hard_cost_sensitivity(
    scenario: ScenarioLike,
    unit_mix: UnitMixLike = None,
    payroll: PayrollLike = None,
    soft_cost_details: SoftCostLike = None,
    hard_cost_steps: Optional[Sequence[float]] = None,
) -> List[SensitivityRow]:
    """Vary hard cost/NRSF by each step delta; revenue is held at base.

    Soft cost follows the adjusted hard cost unless detailed soft costs are
    in use.
    """
    base = _prepare(scenario, unit_mix, payroll, soft_cost_details)
    steps = _resolve_steps(
        hard_cost_steps, base.scenario.sensitivity_hard_cost_steps, settings.DEFAULT_HARD_COST_STEPS
    )
    base_hc = as_number(base.scenario.hard_cost_per_nrsf)

    return [
        _evaluate(
            base,
            step,
            base_hc + step,
            base.mix.gross_potential_rent,
            base_hc + step,
            base.scenario.land_cost,
        )
        for step in steps
    ]


def calculate_land_cost_sensitivity(
    scenario: ScenarioLike,
    unit_mix: UnitMixLike = None,
    payroll: PayrollLike = None,
    soft_cost_details: SoftCostLike = None,
    land_cost_steps: Optional[Sequence[float]] = None,
) -> List[SensitivityRow]:
    """Vary land cost by each absolute dollar delta; revenue is held at base."""
    base = _prepare(scenario, unit_mix, payroll, soft_cost_details)
    steps = _resolve_steps(
        land_cost_steps, base.scenario.sensitivity_land_cost_steps, settings.DEFAULT_LAND_COST_STEPS
    )
    base_land = as_number(base.scenario.land_cost)

    return [
        _evaluate(
            base,
            step,
            base_land + step,
            base.mix.gross_potential_rent,
            base.scenario.hard_cost_per_nrsf,
            base_land + step,
        )
        for step in steps
    ]


def calculate_sensitivity_matrix(
    scenario: ScenarioLike,
    unit_mix: UnitMixLike = None,
    payroll: PayrollLike = None,
    soft_cost_details: SoftCostLike = None,
    rent_steps: Optional[Sequence[float]] = None,
    hard_cost_steps: Optional[Sequence[float]] = None,
) -> SensitivityMatrix:
    """Two-way YoC grid of rent/SF deltas against hard cost/NRSF deltas.

    Args:
        scenario: Scenario assumptions.
        unit_mix: Unit mix rows.
        payroll: Payroll rows.
        soft_cost_details: Soft cost line items.
        rent_steps: Monthly $/SF deltas (rows).
        hard_cost_steps: $/NRSF deltas (columns).

    Returns:
        SensitivityMatrix. The base indices point at the zero step of each
        axis, or at the middle step when an axis has no zero.

    Example:
        >>> m = calculate_sensitivity_matrix(scenario, unit_mix,
        ...                                  rent_steps=[-0.1, 0, 0.1],
        ...                                  hard_cost_steps=[-10, 0, 10])
        >>> m.values.shape
        (3, 3)
    """
    base = _prepare(scenario, unit_mix, payroll, soft_cost_details)
    rents = _resolve_steps(
        rent_steps, base.scenario.sensitivity_rent_steps, settings.DEFAULT_RENT_STEPS
    )
    hcs = _resolve_steps(
        hard_cost_steps, base.scenario.sensitivity_hard_cost_steps, settings.DEFAULT_HARD_COST_STEPS
    )
    base_hc = as_number(base.scenario.hard_cost_per_nrsf)

    values = np.zeros((len(rents), len(hcs)))
    for i, rent_step in enumerate(rents):
        adjusted_rent_psf, adjusted_gpr = _rent_adjustment(base.mix, rent_step)
        for j, hc_step in enumerate(hcs):
            values[i, j] = _evaluate(
                base,
                hc_step,
                base_hc + hc_step,
                adjusted_gpr,
                base_hc + hc_step,
                base.scenario.land_cost,
            ).yoc

    logger.debug("Sensitivity matrix %dx%d for scenario %s", len(rents), len(hcs), base.scenario.id)

    return SensitivityMatrix(
        rent_steps=rents,
        hard_cost_steps=hcs,
        values=values,
        base_rent_idx=_base_index(rents),
        base_hc_idx=_base_index(hcs),
    )
