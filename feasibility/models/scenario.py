"""Scenario (one-pager) data model and its line-item collections.

All numeric inputs are optional: ``None`` means "not entered yet" and is
treated as zero by the calculation engine. Nothing here validates ranges;
that is the job of the data-entry layer.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from .lookups import unit_type_label


class RentInputMode(str, Enum):
    """How a unit mix row's rent is entered."""

    PER_SF = "per_sf"
    WHOLE_DOLLAR = "whole_dollar"


class PayrollLineType(str, Enum):
    """Payroll line kind: burdened employee or fixed-fee contract."""

    EMPLOYEE = "employee"
    CONTRACT = "contract"


def _known_fields(cls, data: Mapping[str, Any]) -> dict:
    """Keep only the keys of ``data`` that are fields of dataclass ``cls``."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _coerce_enum(enum_cls, value):
    """Convert a raw value to ``enum_cls`` when possible, else keep it as-is."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class UnitMixRow:
    """Single unit type within a scenario's unit mix."""

    unit_type: str = ""
    unit_count: Optional[float] = 0
    avg_unit_sf: Optional[float] = 0.0
    rent_input_mode: Union[RentInputMode, str] = RentInputMode.PER_SF
    rent_per_sf: Optional[float] = 0.0  # Monthly rent per SF
    rent_whole_dollar: Optional[float] = 0.0  # Monthly rent per unit
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UnitMixRow":
        """Build a row from a flat record, ignoring unknown keys."""
        values = _known_fields(cls, data)
        if "rent_input_mode" in values:
            values["rent_input_mode"] = _coerce_enum(RentInputMode, values["rent_input_mode"])
        return cls(**values)

    @property
    def is_per_sf(self) -> bool:
        return self.rent_input_mode == RentInputMode.PER_SF

    @property
    def label(self) -> str:
        return unit_type_label(self.unit_type)


@dataclass
class PayrollRow:
    """Single staffing line in the operating budget."""

    role_name: str = ""
    line_type: Union[PayrollLineType, str] = PayrollLineType.EMPLOYEE
    headcount: Optional[float] = 0.0
    base_compensation: Optional[float] = 0.0  # Annual, per head
    bonus_pct: Optional[float] = 0.0
    fixed_amount: Optional[float] = 0.0  # Annual, contract lines only
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PayrollRow":
        """Build a row from a flat record, ignoring unknown keys."""
        values = _known_fields(cls, data)
        if "line_type" in values:
            values["line_type"] = _coerce_enum(PayrollLineType, values["line_type"])
        return cls(**values)

    @property
    def is_contract(self) -> bool:
        return self.line_type == PayrollLineType.CONTRACT


@dataclass
class SoftCostDetailRow:
    """Named soft cost line item (used when detailed soft costs are on)."""

    label: str = ""
    amount: Optional[float] = 0.0
    sort_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SoftCostDetailRow":
        """Build a row from a flat record, ignoring unknown keys."""
        return cls(**_known_fields(cls, data))


@dataclass
class Scenario:
    """Financial assumptions for one development concept on a pursuit."""

    # === Identity ===
    id: Optional[str] = None
    pursuit_id: Optional[str] = None
    name: str = ""
    product_type: Optional[str] = None

    # === Site & Density ===
    total_units: Optional[float] = None
    efficiency_ratio: Optional[float] = None  # NRSF / GBSF

    # === Revenue ===
    other_income_per_unit_month: Optional[float] = None
    vacancy_rate: Optional[float] = None

    # === Budget ===
    hard_cost_per_nrsf: Optional[float] = None
    land_cost: Optional[float] = None
    soft_cost_pct: Optional[float] = None  # Fraction of hard cost
    use_detailed_soft_costs: bool = False

    # === OpEx (annual dollars) ===
    opex_utilities: Optional[float] = None
    opex_repairs_maintenance: Optional[float] = None
    opex_contract_services: Optional[float] = None
    opex_marketing: Optional[float] = None
    opex_general_admin: Optional[float] = None
    opex_turnover: Optional[float] = None
    opex_misc: Optional[float] = None
    opex_insurance: Optional[float] = None
    mgmt_fee_pct: Optional[float] = None  # Fraction of net revenue

    # === Payroll ===
    payroll_burden_pct: Optional[float] = None

    # === Property Tax ===
    tax_mil_rate: Optional[float] = None
    tax_assessed_pct_hard: Optional[float] = None
    tax_assessed_pct_land: Optional[float] = None
    tax_assessed_pct_soft: Optional[float] = None

    # === Sensitivity overrides ===
    sensitivity_rent_steps: Optional[List[float]] = None
    sensitivity_hard_cost_steps: Optional[List[float]] = None
    sensitivity_land_cost_steps: Optional[List[float]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        """Build a scenario from a flat record, ignoring unknown keys.

        Persisted records carry extra columns (timestamps, stored ``calc_*``
        values, joined tables); those are dropped here.
        """
        values = _known_fields(cls, data)
        if values.get("use_detailed_soft_costs") is None:
            values.pop("use_detailed_soft_costs", None)
        return cls(**values)

    @property
    def opex_category_values(self) -> dict:
        """The eight operating expense category inputs keyed by field name."""
        return {
            "opex_utilities": self.opex_utilities,
            "opex_repairs_maintenance": self.opex_repairs_maintenance,
            "opex_contract_services": self.opex_contract_services,
            "opex_marketing": self.opex_marketing,
            "opex_general_admin": self.opex_general_admin,
            "opex_turnover": self.opex_turnover,
            "opex_misc": self.opex_misc,
            "opex_insurance": self.opex_insurance,
        }
