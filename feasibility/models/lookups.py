"""Lookup tables and unit conversion constants."""

from enum import Enum
from typing import Dict


SF_PER_ACRE = 43_560
MIL_RATE_BASIS = 1_000  # Mil rates are quoted per $1,000 of assessed value
MONTHS_PER_YEAR = 12


class UnitType(Enum):
    """Unit types available in a scenario's unit mix."""

    STUDIO = "studio"
    ONE_BED = "one_bed"
    TWO_BED = "two_bed"
    THREE_BED = "three_bed"
    PENTHOUSE = "penthouse"
    TOWNHOME = "townhome"
    OTHER = "other"


UNIT_TYPE_LABELS: Dict[UnitType, str] = {
    UnitType.STUDIO: "Studio",
    UnitType.ONE_BED: "1 BR",
    UnitType.TWO_BED: "2 BR",
    UnitType.THREE_BED: "3 BR",
    UnitType.PENTHOUSE: "PH",
    UnitType.TOWNHOME: "TH",
    UnitType.OTHER: "Other",
}


def unit_type_label(unit_type: str) -> str:
    """Display label for a unit type value, falling back to the raw value."""
    try:
        return UNIT_TYPE_LABELS[UnitType(unit_type)]
    except ValueError:
        return unit_type
