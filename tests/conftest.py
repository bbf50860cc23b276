"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_baseline_scenario,
    get_baseline_unit_mix,
    get_land_comp_rows,
    get_region_rows,
)


@pytest.fixture
def baseline_scenario():
    """Baseline scenario (100 units, $21.89M budget)."""
    return get_baseline_scenario()


@pytest.fixture
def baseline_unit_mix():
    """Baseline unit mix (one per-SF row)."""
    return get_baseline_unit_mix()


@pytest.fixture
def region_rows():
    """Three pursuit report rows: DFW, ATX, DFW."""
    return get_region_rows()


@pytest.fixture
def land_comp_rows():
    """Three land comp report rows."""
    return get_land_comp_rows()
