"""Site area and density calculations."""

from dataclasses import dataclass
from typing import Optional

from .numeric import as_number, safe_divide
from ..models.lookups import SF_PER_ACRE


@dataclass
class SiteMetrics:
    """Site size, achieved density and product-type density range."""

    site_area_acres: float
    density_units_per_acre: float
    recommended_units_low: float
    recommended_units_high: float


def calculate_site_metrics(
    site_area_sf: Optional[float],
    total_units: Optional[float],
    density_low: Optional[float] = None,
    density_high: Optional[float] = None,
) -> SiteMetrics:
    """Calculate acreage, density and the recommended unit range.

    The recommended range is the site acreage times the product type's
    density bounds (du/acre). Missing bounds give a range of zero.

    Args:
        site_area_sf: Site area in square feet.
        total_units: Units in the scenario.
        density_low: Product type low density bound (du/acre).
        density_high: Product type high density bound (du/acre).

    Returns:
        SiteMetrics for the scenario.

    Example:
        >>> calculate_site_metrics(217_800, 200, 30, 60).site_area_acres
        5.0
    """
    site_area_acres = as_number(site_area_sf) / SF_PER_ACRE

    return SiteMetrics(
        site_area_acres=site_area_acres,
        density_units_per_acre=safe_divide(total_units, site_area_acres),
        recommended_units_low=site_area_acres * as_number(density_low),
        recommended_units_high=site_area_acres * as_number(density_high),
    )
