"""Development feasibility core: scenario calculations and report aggregation."""

from .calculations import CalculationResults, calculate_all
from .reports import ReportEngineResult, run_report_engine

__version__ = "0.1.0"

__all__ = [
    "CalculationResults",
    "calculate_all",
    "ReportEngineResult",
    "run_report_engine",
]
