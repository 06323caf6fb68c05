"""Static coverage charts for the alignment report."""

from .coverage import aggregate_coverage, coverage_value, sample_items, COVERAGE_COLUMNS
from .radar import ChartTheme, RadarChartRenderer

__all__ = [
    "aggregate_coverage",
    "coverage_value",
    "sample_items",
    "COVERAGE_COLUMNS",
    "ChartTheme",
    "RadarChartRenderer",
]
