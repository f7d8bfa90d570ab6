"""
Deterministic chart selection from column profiles.

CHART_RULES is an ordered list of (name, rule) pairs.  Each rule looks at a
SelectionContext and either returns a ChartConfig or None; the first rule
that answers wins.  Rules are plain functions so each one can be tested alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from core.config import LOGGER_NAME, AnalysisSettings, get_settings
from core.models import (
    BarChart,
    ChartConfig,
    ColumnKind,
    ColumnProfile,
    LineChart,
    PieChart,
    ResultSet,
    TableChart,
)
from skills.profile import build_profiles, split_profiles

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class SelectionContext:
    columns: List[str]
    row_count: int
    numeric: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    categorical: List[str] = field(default_factory=list)
    max_chart_rows: int = 100
    max_pie_rows: int = 20

    @classmethod
    def build(
        cls,
        columns: List[str],
        row_count: int,
        profiles: List[ColumnProfile],
        settings: Optional[AnalysisSettings] = None,
    ) -> "SelectionContext":
        settings = settings or get_settings()
        groups = split_profiles(profiles)
        return cls(
            columns=list(columns),
            row_count=row_count,
            numeric=groups[ColumnKind.numeric],
            dates=groups[ColumnKind.date],
            categorical=groups[ColumnKind.categorical],
            max_chart_rows=settings.max_chart_rows,
            max_pie_rows=settings.max_pie_rows,
        )


Rule = Callable[[SelectionContext], Optional[ChartConfig]]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def empty_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    if ctx.row_count == 0 or not ctx.columns:
        return TableChart()
    return None


def too_many_rows_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    if ctx.row_count > ctx.max_chart_rows:
        return TableChart()
    return None


def time_series_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    if ctx.dates and ctx.numeric:
        return LineChart(x_axis_key=ctx.dates[0], y_axis_keys=list(ctx.numeric))
    return None


def proportion_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    if len(ctx.categorical) == 1 and len(ctx.numeric) == 1 and ctx.row_count <= ctx.max_pie_rows:
        return PieChart(category_key=ctx.categorical[0], value_key=ctx.numeric[0])
    return None


def category_comparison_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    if ctx.categorical and ctx.numeric:
        return BarChart(x_axis_key=ctx.categorical[0], y_axis_keys=list(ctx.numeric))
    return None


def numeric_only_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    # No natural label: the first declared column stands in for one.
    if ctx.numeric and not ctx.categorical and not ctx.dates:
        return BarChart(x_axis_key=ctx.columns[0], y_axis_keys=list(ctx.numeric))
    return None


def fallback_rule(ctx: SelectionContext) -> Optional[ChartConfig]:
    return TableChart()


CHART_RULES: List[Tuple[str, Rule]] = [
    ("empty", empty_rule),
    ("too_many_rows", too_many_rows_rule),
    ("time_series", time_series_rule),
    ("proportion", proportion_rule),
    ("category_comparison", category_comparison_rule),
    ("numeric_only", numeric_only_rule),
    ("fallback", fallback_rule),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def choose_chart(ctx: SelectionContext) -> ChartConfig:
    for name, rule in CHART_RULES:
        chart = rule(ctx)
        if chart is not None:
            logger.debug("Chart rule %r matched -> %s", name, chart.chart_type.value)
            return chart
    return TableChart()


def select_chart(
    result_set: ResultSet,
    profiles: Optional[List[ColumnProfile]] = None,
    *,
    settings: Optional[AnalysisSettings] = None,
) -> ChartConfig:
    """Pick the chart for a result set, profiling it first when needed."""
    if profiles is None:
        profiles = build_profiles(
            result_set,
            sample_size=settings.sample_size if settings else None,
        )
    ctx = SelectionContext.build(result_set.columns, result_set.row_count, profiles, settings)
    return choose_chart(ctx)
