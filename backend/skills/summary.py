"""
Summary statistics skill: per-column stats and insight sentences.

Only columns profiled as numeric are summarised.  Within a column, values that
are not numeric-coercible are left out (never counted as zero).
"""

from __future__ import annotations

import logging
import math
import re
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from core.config import LOGGER_NAME, AnalysisSettings, get_settings
from core.models import ColumnProfile, ColumnStats, InsightReport, ResultSet
from core.values import to_number
from skills.profile import build_profiles, numeric_columns

logger = logging.getLogger(LOGGER_NAME)

_BOLD_SPAN = re.compile(r"\*\*(.*?)\*\*")


# ---------------------------------------------------------------------------
# Number helpers
# ---------------------------------------------------------------------------

def _numbers(values) -> List[float]:
    out: List[float] = []
    for v in values:
        number = to_number(v)
        if number is not None:
            out.append(number)
    return out


def _fixed(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}"


def _grouped(value: float) -> str:
    """Thousands separators, at most three decimals: 1234.5 -> '1,234.5'."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


# ---------------------------------------------------------------------------
# Outliers & trend
# ---------------------------------------------------------------------------

def count_outliers(values: pd.Series, average: float, sigma: float = 2.0) -> int:
    """Values at least *sigma* population std devs from *average*.

    Zero spread means no outliers.  The boundary is inclusive with a relative
    float tolerance: for [1, 1, 1, 1, 100] the extreme value sits exactly two
    std devs out.
    """
    deviations = values - average
    variance = float((deviations ** 2).mean())
    std = math.sqrt(variance)
    if std == 0:
        return 0

    threshold = sigma * std
    distance = deviations.abs()
    mask = (distance > threshold) | np.isclose(distance, threshold, rtol=1e-9, atol=0.0)
    return int(mask.sum())


def trend_change_pct(result_set: ResultSet, column: str) -> Optional[float]:
    """Relative change between the first-half and second-half averages.

    Halves split the whole row sequence, not just the numeric values.
    Returns None when a half has no numbers or the first average is zero.
    """
    midpoint = result_set.row_count // 2
    values = result_set.column_values(column)
    first = _numbers(values[:midpoint])
    second = _numbers(values[midpoint:])
    if not first or not second:
        return None

    first_avg = float(pd.Series(first, dtype="float64").mean())
    second_avg = float(pd.Series(second, dtype="float64").mean())
    if first_avg == 0:
        logger.warning("Trend for %r undefined: first-half average is zero", column)
        return None
    return (second_avg - first_avg) / first_avg * 100


def compute_column_stats(
    result_set: ResultSet,
    column: str,
    settings: Optional[AnalysisSettings] = None,
) -> Optional[ColumnStats]:
    """Stats over the numeric-coercible values of one column (None if there are none)."""
    settings = settings or get_settings()
    values = _numbers(result_set.column_values(column))
    if not values:
        return None

    series = pd.Series(values, dtype="float64")
    count = len(values)
    total = float(series.sum())
    average = total / count

    stats = ColumnStats(
        column=column,
        count=count,
        sum=total,
        average=average,
        min=float(series.min()),
        max=float(series.max()),
        median=float(series.median()),
    )
    if count > 2:
        stats.outlier_count = count_outliers(series, average, settings.outlier_sigma)
    if count > 3:
        stats.trend_change_pct = trend_change_pct(result_set, column)
    return stats


# ---------------------------------------------------------------------------
# Insight text
# ---------------------------------------------------------------------------

def row_count_insight(row_count: int) -> str:
    if row_count == 1:
        return "Query returned a single row."
    return f"Query returned {_plural(row_count, 'row')}."


def column_insights(stats: ColumnStats, trend_threshold_pct: float = 5.0) -> List[str]:
    lines = [
        f"**{stats.column}**: Average = {_fixed(stats.average)}, "
        f"Min = {_fixed(stats.min)}, Max = {_fixed(stats.max)}, "
        f"Total = {_grouped(stats.sum)}"
    ]
    if stats.outlier_count > 0:
        lines.append(
            f"**{stats.column}**: Found {_plural(stats.outlier_count, 'potential outlier')} "
            "(values significantly different from average)."
        )
    change = stats.trend_change_pct
    if change is not None and abs(change) > trend_threshold_pct:
        direction = "increasing" if change > 0 else "decreasing"
        lines.append(
            f"**{stats.column}**: Shows {direction} trend ({_fixed(abs(change), 1)}% change)."
        )
    return lines


def split_bold(text: str) -> List[Tuple[str, bool]]:
    """Split an insight into (segment, is_bold) pairs, dropping empty segments."""
    parts = _BOLD_SPAN.split(text)
    return [(part, i % 2 == 1) for i, part in enumerate(parts) if part]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def summarize_result_set(
    result_set: ResultSet,
    profiles: Optional[List[ColumnProfile]] = None,
    *,
    settings: Optional[AnalysisSettings] = None,
) -> InsightReport:
    """Row-count line first, then per numeric column: summary, outliers, trend."""
    settings = settings or get_settings()
    report = InsightReport(
        row_count=result_set.row_count,
        column_count=len(result_set.columns),
    )
    if result_set.row_count == 0:
        return report

    if profiles is None:
        profiles = build_profiles(result_set, sample_size=settings.sample_size)

    insights = [row_count_insight(result_set.row_count)]
    for column in numeric_columns(profiles):
        stats = compute_column_stats(result_set, column, settings)
        if stats is None:
            continue
        report.stats.append(stats)
        insights.extend(column_insights(stats, settings.trend_threshold_pct))

    report.numeric_column_count = len(report.stats)
    report.insights = insights
    return report


def build_stats_cards(report: InsightReport) -> List[Dict[str, str]]:
    """Compact per-column figures for a stats panel."""
    return [
        {
            "column": s.column,
            "headline": f"Avg: {_fixed(s.average)} | Min: {_fixed(s.min)} | Max: {_fixed(s.max)}",
            "detail": f"Total: {_grouped(s.sum)} | Median: {_fixed(s.median)}",
        }
        for s in report.stats
    ]
