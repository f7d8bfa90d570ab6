"""
Chart data builder.

Takes a ChartConfig + ResultSet → the list of records the chart renders.
The frontend simply draws what it receives; no computation is needed there.

Chart data contract:
- table: rows as-is (shallow copies).
- pie: {"name": label, "value": number}.
- line: x field (raw value) + one number per y field.
- bar: x field (label, "Unknown" for null) + one number per y field.

Values bound for a numeric slot that cannot be coerced become 0; rows are
never dropped, so the output always has one record per input row.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from core.config import LOGGER_NAME
from core.models import BarChart, ChartConfig, ChartType, LineChart, PieChart, ResultSet
from core.values import to_label, to_number

logger = logging.getLogger(LOGGER_NAME)


def _number_or_zero(value: Any) -> float:
    number = to_number(value)
    return 0 if number is None else number


# ---------------------------------------------------------------------------
# Per-type data builders
# ---------------------------------------------------------------------------

def _build_table(result_set: ResultSet, chart: ChartConfig) -> List[Dict[str, Any]]:
    return [dict(row) for row in result_set.rows]


def _build_pie(result_set: ResultSet, chart: PieChart) -> List[Dict[str, Any]]:
    return [
        {
            "name": to_label(ResultSet.value(row, chart.category_key)),
            "value": _number_or_zero(ResultSet.value(row, chart.value_key)),
        }
        for row in result_set.rows
    ]


def _series_record(
    row: Mapping[str, Any],
    chart: ChartConfig,
    x_value: Any,
) -> Dict[str, Any]:
    record: Dict[str, Any] = {chart.x_axis_key: x_value}
    # y keys are written last: if x is also a series, the number wins
    for key in chart.y_axis_keys:
        record[key] = _number_or_zero(ResultSet.value(row, key))
    return record


def _build_line(result_set: ResultSet, chart: LineChart) -> List[Dict[str, Any]]:
    return [
        _series_record(row, chart, ResultSet.value(row, chart.x_axis_key))
        for row in result_set.rows
    ]


def _build_bar(result_set: ResultSet, chart: BarChart) -> List[Dict[str, Any]]:
    return [
        _series_record(row, chart, to_label(ResultSet.value(row, chart.x_axis_key)))
        for row in result_set.rows
    ]


_BUILDERS: Dict[ChartType, Callable[[ResultSet, Any], List[Dict[str, Any]]]] = {
    ChartType.table: _build_table,
    ChartType.pie: _build_pie,
    ChartType.line: _build_line,
    ChartType.bar: _build_bar,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_chart_data(chart: ChartConfig, result_set: ResultSet) -> List[Dict[str, Any]]:
    """Reshape the rows of *result_set* into the records *chart* expects."""
    builder = _BUILDERS[chart.chart_type]
    data = builder(result_set, chart)
    logger.debug("Built %d %s records", len(data), chart.chart_type.value)
    return data
