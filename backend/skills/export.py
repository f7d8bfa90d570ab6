"""
Export skill: CSV / JSON renditions of a result set.

Columns are written in declared order.  Only the text is produced here;
writing it to a file or download is up to the caller.
"""

from __future__ import annotations

import json
import math
from datetime import date, datetime
from typing import Any, Optional

import numpy as np

from core.models import ResultSet
from core.values import to_text

_CSV_SPECIAL = (",", '"', "\n", "\r")


def _csv_field(value: Any) -> str:
    """Null is an empty field; quote only around commas, quotes and line breaks."""
    text = to_text(value)
    if any(ch in text for ch in _CSV_SPECIAL):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(result_set: ResultSet) -> str:
    """Header + one line per row, joined with newlines (no trailing newline)."""
    if not result_set.columns:
        return ""
    lines = [",".join(_csv_field(c) for c in result_set.columns)]
    lines.extend(
        ",".join(_csv_field(ResultSet.value(row, c)) for c in result_set.columns)
        for row in result_set.rows
    )
    return "\n".join(lines)


def _json_value(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _json_default(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def to_json(result_set: ResultSet, *, indent: Optional[int] = 2) -> str:
    """JSON array of row objects with keys in column order; non-finite numbers become null."""
    ordered = [
        {c: _json_value(ResultSet.value(row, c)) for c in result_set.columns}
        for row in result_set.rows
    ]
    return json.dumps(ordered, indent=indent, default=_json_default, allow_nan=False)


def default_export_filename(extension: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"query-results-{on.isoformat()}.{extension.lstrip('.')}"
