"""
Cell value helpers.

Query results arrive as loosely typed scalars.  Everything downstream goes
through these predicates and coercions instead of ad-hoc isinstance checks.
Pure functions with no I/O. They never raise on odd input.
"""

from __future__ import annotations

import math
import numbers
import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

# Closed set of cell values accepted at the boundary.
Scalar = Union[None, bool, int, float, Decimal, str, date]


class ScalarKind(str, Enum):
    number = "number"
    string = "string"
    boolean = "boolean"
    date = "date"
    null = "null"


# ---------------------------------------------------------------------------
# Null handling
# ---------------------------------------------------------------------------

def is_null(value: Any) -> bool:
    """None, pandas NA/NaT and float NaN all count as a missing cell."""
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    if isinstance(value, np.datetime64):
        return bool(np.isnat(value))
    return False


def scalar_kind(value: Any) -> ScalarKind:
    if is_null(value):
        return ScalarKind.null
    if isinstance(value, (bool, np.bool_)):
        return ScalarKind.boolean
    if isinstance(value, (date, np.datetime64)):
        return ScalarKind.date
    if isinstance(value, (numbers.Real, Decimal)):
        return ScalarKind.number
    return ScalarKind.string


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_RADIX_LITERAL = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+", re.ASCII)


def _parse_number(text: str) -> Optional[float]:
    trimmed = text.strip()
    if not trimmed:
        return None
    if _DECIMAL_LITERAL.fullmatch(trimmed):
        parsed = float(trimmed)
    elif _RADIX_LITERAL.fullmatch(trimmed):
        try:
            parsed = float(int(trimmed, 0))
        except OverflowError:
            return None
    else:
        return None
    return parsed if math.isfinite(parsed) else None


def to_number(value: Any) -> Optional[float]:
    """Float value of a numeric-coercible cell, None otherwise."""
    kind = scalar_kind(value)
    if kind == ScalarKind.number:
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return None
        return number if math.isfinite(number) else None
    if kind == ScalarKind.string and isinstance(value, str):
        return _parse_number(value)
    return None


def is_numeric(value: Any) -> bool:
    """True for real numbers and strings holding a finite number literal."""
    return to_number(value) is not None


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

# Prefix patterns; "2024-01-15T10:00" and "Jan 5, 2024 noon" both qualify.
_DATE_PREFIXES = (
    re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII),
    re.compile(r"\d{2}/\d{2}/\d{4}", re.ASCII),
    re.compile(r"\d{4}/\d{2}/\d{2}", re.ASCII),
    re.compile(
        r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\s+\d{1,2},?\s+\d{4}",
        re.ASCII | re.IGNORECASE,
    ),
)


def is_date_like(value: Any) -> bool:
    kind = scalar_kind(value)
    if kind == ScalarKind.date:
        return True
    if kind == ScalarKind.string and isinstance(value, str):
        return any(p.match(value) for p in _DATE_PREFIXES)
    return False


# ---------------------------------------------------------------------------
# Text forms
# ---------------------------------------------------------------------------

def _number_text(value: Any) -> str:
    if isinstance(value, (float, np.floating)):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return str(float(value))
    if isinstance(value, np.integer):
        return str(int(value))
    return str(value)


def to_label(value: Any, default: str = "Unknown") -> str:
    """String form of a cell; *default* stands in for null."""
    kind = scalar_kind(value)
    if kind == ScalarKind.null:
        return default
    if kind == ScalarKind.boolean:
        return "true" if value else "false"
    if kind == ScalarKind.number:
        return _number_text(value)
    if kind == ScalarKind.date:
        if isinstance(value, np.datetime64):
            return str(value)
        return value.isoformat()
    return str(value)


def to_text(value: Any) -> str:
    """Export form: null becomes the empty string."""
    return to_label(value, default="")


def format_cell(value: Any) -> str:
    """Display form used by the result table."""
    return to_label(value, default="NULL")
