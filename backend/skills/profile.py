"""
Column profiling skill.

Classifies every column of a ResultSet as numeric, date or categorical from a
small head sample.  Date detection wins over numeric so "2024-01-05" strings
never end up summed.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.config import LOGGER_NAME, get_settings
from core.models import ColumnKind, ColumnProfile, ResultSet
from core.values import is_date_like, is_numeric

logger = logging.getLogger(LOGGER_NAME)


# ---------------------------------------------------------------------------
# Column kind detection
# ---------------------------------------------------------------------------

def detect_column_kind(sample: List[object]) -> ColumnKind:
    """Classify a column from its sampled values (nulls already normalised to None)."""
    has_date = any(is_date_like(v) for v in sample)
    if has_date:
        return ColumnKind.date

    has_numeric = any(is_numeric(v) for v in sample)
    has_non_numeric = any(v is not None and not is_numeric(v) for v in sample)
    if has_numeric and not has_non_numeric:
        return ColumnKind.numeric

    return ColumnKind.categorical


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_profiles(
    result_set: ResultSet,
    *,
    sample_size: Optional[int] = None,
) -> List[ColumnProfile]:
    """Profile every column in declared order; an empty result set yields []."""
    if sample_size is None:
        sample_size = get_settings().sample_size
    if sample_size < 1:
        raise ValueError(f"sample_size must be >= 1, got {sample_size}")
    if result_set.row_count == 0:
        return []

    limit = min(sample_size, result_set.row_count)
    profiles = [
        ColumnProfile(name=c, kind=detect_column_kind(result_set.column_values(c, limit)))
        for c in result_set.columns
    ]

    if logger.isEnabledFor(logging.DEBUG):
        counts = {kind.value: names for kind, names in split_profiles(profiles).items()}
        logger.debug("Profiled %d columns from %d sample rows: %s", len(profiles), limit, counts)
    return profiles


def split_profiles(profiles: List[ColumnProfile]) -> Dict[ColumnKind, List[str]]:
    """Group column names by kind, keeping column order within each group."""
    groups: Dict[ColumnKind, List[str]] = {kind: [] for kind in ColumnKind}
    for p in profiles:
        groups[p.kind].append(p.name)
    return groups


def numeric_columns(profiles: List[ColumnProfile]) -> List[str]:
    return [p.name for p in profiles if p.kind == ColumnKind.numeric]
