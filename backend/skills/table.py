"""
Result table skill: sorting and paging of displayed rows.

Used when no chart applies, or alongside one.  Sorting happens before paging;
null cells always sink to the bottom whatever the direction.
"""

from __future__ import annotations

import locale
import logging
import unicodedata
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.config import LOGGER_NAME, AnalysisSettings, get_settings
from core.models import ColumnKind, ColumnProfile, ResultSet, SortDirection, SortState, TablePage
from core.values import ScalarKind, scalar_kind, to_label, to_number

logger = logging.getLogger(LOGGER_NAME)


# ---------------------------------------------------------------------------
# Comparison keys
# ---------------------------------------------------------------------------

def collation_key(text: str) -> Tuple[str, str]:
    """Accent/case-insensitive primary order, lowercase-first tiebreak."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(base.casefold()), text.swapcase()


def _is_numeric_column(values: Sequence[Any]) -> bool:
    kinds = {scalar_kind(v) for v in values} - {ScalarKind.null}
    return kinds == {ScalarKind.number}


def _text_key(value: Any) -> Tuple[str, str]:
    return collation_key(to_label(value))


# ---------------------------------------------------------------------------
# Sorting & paging
# ---------------------------------------------------------------------------

def sort_rows(
    rows: Sequence[Mapping[str, Any]],
    column: Optional[str],
    direction: SortDirection = SortDirection.asc,
    *,
    numeric: Optional[bool] = None,
) -> List[Mapping[str, Any]]:
    """Stable sort by one column; nulls last in both directions.

    *numeric* forces numeric comparison; when None it is inferred (every
    non-null value is a real number).  In a numeric sort, cells that do not
    parse as numbers follow the numbers, ahead of the nulls, in either
    direction.
    """
    if column is None:
        return list(rows)

    present = [r for r in rows if ResultSet.value(r, column) is not None]
    missing = [r for r in rows if ResultSet.value(r, column) is None]
    if numeric is None:
        numeric = _is_numeric_column([r[column] for r in present])
    reverse = direction == SortDirection.desc

    if not numeric:
        return sorted(present, key=lambda r: _text_key(r[column]), reverse=reverse) + missing

    numbers = [r for r in present if to_number(r[column]) is not None]
    text = [r for r in present if to_number(r[column]) is None]
    return (
        sorted(numbers, key=lambda r: to_number(r[column]), reverse=reverse)
        + sorted(text, key=lambda r: _text_key(r[column]), reverse=reverse)
        + missing
    )


def total_pages(row_count: int, page_size: int) -> int:
    return -(-row_count // page_size)


def paginate(
    rows: Sequence[Mapping[str, Any]],
    page: int,
    page_size: int = 50,
) -> List[Mapping[str, Any]]:
    """Rows of a 1-based page; out-of-range pages give an empty slice."""
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(rows[start:start + page_size])


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_table_page(
    result_set: ResultSet,
    sort: Optional[SortState] = None,
    page: int = 1,
    *,
    profiles: Optional[List[ColumnProfile]] = None,
    settings: Optional[AnalysisSettings] = None,
) -> TablePage:
    settings = settings or get_settings()
    sort = sort or SortState()
    page_size = settings.page_size

    numeric: Optional[bool] = None
    if profiles is not None and sort.column is not None:
        kinds = {p.name: p.kind for p in profiles}
        if sort.column in kinds:
            numeric = kinds[sort.column] == ColumnKind.numeric

    ordered = sort_rows(result_set.rows, sort.column, sort.direction, numeric=numeric)
    rows: List[Dict[str, Any]] = [dict(r) for r in paginate(ordered, page, page_size)]
    pages = total_pages(result_set.row_count, page_size)
    if rows:
        first = (page - 1) * page_size + 1
        last = first + len(rows) - 1
    else:
        first = last = 0
        if result_set.row_count:
            logger.debug("Page %d outside 1..%d, returning no rows", page, pages)

    return TablePage(
        rows=rows,
        page=page,
        page_size=page_size,
        total_pages=pages,
        total_rows=result_set.row_count,
        sort=sort,
        first_row_number=first,
        last_row_number=last,
    )


def showing_label(page: TablePage) -> str:
    """Caption such as 'Showing 51-100 of 120'."""
    return f"Showing {page.first_row_number}-{page.last_row_number} of {page.total_rows}"
