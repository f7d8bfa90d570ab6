"""
Core Pydantic models for the query insights engine.

All domain types live here so every module shares the same vocabulary.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.values import is_null


# ---------------------------------------------------------------------------
# Result set
# ---------------------------------------------------------------------------

class ResultSet(BaseModel):
    """Rectangular query output: ordered column names + rows keyed by column."""

    model_config = ConfigDict(frozen=True)

    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_shape(self) -> "ResultSet":
        seen = set()
        for name in self.columns:
            if name in seen:
                raise ValueError(f"duplicate column name {name!r}")
            seen.add(name)
        for index, row in enumerate(self.rows):
            unknown = [key for key in row if key not in seen]
            if unknown:
                raise ValueError(f"row {index} has keys not in columns: {unknown}")
        return self

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ResultSet":
        """Accept the `{columns, rows}` shape produced by query execution."""
        return cls.model_validate({
            "columns": list(payload.get("columns") or []),
            "rows": list(payload.get("rows") or []),
        })

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @staticmethod
    def value(row: Mapping[str, Any], column: str) -> Any:
        """Cell lookup; absent keys and NaN read as None."""
        cell = row.get(column)
        return None if is_null(cell) else cell

    def column_values(self, column: str, limit: Optional[int] = None) -> List[Any]:
        rows = self.rows if limit is None else self.rows[:limit]
        return [self.value(row, column) for row in rows]


# ---------------------------------------------------------------------------
# Column profile
# ---------------------------------------------------------------------------

class ColumnKind(str, Enum):
    numeric = "numeric"
    date = "date"
    categorical = "categorical"


class ColumnProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ColumnKind


# ---------------------------------------------------------------------------
# Chart configuration (tagged by chart_type)
# ---------------------------------------------------------------------------

class ChartType(str, Enum):
    table = "table"
    bar = "bar"
    line = "line"
    pie = "pie"


class TableChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_type: Literal[ChartType.table] = ChartType.table


class BarChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_type: Literal[ChartType.bar] = ChartType.bar
    x_axis_key: str
    y_axis_keys: List[str]


class LineChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_type: Literal[ChartType.line] = ChartType.line
    x_axis_key: str
    y_axis_keys: List[str]


class PieChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    chart_type: Literal[ChartType.pie] = ChartType.pie
    category_key: str
    value_key: str


ChartConfig = Annotated[
    Union[TableChart, BarChart, LineChart, PieChart],
    Field(discriminator="chart_type"),
]


# ---------------------------------------------------------------------------
# Statistics & insights
# ---------------------------------------------------------------------------

class ColumnStats(BaseModel):
    column: str
    count: int
    sum: float
    average: float
    min: float
    max: float
    median: float
    outlier_count: int = 0
    trend_change_pct: Optional[float] = None   # None when not computed or undefined


class InsightReport(BaseModel):
    row_count: int = 0
    column_count: int = 0
    numeric_column_count: int = 0
    stats: List[ColumnStats] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Result table
# ---------------------------------------------------------------------------

class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class SortState(BaseModel):
    """Single active sort column; no column means input order."""

    model_config = ConfigDict(frozen=True)

    column: Optional[str] = None
    direction: SortDirection = SortDirection.asc

    def toggle(self, column: str) -> "SortState":
        """Same column flips direction, a new column starts ascending."""
        if self.column == column:
            flipped = SortDirection.desc if self.direction == SortDirection.asc else SortDirection.asc
            return SortState(column=column, direction=flipped)
        return SortState(column=column, direction=SortDirection.asc)


class TablePage(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    page_size: int = 50
    total_pages: int = 0
    total_rows: int = 0
    sort: SortState = Field(default_factory=SortState)
    first_row_number: int = 0
    last_row_number: int = 0


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------

class AnalysisReport(BaseModel):
    fingerprint: str = ""
    profiles: List[ColumnProfile] = Field(default_factory=list)
    chart: ChartConfig = Field(default_factory=TableChart)
    chart_data: List[Dict[str, Any]] = Field(default_factory=list)
    insights: InsightReport = Field(default_factory=InsightReport)
    table: TablePage = Field(default_factory=TablePage)
