"""
Tests for cell value classification and column profiling.
"""

from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from core.models import ColumnKind, ResultSet
from core.values import (
    ScalarKind,
    format_cell,
    is_date_like,
    is_null,
    is_numeric,
    scalar_kind,
    to_label,
    to_number,
)
from skills.profile import build_profiles, detect_column_kind, split_profiles


class TestIsNumeric:
    """Tests for the numeric predicate."""

    @pytest.mark.parametrize("value", [
        0, 42, -3.5, Decimal("1.25"), np.int64(7), np.float32(1.5),
        "12", "  12.5  ", "-4", "+4", "1e3", ".5", "5.", "0x1F", "0b101",
    ])
    def test_numeric_values(self, value):
        assert is_numeric(value) is True

    @pytest.mark.parametrize("value", [
        None, True, False, "", "   ", "abc", "12abc", "1,234", "$5", "1_000",
        "Infinity", "NaN", "1e400", float("nan"), float("inf"), date(2024, 1, 1),
    ])
    def test_non_numeric_values(self, value):
        assert is_numeric(value) is False

    def test_to_number_coerces_strings(self):
        assert to_number(" 3.25 ") == 3.25
        assert to_number("0x10") == 16.0
        assert to_number("n/a") is None


class TestIsDateLike:
    """Tests for date-like detection (prefix patterns, not validation)."""

    @pytest.mark.parametrize("value", [
        "2024-01-15",
        "2024-01-15T10:30:00Z",
        "01/15/2024",
        "2024/01/15",
        "Jan 5, 2024",
        "jan 5 2024",
        "SEP 30, 1999 and more",
        "9999-99-99",
        date(2024, 1, 1),
        datetime(2024, 1, 1, 12, 0),
        pd.Timestamp("2024-01-01"),
        np.datetime64("2024-01-01"),
    ])
    def test_date_like(self, value):
        assert is_date_like(value) is True

    @pytest.mark.parametrize("value", [
        None, 20240115, "15-01-2024", "1/5/2024", "Foo 5, 2024", "date: 2024-01-15",
        "Janu 5, 2024", "", pd.NaT,
    ])
    def test_not_date_like(self, value):
        assert is_date_like(value) is False


class TestScalarVariant:
    """Tests for the closed scalar variant and its text forms."""

    @pytest.mark.parametrize("value,kind", [
        (None, ScalarKind.null),
        (float("nan"), ScalarKind.null),
        (pd.NA, ScalarKind.null),
        (True, ScalarKind.boolean),
        (np.bool_(False), ScalarKind.boolean),
        (3, ScalarKind.number),
        (Decimal("2.5"), ScalarKind.number),
        ("x", ScalarKind.string),
        (date(2024, 1, 1), ScalarKind.date),
    ])
    def test_scalar_kind(self, value, kind):
        assert scalar_kind(value) == kind

    def test_is_null(self):
        assert is_null(None)
        assert is_null(float("nan"))
        assert not is_null(0)
        assert not is_null("")

    @pytest.mark.parametrize("value,expected", [
        (None, "Unknown"),
        (3.0, "3"),
        (2.5, "2.5"),
        (True, "true"),
        (date(2024, 3, 1), "2024-03-01"),
        ("", ""),
        (0, "0"),
    ])
    def test_to_label(self, value, expected):
        assert to_label(value) == expected

    def test_format_cell_shows_null(self):
        assert format_cell(None) == "NULL"
        assert format_cell(False) == "false"


class TestResultSet:
    """Tests for the ResultSet boundary contract."""

    def test_from_payload(self):
        rs = ResultSet.from_payload({"columns": ["a"], "rows": [{"a": 1}, {}]})
        assert rs.row_count == 2
        assert rs.column_values("a") == [1, None]

    def test_duplicate_columns_rejected(self):
        with pytest.raises(ValidationError):
            ResultSet(columns=["a", "a"], rows=[])

    def test_unknown_row_key_rejected(self):
        with pytest.raises(ValidationError):
            ResultSet(columns=["a"], rows=[{"a": 1, "b": 2}])

    def test_nan_reads_as_null(self):
        rs = ResultSet(columns=["a"], rows=[{"a": float("nan")}])
        assert rs.column_values("a") == [None]

    def test_is_frozen(self):
        rs = ResultSet(columns=["a"], rows=[])
        with pytest.raises(ValidationError):
            rs.columns = ["b"]


class TestColumnProfiling:
    """Tests for column kind detection."""

    @pytest.mark.parametrize("sample,expected", [
        ([1, 2, 3], ColumnKind.numeric),
        (["1", " 2 ", None], ColumnKind.numeric),
        (["2024-01-01", 5], ColumnKind.date),
        ([1, "Jan 3, 2020"], ColumnKind.date),
        ([1, "x"], ColumnKind.categorical),
        ([None, None], ColumnKind.categorical),
        ([True, False], ColumnKind.categorical),
        (["a", "b"], ColumnKind.categorical),
    ])
    def test_detect_column_kind(self, sample, expected):
        assert detect_column_kind(sample) == expected

    def test_empty_result_set_has_no_profiles(self):
        rs = ResultSet(columns=["a", "b"], rows=[])
        assert build_profiles(rs) == []

    def test_only_first_ten_rows_are_sampled(self):
        rows = [{"v": i} for i in range(10)] + [{"v": "not a number"}]
        rs = ResultSet(columns=["v"], rows=rows)
        profiles = build_profiles(rs)
        assert profiles[0].kind == ColumnKind.numeric

    def test_profiles_keep_column_order(self):
        rs = ResultSet(
            columns=["day", "region", "sales", "units"],
            rows=[{"day": "2024-01-01", "region": "N", "sales": 10, "units": "3"}],
        )
        profiles = build_profiles(rs)
        assert [p.name for p in profiles] == ["day", "region", "sales", "units"]
        groups = split_profiles(profiles)
        assert groups[ColumnKind.numeric] == ["sales", "units"]
        assert groups[ColumnKind.date] == ["day"]
        assert groups[ColumnKind.categorical] == ["region"]

    def test_missing_keys_are_null(self):
        rs = ResultSet(columns=["a", "b"], rows=[{"a": 1}, {"a": 2, "b": 5}])
        kinds = {p.name: p.kind for p in build_profiles(rs)}
        assert kinds == {"a": ColumnKind.numeric, "b": ColumnKind.numeric}

    def test_explicit_sample_size(self):
        rs = ResultSet(columns=["v"], rows=[{"v": 1}, {"v": "x"}])
        assert build_profiles(rs, sample_size=1)[0].kind == ColumnKind.numeric
        assert build_profiles(rs, sample_size=2)[0].kind == ColumnKind.categorical

    @pytest.mark.parametrize("size", [0, -3])
    def test_sample_size_below_one_rejected(self, size):
        rs = ResultSet(columns=["v"], rows=[{"v": 1}])
        with pytest.raises(ValueError):
            build_profiles(rs, sample_size=size)
