"""
Unit tests for date/time coercion (lenient_coerce.dates).

Tests the layout compiler, exact layout matching against the default
layouts, and the spreadsheet serial-date fallback.
"""

from __future__ import annotations

import datetime as dt

import pandas as pd
import pytest

from lenient_coerce.dates import (
    DEFAULT_DATE_FORMATS,
    SERIAL_EPOCH,
    coerce_datetime,
    compile_layout,
    from_serial,
    parse_layouts,
)


class TestCompileLayout:
    """Tests for compile_layout()."""

    def test_literal_characters_escaped(self):
        pattern = compile_layout("%Y.%m.%d")
        assert pattern.fullmatch("2024.03.15")
        assert not pattern.fullmatch("2024-03-15")

    def test_percent_literal(self):
        assert compile_layout("%d%%").fullmatch("15%")

    def test_unsupported_directive(self):
        with pytest.raises(ValueError, match="Unsupported directive"):
            compile_layout("%Y-%j")

    def test_dangling_percent(self):
        with pytest.raises(ValueError, match="Dangling"):
            compile_layout("%Y-%")

    def test_repeated_directive(self):
        with pytest.raises(ValueError, match="Invalid date layout"):
            compile_layout("%Y-%Y")

    def test_all_defaults_compile(self):
        for layout in DEFAULT_DATE_FORMATS:
            compile_layout(layout)


class TestLayoutMatching:
    """Tests for parse_layouts() and coerce_datetime() on the layout path."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2024-03-15", dt.datetime(2024, 3, 15)),
            ("2024-03-15 01:45:00 PM", dt.datetime(2024, 3, 15, 13, 45)),
            ("2024-03-15 12:05:00 am", dt.datetime(2024, 3, 15, 0, 5)),
            ("2024-03-15 13:45:00", dt.datetime(2024, 3, 15, 13, 45)),
            ("2024-03-15T13:45:00", dt.datetime(2024, 3, 15, 13, 45)),
            ("2024/03/15", dt.datetime(2024, 3, 15)),
            ("2024/03/15 09:30:00 AM", dt.datetime(2024, 3, 15, 9, 30)),
            ("2024/03/15 21:30:00", dt.datetime(2024, 3, 15, 21, 30)),
            ("15/03/2024", dt.datetime(2024, 3, 15)),
            ("15/03/2024 13:45:00", dt.datetime(2024, 3, 15, 13, 45)),
            ("15/03/2024 01:45:00 PM", dt.datetime(2024, 3, 15, 13, 45)),
            ("15-03-2024 13:45:00", dt.datetime(2024, 3, 15, 13, 45)),
            ("15-03-2024 01:45:00 PM", dt.datetime(2024, 3, 15, 13, 45)),
        ],
    )
    def test_default_layouts(self, text, expected):
        assert coerce_datetime(text) == expected

    def test_day_first_slash_dates(self):
        """01/02/2024 is 1 February, not 2 January."""
        assert coerce_datetime("01/02/2024") == dt.datetime(2024, 2, 1)

    def test_round_trip_layout_naive(self):
        result = coerce_datetime("2024-03-15T13:45:00.1234567")
        assert result == dt.datetime(2024, 3, 15, 13, 45, 0, 123456)
        assert result.tzinfo is None

    def test_round_trip_layout_utc(self):
        result = coerce_datetime("2024-03-15T13:45:00.0000000Z")
        assert result == dt.datetime(2024, 3, 15, 13, 45, tzinfo=dt.timezone.utc)

    def test_round_trip_layout_offset(self):
        result = coerce_datetime("2024-03-15T13:45:00.0000000+09:00")
        assert result.utcoffset() == dt.timedelta(hours=9)

    def test_surrounding_whitespace_rejected(self):
        assert parse_layouts(" 2024-03-15", DEFAULT_DATE_FORMATS) is None
        assert parse_layouts("2024-03-15 ", DEFAULT_DATE_FORMATS) is None

    def test_single_digit_fields_rejected(self):
        assert parse_layouts("2024-3-5", DEFAULT_DATE_FORMATS) is None

    def test_impossible_date_rejected(self):
        assert parse_layouts("2024-02-30", DEFAULT_DATE_FORMATS) is None

    def test_invalid_12_hour_value(self):
        assert parse_layouts("2024-03-15 13:45:00 PM", DEFAULT_DATE_FORMATS) is None

    def test_month_names_are_english(self):
        result = parse_layouts("15 mar 2024", ["%d %b %Y"])
        assert result == dt.datetime(2024, 3, 15)
        assert parse_layouts("15 September 2024", ["%d %B %Y"]) == dt.datetime(2024, 9, 15)

    def test_custom_offset_directive(self):
        result = parse_layouts("2024-03-15 10:00 -0530", ["%Y-%m-%d %H:%M %z"])
        assert result.utcoffset() == -dt.timedelta(hours=5, minutes=30)

    def test_caller_formats_override_defaults(self):
        assert coerce_datetime("2024-03-15", formats=["%d/%m/%Y"], serial_fallback=False) is None
        assert coerce_datetime("15.03.2024", formats=["%d.%m.%Y"]) == dt.datetime(2024, 3, 15)

    def test_first_matching_layout_wins(self):
        formats = ["%m/%d/%Y", "%d/%m/%Y"]
        assert parse_layouts("01/02/2024", formats) == dt.datetime(2024, 1, 2)


class TestSerialDates:
    """Tests for the serial-date fallback."""

    def test_whole_days(self):
        result = coerce_datetime("45000")
        assert result == SERIAL_EPOCH + dt.timedelta(days=45000)
        assert result == dt.datetime(2023, 3, 15)

    def test_fraction_is_time_of_day(self):
        assert coerce_datetime("45000.5") == dt.datetime(2023, 3, 15, 12, 0)

    def test_numeric_input_value(self):
        assert coerce_datetime(45000) == dt.datetime(2023, 3, 15)

    def test_zero_is_epoch(self):
        assert coerce_datetime("0") == dt.datetime(1899, 12, 30)

    def test_above_upper_bound(self):
        assert coerce_datetime("3000000") is None

    def test_below_lower_bound(self):
        assert coerce_datetime("-700000") is None

    def test_bounds_are_inclusive(self):
        assert coerce_datetime("2958465") == dt.datetime(9999, 12, 31)
        assert coerce_datetime("-693593") == dt.datetime(1, 1, 1)

    def test_fractional_day_below_lower_bound(self):
        assert from_serial("-693593.5") is None

    def test_overflow_within_widened_window_is_absent(self):
        """A window wider than datetime's range must not raise."""
        assert from_serial("-693594", min_days=-800000) is None
        assert from_serial("2958466", max_days=3000000) is None

    def test_nan_rejected(self):
        assert coerce_datetime("nan") is None

    def test_not_a_number(self):
        assert coerce_datetime("yesterday") is None

    def test_fallback_disabled(self):
        assert coerce_datetime("45000", serial_fallback=False) is None

    def test_custom_window(self):
        assert from_serial("10", min_days=0, max_days=5) is None
        assert from_serial("3", epoch=dt.datetime(1904, 1, 1)) == dt.datetime(1904, 1, 4)


class TestCoerceDatetimePassThrough:
    """Tests for inputs that skip parsing."""

    def test_datetime_instance_returned(self):
        value = dt.datetime(2020, 1, 1, 8, 0)
        assert coerce_datetime(value) is value

    def test_pandas_timestamp_returned(self):
        value = pd.Timestamp("2020-01-01 08:00")
        assert coerce_datetime(value) is value

    def test_date_instance_parsed_from_text(self):
        assert coerce_datetime(dt.date(2024, 3, 15)) == dt.datetime(2024, 3, 15)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_absent(self, value):
        assert coerce_datetime(value) is None
