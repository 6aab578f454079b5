"""Tests for date parsing."""

import pytest
from datetime import date

from finwise.domain.errors import InvalidDate
from finwise.utils.date_parser import DateFormat, parse_date


def test_parse_dd_mm_yyyy():
    """Test parsing an ING style date."""
    assert parse_date("15-01-2024", DateFormat.DD_MM_YYYY) == date(2024, 1, 15)


def test_parse_dd_mm_yyyy_is_default():
    """Test the default format."""
    assert parse_date("01-12-2023") == date(2023, 12, 1)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("29-02-2024", date(2024, 2, 29)),
        ("31-12-1999", date(1999, 12, 31)),
        ("1-1-2024", date(2024, 1, 1)),
    ],
)
def test_real_dates_round_trip(value, expected):
    """Test that valid dates parse to the same calendar date."""
    result = parse_date(value)
    assert result == expected
    assert (result.day, result.month, result.year) == tuple(int(p) for p in value.split("-"))


@pytest.mark.parametrize(
    "value",
    ["31-02-2024", "31-04-2024", "29-02-2023", "00-01-2024", "15-13-2024"],
)
def test_out_of_range_dates_rejected(value):
    """Test that impossible dates fail instead of rolling over."""
    with pytest.raises(InvalidDate):
        parse_date(value)


@pytest.mark.parametrize("value", ["2024/01/15", "15-01", "aa-bb-cccc", "15-01-2024-1", "", "   "])
def test_malformed_dates_rejected(value):
    """Test strings that do not have three numeric components."""
    with pytest.raises(InvalidDate):
        parse_date(value)


def test_parse_yyyy_mm_dd_strict():
    """Test the strict ISO calendar format."""
    assert parse_date("2024-01-15", DateFormat.YYYY_MM_DD) == date(2024, 1, 15)
    with pytest.raises(InvalidDate):
        parse_date("2024-02-30", DateFormat.YYYY_MM_DD)
    with pytest.raises(InvalidDate):
        parse_date("15-01-2024", DateFormat.YYYY_MM_DD)


def test_parse_iso_timestamp():
    """Test the free-form fallback with a Revolut timestamp."""
    assert parse_date("2024-01-04 09:12:00", DateFormat.ISO) == date(2024, 1, 4)


def test_parse_iso_garbage():
    """Test the free-form fallback with unparseable input."""
    with pytest.raises(InvalidDate):
        parse_date("not a date", DateFormat.ISO)


def test_invalid_date_is_value_error():
    """Test that InvalidDate keeps ValueError compatibility."""
    with pytest.raises(ValueError):
        parse_date("31-02-2024")


@pytest.mark.parametrize("value", ["2024-01", "January 2024", "15 January", "10:32:11"])
def test_parse_iso_incomplete_rejected(value):
    """Test that missing date parts are never filled from today."""
    with pytest.raises(InvalidDate):
        parse_date(value, DateFormat.ISO)


def test_parse_iso_written_out_date():
    """Test a complete date in a non-numeric layout."""
    assert parse_date("15 January 2024", DateFormat.ISO) == date(2024, 1, 15)
    assert parse_date("2024-01-15T10:32:11+01:00", DateFormat.ISO) == date(2024, 1, 15)
