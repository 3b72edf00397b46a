"""Tests for display formatting"""

from viral_finder.services.formatting import format_count, format_date_japanese, format_spread_rate


def test_format_count():
    assert format_count(None) == "-"
    assert format_count(0) == "0"
    assert format_count(9999) == "9,999"
    assert format_count(10000) == "1.00万"
    assert format_count(12345) == "1.23万"
    assert format_count(3456789) == "345.68万"


def test_format_date_japanese():
    assert format_date_japanese("2024-03-05T10:00:00Z") == "2024年3月5日"
    assert format_date_japanese("") == "-"
    assert format_date_japanese("not a date") == "-"


def test_format_spread_rate():
    assert format_spread_rate(3.456) == "3.46倍"
    assert format_spread_rate(None) == "-"
