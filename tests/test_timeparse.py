from datetime import date, datetime

from app.utils.timeparse import (
    add_minutes, at_minutes, date_for_day, format_minutes, parse_date, parse_hhmm, parse_time_slot,
)


def test_parse_hhmm():
    assert parse_hhmm("08:30") == 510
    assert parse_hhmm("8:05") == 485
    assert parse_hhmm("17:30:00") == 1050
    assert parse_hhmm("24:00") is None
    assert parse_hhmm("9.30") is None
    assert parse_hhmm(None) is None


def test_format_and_add_minutes():
    assert format_minutes(545) == "09:05"
    assert format_minutes(24 * 60 + 10) == "23:59"
    assert add_minutes("16:30", 45) == "17:15"


def test_parse_date():
    assert parse_date("2026-03-02") == date(2026, 3, 2)
    assert parse_date("2026-03-02T10:00:00Z") == date(2026, 3, 2)
    assert parse_date("02/03/2026") is None
    assert parse_date("") is None


def test_date_for_day():
    assert date_for_day("2026-03-02", 1) == date(2026, 3, 2)
    assert date_for_day(date(2026, 3, 30), 5) == date(2026, 4, 3)


def test_at_minutes():
    assert at_minutes(date(2026, 3, 2), 510) == datetime(2026, 3, 2, 8, 30)


def test_parse_time_slot_24h():
    assert parse_time_slot("08:30-11:30") == (510, 690)
    assert parse_time_slot("13:30 - 17:30") == (810, 1050)


def test_parse_time_slot_meridiem():
    assert parse_time_slot("8:30–11:30 AM") == (510, 690)
    assert parse_time_slot("1:00–4:00 PM") == (780, 960)
    # a range ending at noon starts in the morning
    assert parse_time_slot("9:00–12:00 PM") == (540, 720)


def test_parse_time_slot_invalid():
    assert parse_time_slot("morning") is None
    assert parse_time_slot("") is None
    assert parse_time_slot(None) is None
