"""Tests for the minute-of-day helpers."""

from datetime import datetime, timezone

import pytest

from ferrywatch.models.vessel import FerrySchedule, Terminal
from ferrywatch.prediction.clock import format_hhmm, minutes_of_day, parse_hhmm, resolve_now, upcoming_departures
from tests.conftest import NOW


def test_resolve_now_prefers_injected_time():
    assert resolve_now(NOW) is NOW


def test_resolve_now_uses_malta_time():
    assert str(resolve_now().tzinfo) == "Europe/Malta"


def test_minutes_of_day():
    assert minutes_of_day(NOW) == 780
    assert minutes_of_day(datetime(2026, 2, 10, 0, 0, tzinfo=timezone.utc)) == 0


@pytest.mark.parametrize(
    "value,expected",
    [("00:00", 0), ("09:05", 545), ("23:59", 1439), (" 7:30 ", 450)],
)
def test_parse_hhmm(value, expected):
    assert parse_hhmm(value) == expected


@pytest.mark.parametrize("value", ["", "noon", "24:00", "12:60", "12", "1:2:3", None])
def test_parse_hhmm_rejects_garbage(value):
    assert parse_hhmm(value) is None


def test_format_hhmm():
    assert format_hhmm(545) == "09:05"
    assert format_hhmm(804.4) == "13:24"
    assert format_hhmm(1440 + 70) == "01:10"


def test_upcoming_departures_keeps_order_and_now():
    schedule = FerrySchedule(date="2026-02-10", cirkewwa=["12:00", "13:00", "bad", "14:15"], mgarr=["13:30"])
    assert upcoming_departures(schedule, Terminal.CIRKEWWA, 780) == [780, 855]
    assert upcoming_departures(schedule, Terminal.MGARR, 780) == [810]
    assert upcoming_departures(None, Terminal.MGARR, 780) == []
