"""Tests for resolving the active weekly program entry."""

import pytest

from nilan_cts700.models import DateTime, WeekScheduleRecord
from nilan_cts700.schedule import resolve_active


def _record(week_day, hour, minute, temperature=21.0, fan_speed=50):
    return WeekScheduleRecord(
        week_day=week_day,
        hour=hour,
        minute=minute,
        temperature=temperature,
        dhw_temperature=50.0,
        flags=0,
        fan_speed=fan_speed,
    )


def _now(week_day, hour, minute):
    return DateTime(second=0, minute=minute, hour=hour, day=1, week_day=week_day, month=1, year=20)


MONDAY = _record(1, 8, 0, temperature=21.0)
WEDNESDAY = _record(3, 18, 30, temperature=19.5)


def test_returns_most_recent_preceding_entry():
    assert resolve_active([MONDAY, WEDNESDAY], _now(2, 10, 0)) is MONDAY


def test_wraps_around_to_last_entry_of_the_week():
    assert resolve_active([MONDAY, WEDNESDAY], _now(1, 5, 0)) is WEDNESDAY


def test_input_order_does_not_matter():
    assert resolve_active([WEDNESDAY, MONDAY], _now(4, 0, 0)) is WEDNESDAY


def test_entry_starting_now_is_active():
    assert resolve_active([MONDAY, WEDNESDAY], _now(3, 18, 30)) is WEDNESDAY


def test_one_minute_before_entry_keeps_previous():
    assert resolve_active([MONDAY, WEDNESDAY], _now(3, 18, 29)) is MONDAY


def test_single_record_is_always_active():
    assert resolve_active([MONDAY], _now(1, 0, 0)) is MONDAY
    assert resolve_active([MONDAY], _now(7, 23, 59)) is MONDAY


@pytest.mark.parametrize("now", [_now(1, 8, 0), _now(2, 0, 0), _now(1, 7, 0)])
def test_same_time_entries_resolve_by_temperature(now):
    low = _record(1, 8, 0, temperature=18.0)
    high = _record(1, 8, 0, temperature=22.0)
    assert resolve_active([high, low], now) is high
    assert resolve_active([low, high], now) is high


def test_empty_table_has_no_active_entry():
    assert resolve_active([], _now(1, 0, 0)) is None


def test_input_sequence_is_not_modified():
    records = [WEDNESDAY, MONDAY]
    resolve_active(records, _now(2, 0, 0))
    assert records == [WEDNESDAY, MONDAY]
