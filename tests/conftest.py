"""Shared record factories for the hearth test suite."""

import os
import time
from datetime import date, datetime, timedelta

import pytest

from hearth.engine.schema import DailyActivityRecord, RoomActivityHourlyRow

SELECTED_DATE = date(2026, 3, 16)
CONFIG_ID = "cfg-1"

# Typical weekday: up around 07:00, busy mornings and evenings, quiet nights
STANDARD_HOURLY = (0, 0, 0, 0, 0, 0, 0, 3, 5, 4, 2, 2, 3, 2, 2, 2, 3, 4, 5, 4, 3, 2, 0, 0)

STANDARD_FIELDS = {
    "events_per_hour": STANDARD_HOURLY,
    "total_events": 46.0,
    "active_hours": 15.0,
    "longest_gap_minutes": 420.0,
    "night_events": 0.0,
    "night_active_hours": 0.0,
    "rooms_active": 3.0,
    "rooms_available": 4.0,
    "motion_events": 40.0,
    "door_events": 6.0,
    "first_activity": "07:05",
    "last_activity": "21:40",
}


def build_record(day, config_id=CONFIG_ID, **overrides):
    fields = {**STANDARD_FIELDS, **overrides}
    return DailyActivityRecord(date=day, config_id=config_id, **fields)


def build_room_rows(day, entries):
    """entries: iterable of (hour, room_name, total_events)."""
    return [
        RoomActivityHourlyRow(
            room_name=room,
            hour=datetime(day.year, day.month, day.day, hour),
            motion_events=total,
            door_events=0,
            total_events=total,
        )
        for hour, room, total in entries
    ]


def build_history(selected_date=SELECTED_DATE, days=14, **overrides):
    """One record per day before selected_date; total_events cycles 40/45/50."""
    records = []
    for offset in range(1, days + 1):
        day = selected_date - timedelta(days=offset)
        fields = {"total_events": 40.0 + (offset % 3) * 5, **overrides}
        records.append(build_record(day, **fields))
    return records


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def make_room_rows():
    return build_room_rows


@pytest.fixture
def history():
    return build_history()


@pytest.fixture
def cet_timezone():
    """Run the test with the process local zone set to Central European Time."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "CET-1CEST,M3.5.0,M10.5.0/3"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()
