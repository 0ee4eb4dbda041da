"""Input row shapes for the anomaly engine and tolerant parsers.

Rows arrive as plain dicts from whatever data-access layer exported them.
Parsing never guesses: a field that is absent or malformed becomes None so
that "zero events" and "no data" stay distinguishable downstream.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from hearth.engine.features.time_buckets import HOURS_PER_DAY, local_date

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "total_events",
    "active_hours",
    "longest_gap_minutes",
    "night_events",
    "night_active_hours",
    "rooms_active",
    "rooms_available",
    "motion_events",
    "door_events",
)

TIME_FIELDS = ("first_activity", "last_activity")


@dataclass(frozen=True)
class DailyActivityRecord:
    """One household's aggregated sensor activity for one calendar date."""

    date: date
    config_id: str | None = None
    events_per_hour: tuple[int, ...] | None = None  # exactly 24 slots when present
    total_events: float | None = None
    active_hours: float | None = None
    longest_gap_minutes: float | None = None
    night_events: float | None = None
    night_active_hours: float | None = None
    rooms_active: float | None = None
    rooms_available: float | None = None
    motion_events: float | None = None
    door_events: float | None = None
    first_activity: str | None = None  # HH:MM or HH:MM:SS
    last_activity: str | None = None


@dataclass(frozen=True)
class RoomActivityHourlyRow:
    """Event counts for one room in one hour bucket."""

    room_name: str
    hour: datetime
    motion_events: float = 0
    door_events: float = 0
    total_events: float = 0

    @property
    def date(self) -> date:
        return local_date(self.hour)


def _optional_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number < 0:
        return None
    return number


def _optional_time(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    parts = value.split(":")
    if len(parts) < 2 or not all(p.isdigit() for p in parts):
        return None
    return value


def _hourly_counts(value: Any) -> tuple[int, ...] | None:
    """Validate an events_per_hour array; anything but 24 counts is unusable."""
    if not isinstance(value, (list, tuple)) or len(value) != HOURS_PER_DAY:
        return None
    counts = []
    for item in value:
        number = _optional_number(item)
        if number is None:
            return None
        counts.append(int(number))
    return tuple(counts)


def parse_date(value: Any) -> date:
    """Parse a date, ISO datetime, or YYYY-MM-DD string. Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Unparseable date: {value!r}")
    if "T" in value or " " in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return date.fromisoformat(value)


def parse_hour(value: Any) -> datetime:
    """Parse an hour-bucket timestamp, keeping its wall-clock fields."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        raise ValueError(f"Unparseable hour timestamp: {value!r}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_daily_record(row: dict[str, Any]) -> DailyActivityRecord:
    """Build a DailyActivityRecord from a raw row.

    Raises ValueError only when the row has no usable ``date``.
    """
    record_date = parse_date(row.get("date"))
    config_id = row.get("config_id")
    return DailyActivityRecord(
        date=record_date,
        config_id=str(config_id) if config_id is not None else None,
        events_per_hour=_hourly_counts(row.get("events_per_hour")),
        first_activity=_optional_time(row.get("first_activity")),
        last_activity=_optional_time(row.get("last_activity")),
        **{name: _optional_number(row.get(name)) for name in SCALAR_FIELDS},
    )


def parse_room_row(row: dict[str, Any]) -> RoomActivityHourlyRow:
    """Build a RoomActivityHourlyRow. Raises ValueError without an hour."""
    return RoomActivityHourlyRow(
        room_name=str(row.get("room_name") or "unknown"),
        hour=parse_hour(row.get("hour") or row.get("hour_timestamp")),
        motion_events=_optional_number(row.get("motion_events")) or 0,
        door_events=_optional_number(row.get("door_events")) or 0,
        total_events=_optional_number(row.get("total_events")) or 0,
    )


def validate_daily_record(row: dict[str, Any]) -> list[str]:
    """Report problems with a raw daily row.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    try:
        parse_date(row.get("date"))
    except ValueError:
        errors.append(f"Invalid or missing date: {row.get('date')!r}")

    hourly = row.get("events_per_hour")
    if hourly is not None and _hourly_counts(hourly) is None:
        length = len(hourly) if isinstance(hourly, (list, tuple)) else type(hourly).__name__
        errors.append(f"events_per_hour must be {HOURS_PER_DAY} non-negative counts (got {length})")

    for name in SCALAR_FIELDS:
        value = row.get(name)
        if value is not None and _optional_number(value) is None:
            errors.append(f"{name} must be a non-negative number, got {value!r}")

    for name in TIME_FIELDS:
        value = row.get(name)
        if value is not None and _optional_time(value) is None:
            errors.append(f"{name} must be HH:MM or HH:MM:SS, got {value!r}")

    return errors
