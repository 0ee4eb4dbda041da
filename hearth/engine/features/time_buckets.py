"""Hour-bucket helpers over a day's 24-slot ``events_per_hour`` array.

Every function here is total: malformed input yields None, 0 or False
instead of raising, so callers can treat "no data" uniformly.
"""

import math
from datetime import date, datetime

import numpy as np

# Minimum days of history before a baseline is presented as reliable
MINIMUM_DAYS_REQUIRED = 7

DAY_START_HOUR = 5  # activity detection starts at 05:00
NIGHT_START_HOUR = 23
NIGHT_END_HOUR = 6

HOURS_PER_DAY = 24


def _usable(events_per_hour) -> bool:
    return events_per_hour is not None and len(events_per_hour) >= HOURS_PER_DAY


def _count(events_per_hour, hour: int) -> float:
    value = events_per_hour[hour] if 0 <= hour < len(events_per_hour) else 0
    return value or 0


def calculate_day_start(events_per_hour) -> int | None:
    """Minutes since midnight at which the household's day started.

    Looks for the first hour between 05:00 and noon with at least two events
    and follow-up activity within the next two hours. Falls back to the first
    hour from 05:00 onwards with any activity.
    """
    if not _usable(events_per_hour):
        return None

    for hour in range(DAY_START_HOUR, 12):
        if _count(events_per_hour, hour) >= 2:
            if _count(events_per_hour, hour + 1) > 0 or _count(events_per_hour, hour + 2) > 0:
                return hour * 60

    for hour in range(DAY_START_HOUR, HOURS_PER_DAY):
        if _count(events_per_hour, hour) > 0:
            return hour * 60

    return None


def sum_events_in_range(events_per_hour, start_hour: int, end_hour: int) -> float:
    """Sum events for hours start_hour..end_hour, both inclusive."""
    if not _usable(events_per_hour):
        return 0
    start = max(0, start_hour)
    end = min(HOURS_PER_DAY - 1, end_hour)
    return sum(_count(events_per_hour, h) for h in range(start, end + 1))


def get_day_events(events_per_hour) -> float:
    """Events between DAY_START_HOUR and NIGHT_START_HOUR."""
    return get_day_events_until_hour(events_per_hour, NIGHT_START_HOUR)


def get_day_events_until_hour(events_per_hour, until_hour: int) -> float:
    if not events_per_hour:
        return 0
    end = min(until_hour, NIGHT_START_HOUR)
    return sum(_count(events_per_hour, h) for h in range(DAY_START_HOUR, end))


def get_active_day_hours(events_per_hour) -> int:
    """Day hours (05:00-23:00) with at least one event."""
    return get_active_day_hours_until_hour(events_per_hour, NIGHT_START_HOUR)


def get_active_day_hours_until_hour(events_per_hour, until_hour: int) -> int:
    if not events_per_hour:
        return 0
    end = min(until_hour, NIGHT_START_HOUR)
    return sum(1 for h in range(DAY_START_HOUR, end) if _count(events_per_hour, h) > 0)


def is_night_hour(hour: int) -> bool:
    return hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR


def time_to_minutes(time_str: str | None) -> int:
    """Convert ``HH:MM`` or ``HH:MM:SS`` to minutes since midnight.

    Returns 0 for empty or unparseable input. A real 00:00 is also 0, so
    callers deriving durations must check for that case themselves.
    """
    if not time_str:
        return 0
    parts = str(time_str).split(":")
    try:
        return int(parts[0]) * 60 + int(parts[1])
    except (ValueError, IndexError):
        return 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def format_minutes_to_time(minutes: float | None) -> str | None:
    """Format minutes since midnight as zero-padded ``HH:MM``.

    Fractional minutes are rounded before splitting, so 419.6 reads 07:00.
    """
    if minutes is None:
        return None
    hours, mins = divmod(round_half_up(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def avg(values) -> float | None:
    if not values:
        return None
    return float(np.mean(values))


def stddev(values) -> float:
    """Population standard deviation, floored to 1.

    The floor covers fewer than two samples and zero variance so that
    downstream z-scores never divide by zero.
    """
    if not values or len(values) < 2:
        return 1.0
    result = float(np.std(values))
    return result or 1.0


def cosine_similarity(a, b) -> float:
    """Cosine similarity of two equal-length count vectors (0 when undefined)."""
    if a is None or b is None or len(a) != len(b):
        return 0.0
    va = np.nan_to_num(np.asarray(a, dtype=float))
    vb = np.nan_to_num(np.asarray(b, dtype=float))
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def awake_duration(first_activity: str | None, last_activity: str | None) -> int | None:
    """Minutes between first and last activity of the day.

    None when either time is missing, or when both are midnight, which is
    how an unset record reads rather than a real midnight-to-midnight span.
    """
    if not first_activity or not last_activity:
        return None
    first = time_to_minutes(first_activity)
    last = time_to_minutes(last_activity)
    if first == 0 and last == 0:
        return None
    return max(0, last - first)


def local_date(value: date | datetime) -> date:
    """Calendar day of a date or datetime in local time.

    Aware datetimes (e.g. ``...Z`` hour stamps) are converted to the local
    zone first, so 23:30 UTC is already the next day in CET. Naive datetimes
    are already wall-clock.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def to_local_date_key(value: date | datetime) -> str:
    """``YYYY-MM-DD`` of the household's local day for a date or datetime."""
    day = local_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def is_missing(value) -> bool:
    """True for None and NaN."""
    return value is None or (isinstance(value, float) and math.isnan(value))
