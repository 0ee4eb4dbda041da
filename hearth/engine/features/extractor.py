"""Feature extraction from one day's activity record and room rows.

The same dispatch runs for the selected day and for every historical day, so
nothing here may read state beyond its explicit arguments.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from hearth.engine.features.catalog import (
    FEATURE_CATALOG,
    FeatureCatalogError,
    FeatureDefinition,
    FeatureKey,
    active_features,
    get_feature,
)
from hearth.engine.features.time_buckets import (
    awake_duration,
    cosine_similarity,
    is_missing,
    round_half_up,
    sum_events_in_range,
    time_to_minutes,
)
from hearth.engine.schema import DailyActivityRecord, RoomActivityHourlyRow

# Analyst-chosen bands (inclusive hours), independent of the day/night
# boundaries used by the time-bucket helpers.
MORNING_HOURS = (6, 11)
AFTERNOON_HOURS = (12, 17)
EVENING_HOURS = (18, 22)

# (record, room_rows, average_pattern) -> value
Extractor = Callable[..., "float | None"]


def _has_real_times(record: DailyActivityRecord) -> bool:
    """False when both times read as midnight, i.e. the row was never filled in."""
    first = record.first_activity
    last = record.last_activity
    if first and last and time_to_minutes(first) == 0 and time_to_minutes(last) == 0:
        return False
    return True


def _clock_time(field_name: str) -> Extractor:
    def extract(record, room_rows, pattern):
        value = getattr(record, field_name)
        if not value or not _has_real_times(record):
            return None
        return float(time_to_minutes(value))

    return extract


def _scalar(field_name: str) -> Extractor:
    def extract(record, room_rows, pattern):
        return getattr(record, field_name)

    return extract


def _hour_band(hours: tuple[int, int]) -> Extractor:
    def extract(record, room_rows, pattern):
        if record.events_per_hour is None:
            return None
        return float(sum_events_in_range(record.events_per_hour, *hours))

    return extract


def _awake_duration(record, room_rows, pattern):
    minutes = awake_duration(record.first_activity, record.last_activity)
    return None if minutes is None else float(minutes)


def _room_ratio(record, room_rows, pattern):
    if not record.rooms_available or record.rooms_active is None:
        return None
    return record.rooms_active / record.rooms_available


def room_totals(room_rows: Iterable[RoomActivityHourlyRow]) -> dict[str, float]:
    """Total events per room name, in first-seen order."""
    totals: dict[str, float] = {}
    for row in room_rows:
        totals[row.room_name] = totals.get(row.room_name, 0) + row.total_events
    return totals


def _main_room_pct(record, room_rows, pattern):
    totals = room_totals(room_rows)
    grand_total = sum(totals.values())
    if not totals or grand_total <= 0:
        return None
    return float(round_half_up(100 * max(totals.values()) / grand_total))


def dominant_rooms_by_hour(room_rows: Iterable[RoomActivityHourlyRow]) -> list[tuple[object, str]]:
    """(hour, dominant room) pairs sorted by hour.

    Ties go to the room seen first for that hour. Hours without rows are
    simply absent.
    """
    best: dict[object, tuple[str, float]] = {}
    for row in room_rows:
        current = best.get(row.hour)
        if current is None or row.total_events > current[1]:
            best[row.hour] = (row.room_name, row.total_events)
    return [(hour, best[hour][0]) for hour in sorted(best)]


def _transition_count(record, room_rows, pattern):
    if not room_rows:
        return None
    dominant = [room for _, room in dominant_rooms_by_hour(room_rows)]
    return float(sum(1 for prev, cur in zip(dominant, dominant[1:]) if prev != cur))


def _activity_regularity(record, room_rows, pattern):
    if record.events_per_hour is None or pattern is None:
        return None
    return cosine_similarity(record.events_per_hour, pattern)


_EXTRACTORS: dict[FeatureKey, Extractor] = {
    FeatureKey.FIRST_ACTIVITY: _clock_time("first_activity"),
    FeatureKey.LAST_ACTIVITY: _clock_time("last_activity"),
    FeatureKey.AWAKE_DURATION: _awake_duration,
    FeatureKey.TOTAL_EVENTS: _scalar("total_events"),
    FeatureKey.ACTIVE_HOURS: _scalar("active_hours"),
    FeatureKey.MORNING_EVENTS: _hour_band(MORNING_HOURS),
    FeatureKey.AFTERNOON_EVENTS: _hour_band(AFTERNOON_HOURS),
    FeatureKey.EVENING_EVENTS: _hour_band(EVENING_HOURS),
    FeatureKey.LONGEST_GAP_MINUTES: _scalar("longest_gap_minutes"),
    FeatureKey.NIGHT_EVENTS: _scalar("night_events"),
    FeatureKey.NIGHT_ACTIVE_HOURS: _scalar("night_active_hours"),
    FeatureKey.ROOMS_ACTIVE: _scalar("rooms_active"),
    FeatureKey.ROOM_RATIO: _room_ratio,
    FeatureKey.MAIN_ROOM_PCT: _main_room_pct,
    FeatureKey.MOTION_EVENTS: _scalar("motion_events"),
    FeatureKey.DOOR_EVENTS: _scalar("door_events"),
    FeatureKey.TRANSITION_COUNT: _transition_count,
    FeatureKey.ACTIVITY_REGULARITY: _activity_regularity,
}

_unmapped = [f.key.value for f in FEATURE_CATALOG if f.key not in _EXTRACTORS]
if _unmapped:
    raise FeatureCatalogError(f"No extractor registered for: {', '.join(_unmapped)}")


def extract_feature_value(
    feature: FeatureDefinition | FeatureKey | str,
    record: DailyActivityRecord,
    room_rows: Sequence[RoomActivityHourlyRow] = (),
    average_pattern: Sequence[float] | None = None,
) -> float | None:
    """Value of one feature for one day, or None when the data is missing.

    Args:
        feature: Catalog definition or feature key.
        record: The day's aggregated activity.
        room_rows: That day's per-room hourly rows (may be empty).
        average_pattern: 24-slot historical activity shape, needed only for
            activity_regularity.

    Raises:
        KeyError: if the feature is not in the catalog.
    """
    definition = feature if isinstance(feature, FeatureDefinition) else get_feature(feature)
    value = _EXTRACTORS[definition.key](record, room_rows, average_pattern)
    if is_missing(value):
        return None
    return float(value)


def build_feature_vector(
    record: DailyActivityRecord | None,
    room_rows: Sequence[RoomActivityHourlyRow] = (),
    average_pattern: Sequence[float] | None = None,
    features: Iterable[FeatureDefinition] | None = None,
) -> dict[str, float | None]:
    """Feature key -> value for every given feature. Empty without a record.

    Defaults to the features active for the record's own room count.
    """
    if record is None:
        return {}
    if features is None:
        features = active_features(record.rooms_available)
    return {f.key.value: extract_feature_value(f, record, room_rows, average_pattern) for f in features}
