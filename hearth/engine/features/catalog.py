"""Fixed catalog of daily behavioral features.

The catalog is the single source of truth for which features exist, how they
are grouped and how much each one counts in the aggregate anomaly score.
Group membership and weight are static metadata, never computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FeatureCatalogError(ValueError):
    """The feature catalog is malformed (duplicate, unknown or unweighted key)."""


class FeatureKey(str, Enum):
    FIRST_ACTIVITY = "first_activity"
    LAST_ACTIVITY = "last_activity"
    AWAKE_DURATION = "awake_duration"
    TOTAL_EVENTS = "total_events"
    ACTIVE_HOURS = "active_hours"
    MORNING_EVENTS = "morning_events"
    AFTERNOON_EVENTS = "afternoon_events"
    EVENING_EVENTS = "evening_events"
    LONGEST_GAP_MINUTES = "longest_gap_minutes"
    NIGHT_EVENTS = "night_events"
    NIGHT_ACTIVE_HOURS = "night_active_hours"
    ROOMS_ACTIVE = "rooms_active"
    ROOM_RATIO = "room_ratio"
    MAIN_ROOM_PCT = "main_room_pct"
    MOTION_EVENTS = "motion_events"
    DOOR_EVENTS = "door_events"
    TRANSITION_COUNT = "transition_count"
    ACTIVITY_REGULARITY = "activity_regularity"


class FeatureGroup(str, Enum):
    TIMING = "timing"
    VOLUME = "volume"
    REST = "rest"
    ROOM = "room"
    DEVICE = "device"
    PATTERN = "pattern"


GROUP_LABELS = {
    FeatureGroup.TIMING: "Timing",
    FeatureGroup.VOLUME: "Volume",
    FeatureGroup.REST: "Rest & Night",
    FeatureGroup.ROOM: "Room",
    FeatureGroup.DEVICE: "Device type",
    FeatureGroup.PATTERN: "Pattern",
}


@dataclass(frozen=True)
class FeatureDefinition:
    """Static description of one feature."""

    key: FeatureKey
    label: str
    unit: str
    group: FeatureGroup
    weight: float  # relative importance in the aggregate score
    is_time: bool = False  # value is a clock time in minutes since midnight
    is_derived: bool = False  # computed from other fields, not read directly
    is_room_feature: bool = False  # only meaningful when rooms_available > 1


def _feature(key, label, unit, group, weight, **flags):
    return FeatureDefinition(FeatureKey(key), label, unit, group, weight, **flags)


_T, _V, _R = FeatureGroup.TIMING, FeatureGroup.VOLUME, FeatureGroup.REST
_RM, _D, _P = FeatureGroup.ROOM, FeatureGroup.DEVICE, FeatureGroup.PATTERN

_DEFINITIONS = [
    _feature("first_activity", "First activity", "time", _T, 1.5, is_time=True),
    _feature("last_activity", "Last activity", "time", _T, 1.0, is_time=True),
    _feature("awake_duration", "Awake duration", "min", _T, 1.0, is_derived=True),
    _feature("total_events", "Total events", "events", _V, 1.5),
    _feature("active_hours", "Active hours", "hours", _V, 1.0),
    _feature("morning_events", "Morning events (06-12)", "events", _V, 1.0, is_derived=True),
    _feature("afternoon_events", "Afternoon events (12-18)", "events", _V, 0.75, is_derived=True),
    _feature("evening_events", "Evening events (18-23)", "events", _V, 0.75, is_derived=True),
    _feature("longest_gap_minutes", "Longest gap", "min", _R, 1.5),
    _feature("night_events", "Night events", "events", _R, 1.25),
    _feature("night_active_hours", "Night active hours", "hours", _R, 1.0),
    _feature("rooms_active", "Active rooms", "rooms", _RM, 0.75, is_room_feature=True),
    _feature("room_ratio", "Room ratio", "ratio", _RM, 0.5, is_derived=True, is_room_feature=True),
    _feature("main_room_pct", "Dominant room share", "%", _RM, 0.75, is_derived=True, is_room_feature=True),
    _feature("motion_events", "Motion events", "events", _D, 1.0),
    _feature("door_events", "Door events", "events", _D, 1.0),
    _feature(
        "transition_count", "Room transitions", "transitions", _P, 1.0, is_derived=True, is_room_feature=True
    ),
    _feature("activity_regularity", "Activity regularity", "similarity", _P, 1.25, is_derived=True),
]


def validate_catalog(definitions, required_keys=FeatureKey) -> list[FeatureDefinition]:
    """Check that every required key appears exactly once with a positive weight.

    Raises:
        FeatureCatalogError: on duplicate, missing or unweighted entries.
    """
    seen = set()
    for definition in definitions:
        if not isinstance(definition.key, FeatureKey):
            raise FeatureCatalogError(f"Unknown feature key: {definition.key!r}")
        if definition.key in seen:
            raise FeatureCatalogError(f"Duplicate feature key: {definition.key.value}")
        if not definition.weight > 0:
            raise FeatureCatalogError(f"Feature {definition.key.value} must have a positive weight")
        seen.add(definition.key)

    missing = [key.value for key in required_keys if key not in seen]
    if missing:
        raise FeatureCatalogError(f"Catalog is missing features: {', '.join(missing)}")
    return list(definitions)


FEATURE_CATALOG: tuple[FeatureDefinition, ...] = tuple(validate_catalog(_DEFINITIONS))

FEATURES_BY_KEY: dict[FeatureKey, FeatureDefinition] = {f.key: f for f in FEATURE_CATALOG}


def get_feature(key: FeatureKey | str) -> FeatureDefinition:
    """Look up a definition by key. Raises KeyError for unknown keys."""
    try:
        return FEATURES_BY_KEY[FeatureKey(key)]
    except ValueError:
        raise KeyError(key) from None


def has_multiple_rooms(rooms_available: float | None) -> bool:
    return rooms_available is not None and rooms_available > 1


def active_features(rooms_available: float | None) -> tuple[FeatureDefinition, ...]:
    """Features applicable to a household with the given room count.

    Room features are dropped for single-room (or unknown) households. All
    enumeration of features for extraction, baselines and scoring goes
    through here.
    """
    if has_multiple_rooms(rooms_available):
        return FEATURE_CATALOG
    return tuple(f for f in FEATURE_CATALOG if not f.is_room_feature)


def feature_groups(features=FEATURE_CATALOG) -> dict[FeatureGroup, list[FeatureDefinition]]:
    """Ordered group -> definitions mapping for labeling and display."""
    groups: dict[FeatureGroup, list[FeatureDefinition]] = {group: [] for group in FeatureGroup}
    for feature in features:
        groups[feature.group].append(feature)
    return {group: items for group, items in groups.items() if items}
