"""Trailing-window baselines for every active feature."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType

import numpy as np

from hearth.engine.features.catalog import FeatureDefinition, active_features
from hearth.engine.features.extractor import extract_feature_value
from hearth.engine.features.time_buckets import (
    HOURS_PER_DAY,
    MINIMUM_DAYS_REQUIRED,
    avg,
    stddev,
    to_local_date_key,
)
from hearth.engine.schema import DailyActivityRecord, RoomActivityHourlyRow

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 14


@dataclass(frozen=True)
class BaselineDistribution:
    """Historical distribution of one feature."""

    mean: float
    stddev: float  # floored to 1
    min: float
    max: float
    sample_count: int


@dataclass(frozen=True)
class BaselineResult:
    """Per-feature distributions plus the average hourly activity shape."""

    per_feature: Mapping[str, BaselineDistribution] = field(default_factory=lambda: MappingProxyType({}))
    average_hourly_pattern: tuple[float, ...] | None = None
    sample_day_count: int = 0

    @property
    def has_baseline(self) -> bool:
        return bool(self.per_feature)

    @property
    def is_reliable(self) -> bool:
        return self.sample_day_count >= MINIMUM_DAYS_REQUIRED

    def get(self, key: str) -> BaselineDistribution | None:
        return self.per_feature.get(key)


def select_baseline_window(
    records: Iterable[DailyActivityRecord],
    selected_date: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> list[DailyActivityRecord]:
    """Records dated within [selected_date - lookback_days, selected_date)."""
    start = selected_date - timedelta(days=lookback_days)
    return [r for r in records if start <= r.date < selected_date]


def group_room_rows_by_date(
    room_rows: Iterable[RoomActivityHourlyRow],
) -> dict[str, list[RoomActivityHourlyRow]]:
    """Bucket room rows by the local date key of their hour."""
    by_date: dict[str, list[RoomActivityHourlyRow]] = {}
    for row in room_rows:
        by_date.setdefault(to_local_date_key(row.hour), []).append(row)
    return by_date


def average_hourly_pattern(records: Iterable[DailyActivityRecord]) -> tuple[float, ...] | None:
    """Elementwise mean of every complete 24-hour events_per_hour array."""
    complete = [
        r.events_per_hour
        for r in records
        if r.events_per_hour is not None and len(r.events_per_hour) == HOURS_PER_DAY
    ]
    if not complete:
        return None
    return tuple(float(v) for v in np.mean(np.asarray(complete, dtype=float), axis=0))


def compute_distribution(samples: Sequence[float]) -> BaselineDistribution | None:
    if not samples:
        return None
    return BaselineDistribution(
        mean=avg(samples),
        stddev=stddev(samples),
        min=min(samples),
        max=max(samples),
        sample_count=len(samples),
    )


def resolve_rooms_available(
    today_record: DailyActivityRecord | None,
    historical_records: Iterable[DailyActivityRecord],
) -> float | None:
    """Room count for the household: today's, else the latest known one."""
    if today_record is not None and today_record.rooms_available is not None:
        return today_record.rooms_available
    for record in sorted(historical_records, key=lambda r: r.date, reverse=True):
        if record.rooms_available is not None:
            return record.rooms_available
    return None


def compute_baseline(
    historical_records: Iterable[DailyActivityRecord],
    room_rows_by_date: Mapping[str, Sequence[RoomActivityHourlyRow]] | None = None,
    features: Iterable[FeatureDefinition] | None = None,
    selected_date: date | None = None,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> BaselineResult:
    """Estimate each feature's distribution over the historical window.

    Args:
        historical_records: Daily records preceding the selected date.
        room_rows_by_date: Room rows keyed by YYYY-MM-DD.
        features: Active features for the household. Defaults to the
            catalog filtered by the room count found in the records.
        selected_date: If given, records are first narrowed to the trailing
            window before this date.
        lookback_days: Window length in days.

    Returns:
        BaselineResult. Features without a single usable sample have no
        entry; an empty window yields an empty result.
    """
    records = list(historical_records)
    if selected_date is not None:
        records = select_baseline_window(records, selected_date, lookback_days)
    room_rows_by_date = room_rows_by_date or {}

    if not records:
        logger.debug("No historical records in baseline window")
        return BaselineResult()

    if features is None:
        features = active_features(resolve_rooms_available(None, records))
    pattern = average_hourly_pattern(records)

    per_feature = {}
    for feature in features:
        samples = []
        for record in records:
            rows = room_rows_by_date.get(to_local_date_key(record.date), ())
            value = extract_feature_value(feature, record, rows, pattern)
            if value is not None:
                samples.append(value)
        distribution = compute_distribution(samples)
        if distribution is not None:
            per_feature[feature.key.value] = distribution

    sample_day_count = len({r.date for r in records})
    logger.debug(
        "Baseline over %d days: %d features estimated, pattern=%s",
        sample_day_count,
        len(per_feature),
        "yes" if pattern is not None else "no",
    )
    return BaselineResult(
        per_feature=MappingProxyType(per_feature),
        average_hourly_pattern=pattern,
        sample_day_count=sample_day_count,
    )
