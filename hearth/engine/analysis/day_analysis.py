"""Full analysis of one household day: features, baseline, score."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any

from hearth.engine.analysis.anomalies import ScoreResult, describe_row, score_against_baseline
from hearth.engine.analysis.baselines import (
    DEFAULT_LOOKBACK_DAYS,
    BaselineResult,
    compute_baseline,
    group_room_rows_by_date,
    resolve_rooms_available,
    select_baseline_window,
)
from hearth.engine.features.catalog import FeatureDefinition, active_features, get_feature
from hearth.engine.features.extractor import build_feature_vector
from hearth.engine.features.time_buckets import format_minutes_to_time, to_local_date_key
from hearth.engine.schema import DailyActivityRecord, RoomActivityHourlyRow


@dataclass(frozen=True)
class DayAnalysis:
    """Immutable result of analyzing one (household, date) selection."""

    selected_date: date
    config_id: str | None
    features: tuple[FeatureDefinition, ...]
    today_vector: Mapping[str, float | None] = field(default_factory=lambda: MappingProxyType({}))
    baseline: BaselineResult = field(default_factory=BaselineResult)
    score: ScoreResult = field(default_factory=ScoreResult)

    @property
    def has_today(self) -> bool:
        return bool(self.today_vector)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view; clock-time features are rendered as HH:MM."""

        def display(definition, value):
            if value is None:
                return None
            return format_minutes_to_time(value) if definition.is_time else round(value, 3)

        features = []
        for definition in self.features:
            key = definition.key.value
            dist = self.baseline.get(key)
            features.append(
                {
                    "key": key,
                    "label": definition.label,
                    "unit": definition.unit,
                    "group": definition.group.value,
                    "today": display(definition, self.today_vector.get(key)),
                    "baseline": None
                    if dist is None
                    else {
                        "mean": display(definition, dist.mean),
                        "stddev": round(dist.stddev, 3),
                        "min": display(definition, dist.min),
                        "max": display(definition, dist.max),
                        "sample_count": dist.sample_count,
                    },
                }
            )

        return {
            "config_id": self.config_id,
            "date": self.selected_date.isoformat(),
            "has_today": self.has_today,
            "baseline": {
                "has_baseline": self.baseline.has_baseline,
                "is_reliable": self.baseline.is_reliable,
                "sample_day_count": self.baseline.sample_day_count,
                "average_hourly_pattern": (
                    None
                    if self.baseline.average_hourly_pattern is None
                    else [round(v, 3) for v in self.baseline.average_hourly_pattern]
                ),
            },
            "features": features,
            "score": {
                "aggregate": round(self.score.aggregate, 4),
                "label": self.score.label,
                "rows": [
                    {
                        "key": row.key,
                        "value": row.value,
                        "mean": row.mean,
                        "stddev": row.stddev,
                        "z_score": round(row.z_score, 3),
                        "severity": row.severity,
                        "description": describe_row(row, get_feature(row.key)),
                    }
                    for row in self.score.rows
                ],
            },
        }


def analyze_day(
    today_record: DailyActivityRecord | None,
    historical_records: Iterable[DailyActivityRecord],
    room_rows: Iterable[RoomActivityHourlyRow],
    selected_date: date,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    config_id: str | None = None,
) -> DayAnalysis:
    """Run extraction, baseline estimation and scoring for one day.

    Pure function of its arguments; safe to call concurrently for
    different households.

    Args:
        today_record: Record for selected_date, or None when missing.
        historical_records: Records before selected_date (extra records
            outside the window are ignored).
        room_rows: Room rows for the window and the selected date.
        selected_date: The day being analyzed.
        lookback_days: Baseline window length.
        config_id: Household config id; defaults to today_record.config_id.
    """
    window = select_baseline_window(historical_records, selected_date, lookback_days)
    features = active_features(resolve_rooms_available(today_record, window))
    rows_by_date = group_room_rows_by_date(room_rows)

    baseline = compute_baseline(window, rows_by_date, features)
    today_vector = build_feature_vector(
        today_record,
        rows_by_date.get(to_local_date_key(selected_date), ()),
        baseline.average_hourly_pattern,
        features,
    )
    score = score_against_baseline(today_vector, baseline, features)

    return DayAnalysis(
        selected_date=selected_date,
        config_id=config_id or (today_record.config_id if today_record is not None else None),
        features=features,
        today_vector=MappingProxyType(today_vector),
        baseline=baseline,
        score=score,
    )
