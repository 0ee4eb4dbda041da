"""Tests for trailing-window baseline estimation."""

import math
from datetime import timedelta

import pytest

from hearth.engine.analysis.baselines import (
    BaselineResult,
    average_hourly_pattern,
    compute_baseline,
    group_room_rows_by_date,
    resolve_rooms_available,
    select_baseline_window,
)
from hearth.engine.analysis.anomalies import score_against_baseline
from hearth.engine.features.catalog import active_features
from hearth.engine.features.extractor import build_feature_vector
from hearth.engine.schema import parse_room_row
from tests.conftest import SELECTED_DATE, STANDARD_HOURLY


def _days_before(n):
    return SELECTED_DATE - timedelta(days=n)


class TestWindow:
    def test_window_is_trailing_fourteen_days(self, make_record):
        records = [make_record(_days_before(n)) for n in (15, 14, 7, 1, 0)]
        window = select_baseline_window(records, SELECTED_DATE)
        assert [r.date for r in window] == [_days_before(14), _days_before(7), _days_before(1)]

    def test_custom_lookback(self, make_record):
        records = [make_record(_days_before(n)) for n in (1, 2, 3, 4)]
        assert len(select_baseline_window(records, SELECTED_DATE, lookback_days=2)) == 2

    def test_group_room_rows_by_date(self, make_room_rows):
        rows = make_room_rows(_days_before(1), [(8, "kitchen", 2)]) + make_room_rows(
            _days_before(2), [(9, "hall", 1), (10, "hall", 1)]
        )
        grouped = group_room_rows_by_date(rows)
        assert set(grouped) == {_days_before(1).isoformat(), _days_before(2).isoformat()}
        assert len(grouped[_days_before(2).isoformat()]) == 2


class TestAveragePattern:
    def test_elementwise_mean(self, make_record):
        records = [
            make_record(_days_before(1), events_per_hour=(1,) * 24),
            make_record(_days_before(2), events_per_hour=(3,) * 24),
            make_record(_days_before(3), events_per_hour=None),
        ]
        assert average_hourly_pattern(records) == (2.0,) * 24

    def test_no_complete_days(self, make_record):
        assert average_hourly_pattern([make_record(_days_before(1), events_per_hour=None)]) is None
        assert average_hourly_pattern([]) is None


class TestComputeBaseline:
    def test_empty_window(self):
        baseline = compute_baseline([], {})
        assert isinstance(baseline, BaselineResult)
        assert not baseline.has_baseline
        assert baseline.sample_day_count == 0
        assert baseline.average_hourly_pattern is None
        assert not baseline.is_reliable

    def test_window_filter_can_empty_the_history(self, make_record):
        records = [make_record(_days_before(20)), make_record(SELECTED_DATE)]
        baseline = compute_baseline(records, {}, selected_date=SELECTED_DATE)
        assert not baseline.has_baseline

    def test_distribution(self, make_record):
        records = [make_record(_days_before(n), total_events=t) for n, t in ((1, 10.0), (2, 20.0), (3, 30.0))]
        dist = compute_baseline(records, {}).get("total_events")
        assert dist.mean == pytest.approx(20)
        assert dist.stddev == pytest.approx(math.sqrt(200 / 3))
        assert (dist.min, dist.max, dist.sample_count) == (10, 30, 3)

    def test_degenerate_stddev_floored(self, make_record):
        records = [make_record(_days_before(n)) for n in (1, 2, 3)]
        dist = compute_baseline(records, {}).get("door_events")
        assert dist.mean == 6
        assert dist.stddev == 1

    def test_single_sample(self, make_record):
        dist = compute_baseline([make_record(_days_before(1))], {}).get("total_events")
        assert (dist.mean, dist.stddev, dist.sample_count) == (46, 1, 1)

    def test_missing_samples_dropped(self, make_record):
        records = [
            make_record(_days_before(1), motion_events=None),
            make_record(_days_before(2), motion_events=30.0),
        ]
        dist = compute_baseline(records, {}).get("motion_events")
        assert dist.sample_count == 1
        assert dist.mean == 30

    def test_feature_without_samples_has_no_entry(self, make_record):
        records = [make_record(_days_before(n), door_events=None) for n in (1, 2)]
        baseline = compute_baseline(records, {})
        assert baseline.get("door_events") is None
        assert baseline.get("total_events") is not None

    def test_regularity_uses_average_pattern(self, history):
        baseline = compute_baseline(history, {})
        assert baseline.average_hourly_pattern == pytest.approx(STANDARD_HOURLY)
        dist = baseline.get("activity_regularity")
        assert dist.mean == pytest.approx(1.0)
        assert dist.sample_count == 14

    def test_regularity_unscored_without_pattern(self, make_record):
        records = [make_record(_days_before(n), events_per_hour=None) for n in (1, 2)]
        baseline = compute_baseline(records, {})
        assert baseline.average_hourly_pattern is None
        assert baseline.get("activity_regularity") is None
        assert baseline.get("morning_events") is None

    def test_room_rows_matched_by_date(self, make_record, make_room_rows):
        day = _days_before(1)
        rows = make_room_rows(day, [(8, "kitchen", 3), (9, "living", 1)])
        records = [make_record(day), make_record(_days_before(2))]
        baseline = compute_baseline(records, group_room_rows_by_date(rows))
        pct = baseline.get("main_room_pct")
        assert pct.sample_count == 1
        assert pct.mean == 75
        assert baseline.get("transition_count").mean == 1

    def test_only_active_features_estimated(self, history):
        baseline = compute_baseline(history, {}, features=active_features(1))
        assert baseline.get("room_ratio") is None
        assert baseline.get("rooms_active") is None
        assert baseline.get("total_events") is not None

    def test_sample_day_count_and_reliability(self, history):
        baseline = compute_baseline(history, {})
        assert baseline.sample_day_count == 14
        assert baseline.is_reliable
        few = compute_baseline(history[:6], {})
        assert few.sample_day_count == 6
        assert not few.is_reliable
        assert few.has_baseline

    def test_result_is_read_only(self, history):
        baseline = compute_baseline(history, {})
        with pytest.raises(TypeError):
            baseline.per_feature["total_events"] = None


class TestDefaultFeatureSet:
    def test_single_room_history_has_no_room_entries(self, make_record, make_room_rows):
        records = [make_record(_days_before(n), rooms_active=1.0, rooms_available=1.0) for n in (1, 2, 3)]
        rows = make_room_rows(_days_before(1), [(8, "kitchen", 3)])
        baseline = compute_baseline(records, group_room_rows_by_date(rows))
        for key in ("room_ratio", "main_room_pct", "rooms_active", "transition_count"):
            assert baseline.get(key) is None
        assert baseline.get("total_events") is not None

    def test_scoring_defaults_follow_the_baseline(self, make_record):
        records = [make_record(_days_before(n), rooms_available=1.0) for n in (1, 2, 3)]
        today = make_record(SELECTED_DATE, rooms_available=1.0, total_events=60.0)
        baseline = compute_baseline(records, {})
        vector = build_feature_vector(today, (), baseline.average_hourly_pattern)
        result = score_against_baseline(vector, baseline)
        assert "room_ratio" not in vector
        assert "room_ratio" not in {r.key for r in result.rows}
        assert "total_events" in {r.key for r in result.rows}

    def test_rooms_available_prefers_today_then_latest(self, make_record):
        history = [make_record(_days_before(2), rooms_available=2.0), make_record(_days_before(1), rooms_available=5.0)]
        assert resolve_rooms_available(None, history) == 5.0
        assert resolve_rooms_available(make_record(SELECTED_DATE, rooms_available=3.0), history) == 3.0


@pytest.mark.usefixtures("cet_timezone")
class TestRoomRowsByLocalDay:
    def test_utc_hour_grouped_under_local_date(self):
        row = parse_room_row({"room_name": "hall", "hour": "2026-03-15T23:30:00Z", "total_events": 2})
        assert list(group_room_rows_by_date([row])) == ["2026-03-16"]
