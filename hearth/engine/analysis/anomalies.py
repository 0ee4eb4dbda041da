"""Z-score anomaly scoring of one day against its trailing baseline."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Literal

from hearth.engine.analysis.baselines import BaselineResult
from hearth.engine.features.catalog import FEATURE_CATALOG, FeatureDefinition
from hearth.engine.features.time_buckets import format_minutes_to_time, is_missing

HIGH_SEVERITY_Z = 2.0
MEDIUM_SEVERITY_Z = 1.0

# Weighting between the single worst deviation and the weighted average.
MAX_Z_WEIGHT = 0.6
AVG_Z_WEIGHT = 0.4
# A combined deviation of 3 standard deviations maps to a full score of 1.
AGGREGATE_NORMALIZATION = 3.0

ELEVATED_THRESHOLD = 0.33
STRONG_THRESHOLD = 0.66

LABEL_NORMAL = "normal"
LABEL_ELEVATED = "elevated"
LABEL_STRONG = "strongly anomalous"

Severity = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class ScoreRow:
    """One feature's deviation from baseline."""

    key: str
    value: float
    mean: float
    stddev: float
    z_score: float
    severity: Severity


@dataclass(frozen=True)
class ScoreResult:
    rows: tuple[ScoreRow, ...] = ()
    aggregate: float = 0.0
    label: str = LABEL_NORMAL


def z_score(value: float | None, mean: float | None, std: float | None) -> float:
    if is_missing(value) or is_missing(mean) or is_missing(std) or std == 0:
        return 0.0
    return (value - mean) / std


def classify_severity(z: float) -> Severity:
    magnitude = abs(z)
    if magnitude > HIGH_SEVERITY_Z:
        return "high"
    if magnitude > MEDIUM_SEVERITY_Z:
        return "medium"
    return "low"


def classify_aggregate(aggregate: float) -> str:
    if aggregate < ELEVATED_THRESHOLD:
        return LABEL_NORMAL
    if aggregate < STRONG_THRESHOLD:
        return LABEL_ELEVATED
    return LABEL_STRONG


def aggregate_score(rows: Iterable[ScoreRow], weights: Mapping[str, float]) -> float:
    """Blend of max |z| and weighted mean |z|, normalized and clamped to [0, 1]."""
    rows = list(rows)
    if not rows:
        return 0.0
    max_abs_z = max(abs(r.z_score) for r in rows)
    total_weight = sum(weights[r.key] for r in rows)
    weighted_avg_abs_z = sum(weights[r.key] * abs(r.z_score) for r in rows) / total_weight
    combined = MAX_Z_WEIGHT * max_abs_z + AVG_Z_WEIGHT * weighted_avg_abs_z
    return min(1.0, max(0.0, combined / AGGREGATE_NORMALIZATION))


def score_against_baseline(
    today_vector: Mapping[str, float | None],
    baseline: BaselineResult,
    features: Iterable[FeatureDefinition] | None = None,
) -> ScoreResult:
    """Score today's feature values against the baseline.

    Features missing either a today value or a baseline entry are left out of
    the rows rather than scored as zero. Without an explicit feature list the
    features the baseline was estimated for are scored.
    """
    if features is None:
        features = [f for f in FEATURE_CATALOG if f.key.value in baseline.per_feature]
    features = list(features)
    rows = []
    for feature in features:
        key = feature.key.value
        value = today_vector.get(key)
        distribution = baseline.get(key)
        if is_missing(value) or distribution is None:
            continue
        z = z_score(value, distribution.mean, distribution.stddev)
        rows.append(
            ScoreRow(
                key=key,
                value=value,
                mean=distribution.mean,
                stddev=distribution.stddev,
                z_score=z,
                severity=classify_severity(z),
            )
        )

    weights = {f.key.value: f.weight for f in features}
    aggregate = aggregate_score(rows, weights)
    return ScoreResult(rows=tuple(rows), aggregate=aggregate, label=classify_aggregate(aggregate))


def _format_value(value: float, definition: FeatureDefinition) -> str:
    if definition.is_time:
        return format_minutes_to_time(value)
    if float(value).is_integer():
        return f"{value:.0f}"
    return f"{value:.2f}"


def describe_row(row: ScoreRow, definition: FeatureDefinition) -> str:
    """One-line summary such as ``total_events is 6.0σ above baseline (50 vs 20±5)``."""
    direction = "above" if row.z_score >= 0 else "below"
    return (
        f"{row.key} is {abs(row.z_score):.1f}σ {direction} baseline "
        f"({_format_value(row.value, definition)} vs "
        f"{_format_value(row.mean, definition)}±{row.stddev:.0f})"
    )
