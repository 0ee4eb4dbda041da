"""Anomaly engine: pure computation over already-fetched activity rows."""

from hearth.engine.analysis.anomalies import score_against_baseline
from hearth.engine.analysis.baselines import compute_baseline
from hearth.engine.analysis.day_analysis import analyze_day
from hearth.engine.features.catalog import FEATURE_CATALOG
from hearth.engine.features.extractor import extract_feature_value

__all__ = [
    "FEATURE_CATALOG",
    "analyze_day",
    "compute_baseline",
    "extract_feature_value",
    "score_against_baseline",
]
