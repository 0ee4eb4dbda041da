"""Feature engineering: hour buckets, catalog, per-day extraction."""

from .catalog import (
    FEATURE_CATALOG,
    FeatureCatalogError,
    FeatureDefinition,
    FeatureGroup,
    FeatureKey,
    active_features,
    feature_groups,
)
from .extractor import build_feature_vector, extract_feature_value

__all__ = [
    "FEATURE_CATALOG",
    "FeatureCatalogError",
    "FeatureDefinition",
    "FeatureGroup",
    "FeatureKey",
    "active_features",
    "build_feature_vector",
    "extract_feature_value",
    "feature_groups",
]
