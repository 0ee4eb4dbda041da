"""Configuration dataclasses for the hearth engine and hub.

Scoring constants (severity and label thresholds, aggregate normalization)
live in hearth.engine.analysis.anomalies and are deliberately not here.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from hearth.engine.analysis.baselines import DEFAULT_LOOKBACK_DAYS
from hearth.engine.features.time_buckets import MINIMUM_DAYS_REQUIRED


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class AnalysisConfig:
    """Baseline window settings."""
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    minimum_days_required: int = MINIMUM_DAYS_REQUIRED

    @classmethod
    def from_env(cls):
        return cls(lookback_days=_env_int("HEARTH_LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS))


@dataclass
class PathConfig:
    """Location of the exported activity data."""
    export_path: Path = field(default_factory=lambda: Path.home() / "hearth" / "activity-export.json")

    @classmethod
    def from_env(cls):
        raw = os.environ.get("HEARTH_EXPORT_PATH")
        return cls(export_path=Path(raw).expanduser()) if raw else cls()


@dataclass
class HubConfig:
    """FastAPI hub settings."""
    host: str = "127.0.0.1"
    port: int = 8002
    api_key: str = ""

    @classmethod
    def from_env(cls):
        return cls(
            host=os.environ.get("HEARTH_HOST", cls.host),
            port=_env_int("HEARTH_PORT", cls.port),
            api_key=os.environ.get("HEARTH_API_KEY", ""),
        )


@dataclass
class AppConfig:
    """Top-level config composing all sub-configs."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    paths: PathConfig = field(default_factory=PathConfig)
    hub: HubConfig = field(default_factory=HubConfig)

    @classmethod
    def from_env(cls):
        return cls(
            analysis=AnalysisConfig.from_env(),
            paths=PathConfig.from_env(),
            hub=HubConfig.from_env(),
        )
