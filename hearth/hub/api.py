"""FastAPI routes for the hearth hub."""

import asyncio
import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Security
from fastapi.security import APIKeyHeader

from hearth.engine.analysis.day_analysis import analyze_day
from hearth.engine.collectors.source import ActivitySource, AnalysisInputs, window_bounds
from hearth.engine.config import AppConfig
from hearth.engine.features.catalog import GROUP_LABELS, feature_groups

logger = logging.getLogger(__name__)

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def fetch_analysis_inputs(
    source: ActivitySource, config_id: str, selected_date: date, lookback_days: int
) -> AnalysisInputs:
    """Fetch the selected day, its window and room rows concurrently."""
    start, end = window_bounds(selected_date, lookback_days)
    today, history, room_rows = await asyncio.gather(
        asyncio.to_thread(source.get_daily_activity_record, config_id, selected_date),
        asyncio.to_thread(source.get_daily_activity_records, config_id, start, end),
        asyncio.to_thread(source.get_room_activity_hourly, config_id, start, selected_date + timedelta(days=1)),
    )
    return AnalysisInputs(today=today, history=history, room_rows=room_rows)


def _register_feature_routes(router: APIRouter) -> None:
    """Register the read-only feature catalog."""

    @router.get("/api/features")
    async def list_features():
        return {
            "groups": [
                {
                    "group": group.value,
                    "label": GROUP_LABELS[group],
                    "features": [
                        {
                            "key": f.key.value,
                            "label": f.label,
                            "unit": f.unit,
                            "weight": f.weight,
                            "is_time": f.is_time,
                            "is_derived": f.is_derived,
                            "is_room_feature": f.is_room_feature,
                        }
                        for f in features
                    ],
                }
                for group, features in feature_groups().items()
            ]
        }


def _register_analysis_routes(router: APIRouter, source: ActivitySource, config: AppConfig) -> None:
    """Register per-household analysis routes."""

    @router.get("/api/analysis/{config_id}")
    async def get_analysis(config_id: str, day: date = Query(..., alias="date")):
        lookback = config.analysis.lookback_days
        inputs = await fetch_analysis_inputs(source, config_id, day, lookback)
        if inputs.today is None:
            raise HTTPException(status_code=404, detail=f"No activity record for {config_id} on {day}")

        result = analyze_day(inputs.today, inputs.history, inputs.room_rows, day, lookback, config_id)
        if not result.baseline.is_reliable:
            logger.info(
                "Analysis for %s on %s uses only %d baseline days",
                config_id,
                day,
                result.baseline.sample_day_count,
            )
        return result.to_dict()


def create_api(source: ActivitySource, config: AppConfig | None = None) -> FastAPI:
    """Create the FastAPI app serving the catalog and per-day analyses."""
    config = config or AppConfig()

    async def verify_api_key(key: str = Security(_api_key_header)):
        """Verify API key if one is configured, otherwise allow all."""
        if config.hub.api_key and key != config.hub.api_key:
            raise HTTPException(status_code=403, detail="Invalid API key")

    app = FastAPI(title="hearth", description="Household behavioral anomaly analysis")

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    router = APIRouter(dependencies=[Depends(verify_api_key)])
    _register_feature_routes(router)
    _register_analysis_routes(router, source, config)
    app.include_router(router)
    return app
