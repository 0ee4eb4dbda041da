"""Activity sources: the read side the engine depends on.

The engine never fetches rows itself. Anything implementing ActivitySource
can feed it; the implementations here serve already-exported data (a JSON
document or in-memory rows), which is what the CLI, the hub and the tests use.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Protocol

from hearth.engine.schema import (
    DailyActivityRecord,
    RoomActivityHourlyRow,
    parse_daily_record,
    parse_room_row,
)

logger = logging.getLogger(__name__)


class ActivitySource(Protocol):
    """Read interface over a household's daily and hourly room activity."""

    def get_daily_activity_record(self, config_id: str, day: date) -> DailyActivityRecord | None: ...

    def get_daily_activity_records(
        self, config_id: str, start: date, end_exclusive: date
    ) -> list[DailyActivityRecord]: ...

    def get_room_activity_hourly(
        self, config_id: str, start: date, end_exclusive: date
    ) -> list[RoomActivityHourlyRow]: ...


class InMemoryActivitySource:
    """ActivitySource over parsed rows held in memory."""

    def __init__(
        self,
        daily: Iterable[DailyActivityRecord] = (),
        room_hourly: Iterable[tuple[str, RoomActivityHourlyRow]] = (),
    ):
        self._daily: dict[tuple[str, date], DailyActivityRecord] = {}
        for record in daily:
            # Later rows for the same (config, date) replace earlier ones
            self._daily[(record.config_id, record.date)] = record
        self._room_hourly = list(room_hourly)

    def get_daily_activity_record(self, config_id, day):
        return self._daily.get((config_id, day))

    def get_daily_activity_records(self, config_id, start, end_exclusive):
        records = [
            r for (cid, d), r in self._daily.items() if cid == config_id and start <= d < end_exclusive
        ]
        return sorted(records, key=lambda r: r.date)

    def get_room_activity_hourly(self, config_id, start, end_exclusive):
        return [
            row
            for cid, row in self._room_hourly
            if cid == config_id and start <= row.date < end_exclusive
        ]

    def config_ids(self) -> list[str]:
        return sorted({cid for cid, _ in self._daily if cid is not None})


def _parse_rows(rows: Iterable[dict[str, Any]], parser, kind: str) -> list:
    parsed = []
    skipped = 0
    for row in rows:
        try:
            parsed.append(parser(row))
        except (ValueError, TypeError, AttributeError) as e:
            skipped += 1
            logger.warning("Skipping malformed %s row: %s", kind, e)
    if skipped:
        logger.warning("Skipped %d of %d %s rows", skipped, skipped + len(parsed), kind)
    return parsed


class JsonActivitySource(InMemoryActivitySource):
    """ActivitySource over an exported JSON document.

    Expected shape::

        {"daily_activity": [{"config_id": ..., "date": "YYYY-MM-DD", ...}],
         "room_activity_hourly": [{"config_id": ..., "room_name": ..., "hour": ISO, ...}]}
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        with open(self.path) as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError(f"{self.path}: expected a JSON object at top level")

        daily = _parse_rows(document.get("daily_activity", []), parse_daily_record, "daily_activity")
        raw_rooms = document.get("room_activity_hourly", [])
        rooms = _parse_rows(raw_rooms, self._parse_keyed_room_row, "room_activity_hourly")
        super().__init__(daily, rooms)
        logger.info("Loaded %d daily records and %d room rows from %s", len(daily), len(rooms), self.path)

    @staticmethod
    def _parse_keyed_room_row(row: dict[str, Any]) -> tuple[str, RoomActivityHourlyRow]:
        config_id = row.get("config_id")
        return (str(config_id) if config_id is not None else None, parse_room_row(row))


@dataclass(frozen=True)
class AnalysisInputs:
    """Everything one analysis run needs, already materialized."""

    today: DailyActivityRecord | None
    history: list[DailyActivityRecord]
    room_rows: list[RoomActivityHourlyRow]


def window_bounds(selected_date: date, lookback_days: int) -> tuple[date, date]:
    """[start, end) of the history window for selected_date."""
    return selected_date - timedelta(days=lookback_days), selected_date


def load_analysis_inputs(
    source: ActivitySource, config_id: str, selected_date: date, lookback_days: int
) -> AnalysisInputs:
    """Fetch the selected day, its history window and room rows sequentially."""
    start, end = window_bounds(selected_date, lookback_days)
    return AnalysisInputs(
        today=source.get_daily_activity_record(config_id, selected_date),
        history=source.get_daily_activity_records(config_id, start, end),
        room_rows=source.get_room_activity_hourly(config_id, start, selected_date + timedelta(days=1)),
    )
