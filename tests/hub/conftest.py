"""Shared fixtures for tests/hub/ test suite."""

import pytest
from fastapi.testclient import TestClient

from hearth.engine.collectors.source import InMemoryActivitySource
from hearth.engine.config import AppConfig, HubConfig
from hearth.hub.api import create_api
from tests.conftest import CONFIG_ID, SELECTED_DATE, build_history, build_record, build_room_rows


@pytest.fixture
def api_source():
    """In-memory source with 14 history days, the selected day and room rows."""
    records = build_history() + [build_record(SELECTED_DATE, total_events=140.0)]
    rows = build_room_rows(SELECTED_DATE, [(8, "kitchen", 5), (9, "living", 1)])
    return InMemoryActivitySource(records, [(CONFIG_ID, r) for r in rows])


@pytest.fixture
def api_client(api_source):
    """Create a FastAPI TestClient backed by api_source."""
    return TestClient(create_api(api_source))


@pytest.fixture
def secured_client(api_source):
    config = AppConfig(hub=HubConfig(api_key="s3cret"))
    return TestClient(create_api(api_source, config))
