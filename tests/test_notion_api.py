"""Tests for the Notion adapter."""

from datetime import datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest
import requests

from timeblock.adapters.notion_api import NotionAdapter, format_properties
from timeblock.core.errors import UpstreamError
from timeblock.core.outcome import ScheduleUpdate

NY = ZoneInfo("America/New_York")


@pytest.fixture
def update():
    return ScheduleUpdate(
        start=datetime(2025, 8, 18, 9, 0, tzinfo=NY),
        end=datetime(2025, 8, 18, 11, 0, tzinfo=NY),
        status_label="Scheduled",
        message="Scheduled for Aug 18, 2025 at 9:00 AM - 11:00 AM",
    )


@pytest.fixture
def adapter():
    adapter = NotionAdapter(api_key="secret", database_id="db-1")
    adapter._session = MagicMock()
    return adapter


def _response(json_data=None, error=None):
    resp = MagicMock()
    resp.json.return_value = json_data or {}
    if error:
        resp.raise_for_status.side_effect = error
    return resp


class TestFormatProperties:
    def test_full_update(self, update):
        props = format_properties(update)

        assert props["Planned"] == {
            "date": {"start": "2025-08-18T09:00:00-04:00", "end": "2025-08-18T11:00:00-04:00"}
        }
        assert props["Scheduling Message"]["rich_text"][0]["text"]["content"] == update.message
        assert len(props) == 2

    def test_message_only(self):
        props = format_properties(ScheduleUpdate(message="No slots"))
        assert list(props) == ["Scheduling Message"]

    def test_empty_update(self):
        assert format_properties(ScheduleUpdate()) == {}


class TestNotionAdapter:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            NotionAdapter(api_key="")

    def test_sets_auth_headers(self):
        adapter = NotionAdapter(api_key="secret")
        assert adapter._session.headers["Authorization"] == "Bearer secret"
        assert adapter._session.headers["Notion-Version"] == "2022-06-28"

    def test_apply_schedule_update(self, adapter, update):
        adapter._session.request.return_value = _response({"id": "page-1"})

        assert adapter.apply_schedule_update("page-1", update) is True

        method, url = adapter._session.request.call_args.args
        assert method == "PATCH"
        assert url == "https://api.notion.com/v1/pages/page-1"
        body = adapter._session.request.call_args.kwargs["json"]
        assert set(body["properties"]) == {"Planned", "Scheduling Message"}

    def test_apply_schedule_update_failure(self, adapter, update):
        adapter._session.request.return_value = _response(error=requests.HTTPError("404 Not Found"))
        assert adapter.apply_schedule_update("page-1", update) is False

    def test_fetch_task(self, adapter):
        adapter._session.request.return_value = _response({"id": "page-1", "properties": {}})
        assert adapter.fetch_task("page-1")["id"] == "page-1"

    def test_fetch_task_failure(self, adapter):
        adapter._session.request.side_effect = requests.ConnectionError("down")
        with pytest.raises(UpstreamError) as exc:
            adapter.fetch_task("page-1")
        assert exc.value.source == "task_store"

    def test_validate_database(self, adapter):
        adapter._session.request.return_value = _response(
            {"properties": {"Planned": {}, "Scheduling Message": {}, "Name": {}}}
        )
        assert adapter.validate_database() == ["Estimates"]

    def test_validate_database_without_id(self):
        adapter = NotionAdapter(api_key="secret")
        with pytest.raises(UpstreamError, match="No Notion database"):
            adapter.validate_database()
