"""Tests for the webhook API."""

from datetime import datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from timeblock.adapters import DryRunTaskStore
from timeblock.api import create_app, status_code_for
from timeblock.core.calendar import BusyInterval
from timeblock.core.errors import UpstreamError
from timeblock.core.outcome import SchedulingOutcome, SchedulingStatus
from timeblock.service import SchedulingService

NY = ZoneInfo("America/New_York")
NOW = datetime(2025, 8, 18, 8, 0, tzinfo=NY)


@pytest.fixture
def calendar():
    calendar = MagicMock()
    calendar.list_busy_intervals.return_value = []
    return calendar


@pytest.fixture
def store():
    return DryRunTaskStore()


@pytest.fixture
def test_client(calendar, store):
    service = SchedulingService(calendar, store, clock=lambda: NOW)
    return TestClient(create_app(service))


@pytest.fixture
def payload():
    return {
        "task_id": "page-1",
        "task_name": "Write design doc",
        "estimated_duration": 120,
        "priority": "High",
        "focus_type": "Deep Work",
        "preferred_times": ["morning"],
        "due_date": "2025-08-22",
    }


class TestInfoEndpoints:
    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        assert response.json()["endpoints"]["schedule"] == "/webhook/schedule"

    def test_health(self, test_client):
        response = test_client.get("/webhook/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestScheduleEndpoint:
    def test_scheduled(self, test_client, store, payload):
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "scheduled"
        assert data["scheduled_time"]["start"] == "2025-08-18T09:00:00-04:00"
        assert store.updates[0][0] == "page-1"

    def test_no_slots(self, test_client, payload):
        payload.update(focus_type="Admin", estimated_duration=600)
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 400
        assert response.json()["status"] == "no_slots"
        assert response.json()["alternative_slots"] == []

    def test_invalid_payload(self, test_client, payload):
        del payload["task_id"]
        payload["priority"] = "Urgent"
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Invalid request payload"
        assert any(d.startswith("task_id") for d in data["details"])
        assert any(d.startswith("priority") for d in data["details"])

    def test_non_positive_duration(self, test_client, payload):
        payload["estimated_duration"] = 0
        response = test_client.post("/webhook/schedule", json=payload)
        assert response.status_code == 400

    def test_bad_due_date_reported_as_error(self, test_client, payload):
        payload["due_date"] = "someday"
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert "due_date" in response.json()["message"]

    def test_conflict(self, calendar, test_client, payload):
        surprise = BusyInterval(
            start=datetime(2025, 8, 18, 9, 30, tzinfo=NY),
            end=datetime(2025, 8, 18, 10, 0, tzinfo=NY),
            summary="Surprise call",
        )
        calendar.list_busy_intervals.side_effect = [[], [surprise]]

        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 400
        assert response.json()["status"] == "conflict"
        assert len(response.json()["alternative_slots"]) == 3

    def test_calendar_unavailable(self, calendar, test_client, payload):
        calendar.list_busy_intervals.side_effect = UpstreamError("Failed to retrieve calendar events: 500")
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_service_not_configured(self, payload):
        test_client = TestClient(create_app(configure=False))
        response = test_client.post("/webhook/schedule", json=payload)

        assert response.status_code == 503
        assert response.json()["error"] == "Service unavailable"


class TestSlotsEndpoint:
    def test_lists_ranked_slots(self, test_client, store, payload):
        response = test_client.post("/webhook/slots", params={"limit": 3}, json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert data["slots"][0]["quality"] == "excellent"
        assert store.updates == []

    def test_rejects_non_positive_limit(self, test_client, store, payload):
        response = test_client.post("/webhook/slots", params={"limit": 0}, json=payload)

        assert response.status_code == 400
        assert any(d.startswith("limit") for d in response.json()["details"])


class TestDebugEndpoints:
    def test_debug_task(self, test_client, store, payload):
        test_client.post("/webhook/schedule", json=payload)
        response = test_client.get("/webhook/debug/task/page-1")

        assert response.status_code == 200
        assert response.json()["task"]["status"] == "Scheduled"

    def test_debug_update_writes_test_message(self, test_client, store):
        response = test_client.post("/webhook/debug/update", json={"task_id": "page-1", "test": "hello"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Update successful"}
        task_id, update = store.updates[0]
        assert task_id == "page-1"
        assert update.message == "Test update: hello"
        assert update.start is None

    def test_debug_update_reports_failed_write(self, calendar):
        store = MagicMock()
        store.apply_schedule_update.return_value = False
        client = TestClient(create_app(SchedulingService(calendar, store, clock=lambda: NOW)))

        response = client.post("/webhook/debug/update", json={"task_id": "page-1"})

        assert response.json() == {"success": False, "message": "Update failed"}
        assert store.apply_schedule_update.call_args[0][1].message == "Test update: "

    def test_test_calendar(self, calendar, test_client):
        calendar.list_busy_intervals.return_value = [
            BusyInterval(
                start=datetime(2025, 8, 18, 10, tzinfo=NY),
                end=datetime(2025, 8, 18, 11, tzinfo=NY),
                summary="Standup",
            )
        ]
        response = test_client.get("/webhook/test/calendar")

        assert response.status_code == 200
        data = response.json()
        assert data["events_summary"] == {"today_tomorrow": 1, "next_week": 1}
        assert data["events"][0]["summary"] == "Standup"


class TestStatusCodes:
    @pytest.mark.parametrize(
        "outcome,code",
        [
            (SchedulingOutcome.failed(SchedulingStatus.CONFLICT, "x"), 400),
            (SchedulingOutcome.failed(SchedulingStatus.NO_SLOTS, "x"), 400),
            (SchedulingOutcome.failed(SchedulingStatus.ERROR, "x", reason="validation"), 400),
            (SchedulingOutcome.failed(SchedulingStatus.ERROR, "x", reason="too_soon"), 400),
            (SchedulingOutcome.failed(SchedulingStatus.ERROR, "x", reason="upstream"), 503),
            (SchedulingOutcome.failed(SchedulingStatus.ERROR, "x", reason="internal"), 500),
        ],
    )
    def test_mapping(self, outcome, code):
        assert status_code_for(outcome) == code
