"""Tests for Google Calendar adapter."""

from datetime import datetime
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from timeblock.adapters.google_calendar import GoogleCalendarAdapter
from timeblock.core.errors import UpstreamError

NY = ZoneInfo("America/New_York")
RANGE = (datetime(2025, 8, 18, tzinfo=NY), datetime(2025, 9, 1, tzinfo=NY))


@pytest.fixture
def adapter():
    return GoogleCalendarAdapter(credentials='{"type": "service_account"}', calendar_id="me@example.com")


class TestGoogleCalendarAdapter:
    @patch("timeblock.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_timed_events(self, mock_build, adapter):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                {
                    "id": "evt1",
                    "summary": "Standup",
                    "start": {"dateTime": "2025-08-18T10:00:00-04:00"},
                    "end": {"dateTime": "2025-08-18T10:30:00-04:00"},
                },
            ]
        }

        intervals = adapter.list_busy_intervals(*RANGE)

        assert len(intervals) == 1
        assert intervals[0].summary == "Standup"
        assert intervals[0].id == "evt1"
        assert intervals[0].start == datetime(2025, 8, 18, 10, 0, tzinfo=NY)
        assert intervals[0].all_day is False

    @patch("timeblock.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_all_day_events(self, mock_build, adapter):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                {
                    "summary": "Holiday",
                    "start": {"date": "2025-08-18"},
                    "end": {"date": "2025-08-19"},
                },
            ]
        }

        intervals = adapter.list_busy_intervals(*RANGE)

        assert intervals[0].all_day is True
        assert intervals[0].start == datetime(2025, 8, 18, 0, 0, tzinfo=NY)
        assert intervals[0].end == datetime(2025, 8, 19, 0, 0, tzinfo=NY)

    @patch("timeblock.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_skips_cancelled_and_declined(self, mock_build, adapter):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.return_value = {
            "items": [
                {
                    "summary": "Cancelled",
                    "status": "cancelled",
                    "start": {"dateTime": "2025-08-18T09:00:00-04:00"},
                    "end": {"dateTime": "2025-08-18T10:00:00-04:00"},
                },
                {
                    "summary": "Declined",
                    "start": {"dateTime": "2025-08-18T11:00:00-04:00"},
                    "end": {"dateTime": "2025-08-18T12:00:00-04:00"},
                    "attendees": [{"self": True, "responseStatus": "declined"}],
                },
                {
                    "summary": "Accepted",
                    "start": {"dateTime": "2025-08-18T13:00:00-04:00"},
                    "end": {"dateTime": "2025-08-18T14:00:00-04:00"},
                    "attendees": [{"self": True, "responseStatus": "accepted"}],
                },
            ]
        }

        intervals = adapter.list_busy_intervals(*RANGE)

        assert [i.summary for i in intervals] == ["Accepted"]

    @patch("timeblock.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_follows_pages(self, mock_build, adapter):
        service = MagicMock()
        mock_build.return_value = service
        service.events().list().execute.side_effect = [
            {
                "items": [
                    {
                        "summary": "First",
                        "start": {"dateTime": "2025-08-18T09:00:00-04:00"},
                        "end": {"dateTime": "2025-08-18T10:00:00-04:00"},
                    }
                ],
                "nextPageToken": "page-2",
            },
            {
                "items": [
                    {
                        "summary": "Second",
                        "start": {"dateTime": "2025-08-19T09:00:00-04:00"},
                        "end": {"dateTime": "2025-08-19T10:00:00-04:00"},
                    }
                ],
            },
        ]

        intervals = adapter.list_busy_intervals(*RANGE)

        assert [i.summary for i in intervals] == ["First", "Second"]

    @patch("timeblock.adapters.google_calendar.GoogleCalendarAdapter._build_service")
    def test_api_error_becomes_upstream_error(self, mock_build, adapter):
        mock_build.side_effect = Exception("API error")

        with pytest.raises(UpstreamError) as exc:
            adapter.list_busy_intervals(*RANGE)

        assert exc.value.source == "calendar"
        assert "API error" in exc.value.message

    def test_invalid_credentials_json(self):
        adapter = GoogleCalendarAdapter(credentials="{not json")
        with pytest.raises(UpstreamError, match="Invalid Google Calendar credentials format"):
            adapter.list_busy_intervals(*RANGE)

    def test_missing_key_file(self, tmp_path):
        adapter = GoogleCalendarAdapter(credentials=str(tmp_path / "missing.json"))
        with pytest.raises(UpstreamError, match="key file not found"):
            adapter.list_busy_intervals(*RANGE)
