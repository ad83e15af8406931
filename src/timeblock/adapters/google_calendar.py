"""Google Calendar API adapter."""

import json
import logging
from datetime import date, datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

from timeblock.core.calendar import BusyInterval
from timeblock.core.errors import UpstreamError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


class GoogleCalendarAdapter:
    """
    Reads busy time from one Google Calendar via the API.

    Implements CalendarRepository protocol. Authenticates with a service
    account whose key is given either as a JSON string or a key-file path.
    """

    def __init__(
        self,
        credentials: str,
        calendar_id: str = "primary",
        timezone: str = "America/New_York",
    ):
        self.credentials = credentials
        self.calendar_id = calendar_id
        self.timezone = timezone
        self._service = None

    def _get_credentials(self):
        """Load service-account credentials from JSON text or a key file."""
        from google.oauth2 import service_account

        raw = self.credentials.strip()
        if raw.startswith("{"):
            try:
                info = json.loads(raw)
            except json.JSONDecodeError as e:
                raise UpstreamError("Invalid Google Calendar credentials format", source="calendar") from e
            return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

        key_path = Path(raw).expanduser()
        if not key_path.exists():
            raise UpstreamError(f"Google Calendar key file not found: {key_path}", source="calendar")
        return service_account.Credentials.from_service_account_file(str(key_path), scopes=SCOPES)

    def _build_service(self):
        """Build (once) a Google Calendar API service."""
        from googleapiclient.discovery import build

        if self._service is None:
            creds = self._get_credentials()
            self._service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        return self._service

    def list_busy_intervals(self, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        """Fetch every event overlapping the range as busy intervals."""
        try:
            items = self._list_events(range_start, range_end)
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(f"Google Calendar API error for {self.calendar_id}: {e}")
            raise UpstreamError(f"Failed to retrieve calendar events: {e}", source="calendar") from e

        intervals = [interval for item in items if (interval := self._to_interval(item))]
        logger.info(
            f"Retrieved {len(intervals)} events from calendar "
            f"({range_start.isoformat()} - {range_end.isoformat()})"
        )
        return intervals

    def _list_events(self, range_start: datetime, range_end: datetime) -> list[dict]:
        service = self._build_service()
        items: list[dict] = []
        page_token = None
        while True:
            result = (
                service.events()
                .list(
                    calendarId=self.calendar_id,
                    timeMin=range_start.isoformat(),
                    timeMax=range_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    timeZone=self.timezone,
                    pageToken=page_token,
                )
                .execute()
            )
            items.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return items

    def _to_interval(self, item: dict) -> BusyInterval | None:
        if item.get("status") == "cancelled" or _is_declined(item):
            return None

        start_raw = item.get("start", {})
        end_raw = item.get("end", {})

        if "dateTime" in start_raw:
            start = datetime.fromisoformat(start_raw["dateTime"])
            end = datetime.fromisoformat(end_raw["dateTime"]) if "dateTime" in end_raw else start
            all_day = False
        elif "date" in start_raw:
            # All-day event - pin to midnight in the calendar's zone
            tz = ZoneInfo(self.timezone)
            start = datetime.combine(date.fromisoformat(start_raw["date"]), time(0, 0), tzinfo=tz)
            end_day = end_raw.get("date", start_raw["date"])
            end = datetime.combine(date.fromisoformat(end_day), time(0, 0), tzinfo=tz)
            all_day = True
        else:
            return None

        return BusyInterval(
            start=start,
            end=end,
            all_day=all_day,
            summary=item.get("summary", "Untitled Event"),
            id=item.get("id", ""),
        )


def _is_declined(item: dict) -> bool:
    """True when the calendar owner declined the invitation."""
    for attendee in item.get("attendees", []):
        if attendee.get("self") and attendee.get("responseStatus") == "declined":
            return True
    return False
