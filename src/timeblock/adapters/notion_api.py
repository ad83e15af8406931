"""Notion API adapter - HTTP client for writing schedules back to tasks."""

import logging

import requests

from timeblock.core.errors import UpstreamError
from timeblock.core.outcome import ScheduleUpdate

logger = logging.getLogger(__name__)

API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
REQUEST_TIMEOUT = 10

PLANNED_PROPERTY = "Planned"
MESSAGE_PROPERTY = "Scheduling Message"
REQUIRED_PROPERTIES = [PLANNED_PROPERTY, "Estimates", MESSAGE_PROPERTY]


class NotionAdapter:
    """
    Notion API adapter.

    Implements TaskRepository protocol. Translates ScheduleUpdate records into
    Notion page properties. No business logic - just I/O.
    """

    def __init__(self, api_key: str, database_id: str = "", timeout: float = REQUEST_TIMEOUT):
        if not api_key:
            raise ValueError("Notion API key is required")
        self.database_id = database_id
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            }
        )

    def _api_request(self, method: str, endpoint: str, json: dict | None = None) -> dict:
        """Make an authenticated API request."""
        resp = self._session.request(method, f"{API_BASE}{endpoint}", json=json, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def apply_schedule_update(self, task_id: str, update: ScheduleUpdate) -> bool:
        """Write the update to the task's page. Returns False on any API failure."""
        properties = format_properties(update)
        try:
            self._api_request("PATCH", f"/pages/{task_id}", json={"properties": properties})
        except requests.RequestException as e:
            logger.error(f"Failed to update Notion task {task_id}: {e}")
            return False

        logger.info(f"Updated Notion task {task_id} ({', '.join(properties) or 'no properties'})")
        return True

    def fetch_task(self, task_id: str) -> dict:
        """Fetch a task page."""
        try:
            return self._api_request("GET", f"/pages/{task_id}")
        except requests.RequestException as e:
            logger.error(f"Failed to retrieve Notion task {task_id}: {e}")
            raise UpstreamError(f"Failed to retrieve task {task_id}: {e}", source="task_store") from e

    def validate_database(self) -> list[str]:
        """Return the required properties missing from the database (empty if valid)."""
        if not self.database_id:
            raise UpstreamError("No Notion database configured", source="task_store")
        try:
            data = self._api_request("GET", f"/databases/{self.database_id}")
        except requests.RequestException as e:
            raise UpstreamError(f"Failed to validate Notion database: {e}", source="task_store") from e

        existing = set(data.get("properties", {}))
        missing = [p for p in REQUIRED_PROPERTIES if p not in existing]
        if missing:
            logger.warning(f"Notion database is missing properties: {', '.join(missing)}")
        return missing


def format_properties(update: ScheduleUpdate) -> dict:
    """
    Map a ScheduleUpdate onto Notion page properties.

    Start/end go to the "Planned" date property; the message to the
    "Scheduling Message" rich text. The status label has no property in the
    database and is not written.
    """
    properties: dict = {}

    if update.start and update.end:
        properties[PLANNED_PROPERTY] = {
            "date": {
                "start": update.start.isoformat(),
                "end": update.end.isoformat(),
            }
        }

    if update.message:
        properties[MESSAGE_PROPERTY] = {
            "rich_text": [{"text": {"content": update.message}}],
        }

    return properties
