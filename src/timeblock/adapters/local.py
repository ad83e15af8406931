"""Local adapters for offline runs: a JSON-file calendar and a dry-run task store."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from timeblock.core.calendar import BusyInterval, sort_intervals_by_start
from timeblock.core.errors import UpstreamError
from timeblock.core.outcome import ScheduleUpdate

logger = logging.getLogger(__name__)


class JsonCalendarAdapter:
    """
    Calendar backed by a JSON file.

    Implements CalendarRepository protocol. The file holds a list of
    {"start", "end", "all_day", "summary"} objects with ISO timestamps.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load(self) -> list[BusyInterval]:
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise UpstreamError(f"Cannot read calendar file {self.path}: {e}", source="calendar") from e

        intervals = []
        for item in data:
            try:
                intervals.append(
                    BusyInterval(
                        start=_aware(datetime.fromisoformat(item["start"])),
                        end=_aware(datetime.fromisoformat(item["end"])),
                        all_day=bool(item.get("all_day", False)),
                        summary=item.get("summary", ""),
                        id=str(item.get("id", "")),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed calendar entry: {item!r}")
        return intervals

    def list_busy_intervals(self, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        """Intervals from the file that overlap the range."""
        intervals = [b for b in self._load() if b.overlaps(range_start, range_end)]
        return sort_intervals_by_start(intervals)


class DryRunTaskStore:
    """
    Task store that records updates instead of writing them.

    Implements TaskRepository protocol.
    """

    def __init__(self):
        self.updates: list[tuple[str, ScheduleUpdate]] = []

    def apply_schedule_update(self, task_id: str, update: ScheduleUpdate) -> bool:
        logger.info(f"[dry-run] would update task {task_id}: {update}")
        self.updates.append((task_id, update))
        return True

    def fetch_task(self, task_id: str) -> dict:
        """Latest recorded update for the task."""
        for recorded_id, update in reversed(self.updates):
            if recorded_id == task_id:
                return {
                    "id": task_id,
                    "start": update.start.isoformat() if update.start else None,
                    "end": update.end.isoformat() if update.end else None,
                    "status": update.status_label,
                    "message": update.message,
                }
        return {"id": task_id}


def _aware(dt: datetime) -> datetime:
    # Naive timestamps are UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
