"""Scheduling workflow shared by the webhook and the CLI.

One call schedules one task: validate, fetch busy time, generate and rank
candidate slots, pick one, write it back to the task store, and report the
result as a SchedulingOutcome. Failures never escape as exceptions.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from .core.calendar import CandidateSlot, has_conflict
from .core.errors import ConflictError, NoSlotsError, SchedulingError, UpstreamError
from .core.outcome import ScheduleUpdate, SchedulingOutcome, SchedulingStatus
from .core.scheduler import (
    check_lead_time,
    filter_candidates,
    find_candidate_slots,
    format_window,
    rank_candidates,
    search_window,
    select_slot,
)
from .core.scoring import calculate_urgency
from .core.settings import SchedulingSettings
from .core.tasks import Task, validate_task
from .ports import CalendarRepository, TaskRepository

logger = logging.getLogger(__name__)


class SchedulingService:
    """Runs the scheduling pipeline against a calendar and a task store."""

    def __init__(
        self,
        calendar: CalendarRepository,
        task_store: TaskRepository,
        settings: SchedulingSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.calendar = calendar
        self.task_store = task_store
        self.settings = settings or SchedulingSettings()
        self._clock = clock

    def now(self) -> datetime:
        if self._clock:
            return self._clock()
        return datetime.now(self.settings.tz)

    def schedule_payload(self, payload: dict) -> SchedulingOutcome:
        """Parse a webhook payload and schedule it."""
        try:
            task = Task.from_payload(payload)
        except SchedulingError as e:
            logger.warning(f"Rejected task payload: {e.message}")
            return self._outcome_from_error(e)
        return self.schedule_task(task)

    def schedule_task(self, task: Task) -> SchedulingOutcome:
        """Schedule one task. Always returns an outcome."""
        logger.info(f"Starting task scheduling for {task.task_id}")
        try:
            outcome = self._schedule(task, self.now())
        except SchedulingError as e:
            logger.warning(f"Scheduling {task.task_id} ended with {e.status.value}: {e.message}")
            return self._outcome_from_error(e)
        except Exception as e:
            logger.exception(f"Error scheduling task {task.task_id}")
            return SchedulingOutcome.failed(
                SchedulingStatus.ERROR, f"Scheduling error: {e}", reason="internal"
            )

        logger.info(f"Task {task.task_id} scheduled for {outcome.start.isoformat()}")
        return outcome

    def preview_slots(self, payload: dict, limit: int = 10) -> list[CandidateSlot]:
        """Ranked candidates for a payload, without selecting or writing anything.

        Raises ValidationError or UpstreamError.
        """
        task = Task.from_payload(payload)
        return self._ranked_candidates(task, self.now())[:limit]

    def _schedule(self, task: Task, now: datetime) -> SchedulingOutcome:
        validate_task(task)

        urgency = calculate_urgency(task, now, self.settings.tz)
        ranked = self._ranked_candidates(task, now)
        if not ranked:
            raise NoSlotsError("No available time slots found for this task")

        chosen = select_slot(ranked, urgency, self.settings.urgency_threshold)
        if chosen is None:
            raise NoSlotsError(
                "No suitable time slots found for this task",
                alternatives=ranked[: self.settings.max_alternatives],
            )
        logger.debug(f"Selected {chosen.format()} (urgency {urgency:.2f}) from {len(ranked)} candidates")

        check_lead_time(chosen, now, self.settings)
        self._confirm_free(chosen, ranked)

        window = format_window(chosen.start, chosen.end, self.settings.tz)
        self._write_back(
            task.task_id,
            ScheduleUpdate(
                start=chosen.start,
                end=chosen.end,
                status_label=SchedulingStatus.SCHEDULED.label,
                message=f"Scheduled for {window}",
            ),
        )
        return SchedulingOutcome.scheduled(chosen.start, chosen.end, f"Task scheduled for {window}")

    def _ranked_candidates(self, task: Task, now: datetime) -> list[CandidateSlot]:
        profile = self.settings.profile_for(task.focus_type)
        range_start, range_end = search_window(now, self.settings)
        busy = self._fetch_busy(range_start, range_end)

        generated = find_candidate_slots(task, busy, now, self.settings)
        filtered = filter_candidates(generated, task, profile)
        logger.debug(f"{len(generated)} slots generated, {len(filtered)} kept for {task.task_id}")
        return rank_candidates(filtered, task, profile, now)

    def _fetch_busy(self, range_start: datetime, range_end: datetime):
        try:
            return self.calendar.list_busy_intervals(range_start, range_end)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Calendar unavailable: {e}", source="calendar") from e

    def _confirm_free(self, chosen: CandidateSlot, ranked: list[CandidateSlot]) -> None:
        """Re-read the chosen window and fail with ConflictError if it filled up meanwhile."""
        buffer = self.settings.conflict_buffer_minutes
        pad = timedelta(minutes=buffer)
        busy = self._fetch_busy(chosen.start - pad, chosen.end + pad)
        conflict, matches = has_conflict(chosen.start, chosen.end, buffer, busy)
        if not conflict:
            return

        alternatives = [
            slot
            for slot in ranked
            if slot != chosen and not has_conflict(slot.start, slot.end, buffer, matches)[0]
        ]
        titles = ", ".join(m.summary or "busy" for m in matches)
        raise ConflictError(
            f"Slot {format_window(chosen.start, chosen.end, self.settings.tz)} conflicts with: {titles}",
            alternatives=alternatives,
        )

    def _write_back(self, task_id: str, update: ScheduleUpdate) -> None:
        try:
            ok = self.task_store.apply_schedule_update(task_id, update)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Failed to update task store: {e}", source="task_store") from e
        if not ok:
            raise UpstreamError("Failed to update task store with scheduled time", source="task_store")

    def _outcome_from_error(self, error: SchedulingError) -> SchedulingOutcome:
        return SchedulingOutcome.failed(
            error.status,
            error.message,
            alternatives=error.alternatives[: self.settings.max_alternatives],
            reason=error.reason,
        )


def build_service(
    config,
    events_file: str | None = None,
    dry_run: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> SchedulingService:
    """Wire adapters from configuration.

    `events_file` swaps Google Calendar for a JSON file; `dry_run` swaps
    Notion for an in-memory recorder. Raises ValueError when a required
    credential is missing.
    """
    from .adapters import DryRunTaskStore, GoogleCalendarAdapter, JsonCalendarAdapter, NotionAdapter

    settings = config.scheduling_settings()

    if events_file:
        calendar = JsonCalendarAdapter(events_file)
    elif config.google_calendar_credentials:
        calendar = GoogleCalendarAdapter(
            credentials=config.google_calendar_credentials,
            calendar_id=config.google_calendar_id,
            timezone=settings.timezone,
        )
    else:
        raise ValueError("GOOGLE_CALENDAR_CREDENTIALS is not configured")

    if dry_run:
        task_store = DryRunTaskStore()
    elif config.notion_api_key:
        task_store = NotionAdapter(config.notion_api_key, config.notion_database_id)
    else:
        raise ValueError("NOTION_API_KEY is not configured")

    return SchedulingService(calendar, task_store, settings, clock=clock)
