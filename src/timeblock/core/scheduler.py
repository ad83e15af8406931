"""Slot search, filtering, ranking and selection - no I/O dependencies."""

from datetime import datetime, timedelta, tzinfo

from .calendar import (
    BusyInterval,
    CandidateSlot,
    QualityTier,
    at_hour,
    filter_intervals_by_date,
    generate_day_slots,
)
from .errors import TooSoonError
from .scoring import score_slot
from .settings import FocusProfile, SchedulingSettings
from .tasks import Priority, Task


def effective_duration(task: Task, profile: FocusProfile) -> int:
    """Tasks are never scheduled shorter than their category's minimum."""
    return max(task.estimated_duration, profile.min_duration)


def search_window(now: datetime, settings: SchedulingSettings) -> tuple[datetime, datetime]:
    """Start of today through the end of the lookahead horizon, in the configured zone."""
    today = now.astimezone(settings.tz).date()
    start = at_hour(today, 0, settings.tz)
    end = at_hour(today + timedelta(days=settings.lookahead_days), 0, settings.tz)
    return start, end


def find_candidate_slots(
    task: Task,
    busy: list[BusyInterval],
    now: datetime,
    settings: SchedulingSettings,
) -> list[CandidateSlot]:
    """
    Generate slots for every day of the lookahead horizon, starting today.

    Pure function - no I/O.
    """
    profile = settings.profile_for(task.focus_type)
    duration = effective_duration(task, profile)
    preferred_hours = task.preferred_hours()
    today = now.astimezone(settings.tz).date()

    slots = []
    for offset in range(settings.lookahead_days):
        day = today + timedelta(days=offset)
        day_busy = filter_intervals_by_date(busy, day, settings.tz, settings.conflict_buffer_minutes)
        slots.extend(generate_day_slots(day, duration, preferred_hours, day_busy, now, settings))
    return slots


def filter_candidates(
    slots: list[CandidateSlot],
    task: Task,
    profile: FocusProfile,
) -> list[CandidateSlot]:
    """
    Drop slots that don't fit the task's focus category.

    Duration must sit within the category's bounds. Unless the task is High
    priority or flexible, the slot must also start in a preferred hour.
    """

    def keep(slot: CandidateSlot) -> bool:
        if slot.duration < profile.min_duration or slot.duration > profile.max_duration:
            return False
        if task.priority is Priority.HIGH:
            return True
        return slot.start.hour in profile.preferred_hours or task.flexible

    return [slot for slot in slots if keep(slot)]


def rank_candidates(
    slots: list[CandidateSlot],
    task: Task,
    profile: FocusProfile,
    now: datetime,
) -> list[CandidateSlot]:
    """Re-score slots for the task and sort best tier first, then earliest."""
    scored = [slot.with_quality(score_slot(slot, task, profile, now)) for slot in slots]
    return sorted(scored, key=lambda s: (-s.quality, s.start))


def select_slot(
    ranked: list[CandidateSlot],
    urgency: float,
    urgency_threshold: float = 0.8,
) -> CandidateSlot | None:
    """
    Pick the final slot from a ranked list.

    Urgent tasks take the earliest good-or-better slot (or simply the
    earliest slot if none is good). Everything else takes the best-ranked.
    """
    if not ranked:
        return None

    if urgency > urgency_threshold:
        good = [s for s in ranked if s.quality >= QualityTier.GOOD]
        pool = good or ranked
        return min(pool, key=lambda s: s.start)

    return ranked[0]


def check_lead_time(slot: CandidateSlot, now: datetime, settings: SchedulingSettings) -> None:
    """Raise TooSoonError if the slot starts before the minimum lead time."""
    earliest = now + timedelta(minutes=settings.min_lead_minutes)
    if slot.start < earliest:
        raise TooSoonError(
            f"Scheduled time {slot.start.isoformat()} is too soon. "
            f"Minimum scheduling time is {settings.min_lead_minutes} minutes from now."
        )


def format_window(start: datetime, end: datetime, tz: tzinfo | None = None) -> str:
    """Format a window like 'Aug 18, 2025 at 9:00 AM - 11:00 AM'."""
    if tz:
        start = start.astimezone(tz)
        end = end.astimezone(tz)
    return f"{start.strftime('%b')} {start.day}, {start.year} at {_clock(start)} - {_clock(end)}"


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"
