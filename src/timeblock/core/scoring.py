"""Slot quality and task urgency scoring - no I/O dependencies."""

from datetime import datetime, timedelta, tzinfo

from .calendar import CandidateSlot, QualityTier
from .settings import FocusProfile
from .tasks import FocusCategory, Priority, Task

FRESHNESS_WINDOW = timedelta(hours=1)


def score_slot(
    slot: CandidateSlot,
    task: Task,
    profile: FocusProfile,
    now: datetime,
) -> QualityTier:
    """
    Assign a quality tier to a slot for a specific task.

    Baseline comes from the focus profile's preferred hours, then:
    - Deep Work in a slot of 2h+ is at least good
    - High priority is never left at poor
    - a task created within the hour moves up one tier (up to excellent)
    - a task edited within the hour moves acceptable up to good

    Pure function - no I/O.
    """
    hour = slot.start.hour
    if hour in profile.preferred_hours:
        quality = QualityTier.EXCELLENT
    elif any(abs(h - hour) <= 1 for h in profile.preferred_hours):
        quality = QualityTier.GOOD
    else:
        quality = QualityTier.ACCEPTABLE

    if task.focus_type is FocusCategory.DEEP_WORK and slot.duration >= 120:
        quality = max(quality, QualityTier.GOOD)

    if task.priority is Priority.HIGH:
        quality = max(quality, QualityTier.ACCEPTABLE)

    if _within_window(task.created_at, now) and quality in (QualityTier.ACCEPTABLE, QualityTier.GOOD):
        quality = quality.raised()

    if _within_window(task.last_edited_time, now) and quality is QualityTier.ACCEPTABLE:
        quality = QualityTier.GOOD

    return quality


def time_urgency(days_until_due: int) -> float:
    """Due-date component of urgency."""
    if days_until_due <= 0:
        return 1.0  # Overdue or due today
    elif days_until_due <= 1:
        return 0.8
    elif days_until_due <= 3:
        return 0.6
    elif days_until_due <= 7:
        return 0.4
    return 0.0


def calculate_urgency(task: Task, now: datetime, tz: tzinfo | None = None) -> float:
    """
    Blend priority and due-date proximity into a score in [0, 1].

    Days until due are elapsed whole days from now to midnight of the due
    date in `tz`.
    """
    urgency = task.priority.weight * 0.3 + time_urgency(task.days_until_due(now, tz))
    return min(urgency, 1.0)


def _within_window(timestamp: datetime | None, now: datetime) -> bool:
    if timestamp is None:
        return False
    return now - timestamp < FRESHNESS_WINDOW
