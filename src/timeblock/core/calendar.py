"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, tzinfo
from enum import IntEnum
from typing import Iterable

from .settings import SchedulingSettings


class QualityTier(IntEnum):
    """How well a slot fits a task. Higher is better."""

    POOR = 1
    ACCEPTABLE = 2
    GOOD = 3
    EXCELLENT = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "QualityTier":
        return cls[label.upper()]

    def raised(self) -> "QualityTier":
        """One tier up, capped at EXCELLENT."""
        return QualityTier(min(self + 1, QualityTier.EXCELLENT))


@dataclass(frozen=True)
class BusyInterval:
    """One calendar commitment."""

    start: datetime
    end: datetime
    all_day: bool = False
    summary: str = ""
    id: str = ""

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Half-open overlap test - touching endpoints do not overlap."""
        return self.start < end and self.end > start

    def format_time(self) -> str:
        if self.all_day:
            return "All day"
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class CandidateSlot:
    """A free window long enough for the task."""

    start: datetime
    end: datetime
    duration: int
    quality: QualityTier = QualityTier.ACCEPTABLE
    conflicts: bool = False

    def with_quality(self, quality: QualityTier) -> "CandidateSlot":
        return replace(self, quality=quality)

    def format(self) -> str:
        return f"{self.start.strftime('%a %m/%d %H:%M')}-{self.end.strftime('%H:%M')} ({self.quality.label})"

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration": self.duration,
            "quality": self.quality.label,
            "conflicts": self.conflicts,
        }


def has_conflict(
    window_start: datetime,
    window_end: datetime,
    buffer_minutes: int,
    busy: Iterable[BusyInterval],
) -> tuple[bool, list[BusyInterval]]:
    """
    Check a proposed window against busy intervals.

    The window is padded by buffer_minutes on both sides. All-day intervals
    are not considered.

    Returns (has_conflict, matching_intervals). Pure function - no I/O.
    """
    pad = timedelta(minutes=buffer_minutes)
    padded_start = window_start - pad
    padded_end = window_end + pad

    matches = [
        interval
        for interval in busy
        if not interval.all_day and interval.overlaps(padded_start, padded_end)
    ]
    return bool(matches), matches


def base_quality(hour: int, preferred_hours: Iterable[int], duration: int) -> QualityTier:
    """
    Quick quality estimate used while generating slots.

    Exact preferred hour is excellent, one hour off is good, anything else
    acceptable. Long tasks in the morning/early afternoon are lifted to good;
    short tasks late in the day are held at acceptable.
    """
    hours = set(preferred_hours)
    if hour in hours:
        quality = QualityTier.EXCELLENT
    elif any(abs(h - hour) <= 1 for h in hours):
        quality = QualityTier.GOOD
    else:
        quality = QualityTier.ACCEPTABLE

    if duration >= 120 and 9 <= hour <= 14:
        quality = max(quality, QualityTier.GOOD)
    elif duration <= 30 and hour >= 15:
        if quality is not QualityTier.POOR:
            quality = QualityTier.ACCEPTABLE

    return quality


def generate_day_slots(
    day: date,
    duration: int,
    preferred_hours: Iterable[int],
    busy: list[BusyInterval],
    now: datetime,
    settings: SchedulingSettings,
) -> list[CandidateSlot]:
    """
    Generate every non-conflicting window of `duration` minutes on `day`.

    Walks the work hours in fixed steps. Today starts no earlier than the
    same-day lead time from now; past days yield nothing.

    Pure function - no I/O.
    """
    tz = settings.tz
    now_local = now.astimezone(tz)
    if day < now_local.date():
        return []

    work_start = at_hour(day, settings.work_start_hour, tz)
    work_end = at_hour(day, settings.work_end_hour, tz)

    if day == now_local.date():
        min_start = _ceil_minute(now_local + timedelta(minutes=settings.same_day_lead_minutes))
        if min_start > work_start:
            work_start = min_start

    hours = frozenset(preferred_hours)
    length = timedelta(minutes=duration)
    step = timedelta(minutes=settings.step_minutes)

    slots = []
    current = work_start
    while current < work_end:
        slot_end = current + length
        if slot_end > work_end:
            break

        conflict, _ = has_conflict(current, slot_end, settings.conflict_buffer_minutes, busy)
        if not conflict:
            slots.append(
                CandidateSlot(
                    start=current,
                    end=slot_end,
                    duration=duration,
                    quality=base_quality(current.hour, hours, duration),
                    conflicts=False,
                )
            )

        current += step

    return slots


def filter_intervals_by_date(
    busy: list[BusyInterval],
    day: date,
    tz: tzinfo,
    pad_minutes: int = 0,
) -> list[BusyInterval]:
    """Intervals touching `day` (widened by pad_minutes on both sides)."""
    pad = timedelta(minutes=pad_minutes)
    day_start = at_hour(day, 0, tz) - pad
    day_end = at_hour(day, 24, tz) + pad
    return [b for b in busy if b.overlaps(day_start, day_end)]


def sort_intervals_by_start(busy: list[BusyInterval]) -> list[BusyInterval]:
    """Sort intervals by start time."""
    return sorted(busy, key=lambda b: b.start)


def at_hour(day: date, hour: int, tz: tzinfo) -> datetime:
    if hour >= 24:
        return datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    return datetime.combine(day, time(hour, 0), tzinfo=tz)


def _ceil_minute(dt: datetime) -> datetime:
    if dt.second or dt.microsecond:
        dt = dt.replace(second=0, microsecond=0) + timedelta(minutes=1)
    return dt
