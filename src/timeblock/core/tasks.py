"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum

from .errors import ValidationError


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def weight(self) -> int:
        """Raw multiplier used by the urgency score."""
        match self:
            case Priority.HIGH:
                return 3
            case Priority.MEDIUM:
                return 2
            case Priority.LOW:
                return 1


class FocusCategory(str, Enum):
    DEEP_WORK = "Deep Work"
    ADMIN = "Admin"
    CALLS = "Calls"
    CREATIVE = "Creative"


class Domain(str, Enum):
    WORK = "Work"
    PERSONAL = "Personal"
    SCHOOL = "School"


class DayPart(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @property
    def hours(self) -> tuple[int, ...]:
        """Start hours that count as this part of the day."""
        match self:
            case DayPart.MORNING:
                return (9, 10, 11, 12)
            case DayPart.AFTERNOON:
                return (13, 14, 15, 16)
            case DayPart.EVENING:
                return (17, 18, 19)


WORKDAY_HOURS = frozenset(range(9, 17))


@dataclass(frozen=True)
class Task:
    """A task to place on the calendar, as received from the task store."""

    task_id: str
    task_name: str
    estimated_duration: int
    priority: Priority
    focus_type: FocusCategory
    preferred_times: tuple[DayPart, ...]
    due_date: date
    domain: Domain | None = None
    buffer_before: int = 15
    buffer_after: int = 15
    flexible: bool = True
    created_at: datetime | None = None
    last_edited_time: datetime | None = None

    def days_until_due(self, now: datetime, tz: tzinfo | None = None) -> int:
        """
        Whole days from now until the due date begins (negative if overdue).

        Measured to local midnight of the due date in `tz` and truncated
        toward zero, so a task due tomorrow counts 0 days once today has begun.
        """
        due = datetime.combine(self.due_date, time(0, 0), tzinfo=tz or now.tzinfo)
        return int((due - now) / timedelta(days=1))

    def preferred_hours(self) -> frozenset[int]:
        return preferred_hours_for(self.preferred_times, self.domain)

    @classmethod
    def from_payload(cls, data: dict) -> "Task":
        """Create Task from a webhook payload, raising ValidationError if malformed."""
        if not isinstance(data, dict):
            raise ValidationError("Task payload must be an object")

        task_id = data.get("task_id")
        if not task_id or not isinstance(task_id, str):
            raise ValidationError("Task ID is required")

        task_name = data.get("task_name")
        if not task_name or not isinstance(task_name, str):
            raise ValidationError("Task name is required")

        duration = data.get("estimated_duration")
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise ValidationError("Valid estimated duration is required")

        priority = _parse_enum(Priority, data.get("priority"), "priority")
        focus_type = _parse_enum(FocusCategory, data.get("focus_type"), "focus type")

        domain = None
        if data.get("domain") is not None:
            domain = _parse_enum(Domain, data["domain"], "domain")

        raw_times = data.get("preferred_times")
        if not isinstance(raw_times, (list, tuple)) or not raw_times:
            raise ValidationError("At least one preferred time is required")
        preferred_times = tuple(_parse_enum(DayPart, t, "preferred time") for t in raw_times)

        return cls(
            task_id=task_id,
            task_name=task_name,
            estimated_duration=duration,
            priority=priority,
            focus_type=focus_type,
            preferred_times=preferred_times,
            due_date=_parse_date(data.get("due_date"), "due_date"),
            domain=domain,
            buffer_before=_parse_minutes(data.get("buffer_before", 15), "buffer_before"),
            buffer_after=_parse_minutes(data.get("buffer_after", 15), "buffer_after"),
            flexible=_parse_flag(data.get("flexible", True), "flexible"),
            created_at=_parse_timestamp(data.get("created_at"), "created_at"),
            last_edited_time=_parse_timestamp(data.get("last_edited_time"), "last_edited_time"),
        )


def validate_task(task: Task) -> None:
    """Re-check a Task built directly (not via from_payload) before scheduling."""
    if not task.task_id:
        raise ValidationError("Task ID is required")
    if task.estimated_duration <= 0:
        raise ValidationError("Valid estimated duration is required")
    if not isinstance(task.priority, Priority):
        raise ValidationError("Valid priority is required")
    if not isinstance(task.focus_type, FocusCategory):
        raise ValidationError("Valid focus type is required")
    if not task.preferred_times or not all(isinstance(t, DayPart) for t in task.preferred_times):
        raise ValidationError("At least one valid preferred time is required")


def preferred_hours_for(
    preferred_times: tuple[DayPart, ...] | list[DayPart],
    domain: Domain | None = None,
) -> frozenset[int]:
    """
    Convert preferred day parts into start hours.

    Work tasks, and tasks whose day parts yield no hours, fall back to the
    regular workday (9 AM - 4 PM starts).

    Pure function - no I/O.
    """
    hours: set[int] = set()
    for part in preferred_times:
        hours.update(part.hours)

    if not hours or domain is Domain.WORK:
        return WORKDAY_HOURS
    return frozenset(hours)


def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {label} {value!r} (expected one of: {allowed})") from None


def _parse_date(value, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{label} is required")
    try:
        if "T" in value:
            return datetime.fromisoformat(value).date()
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Malformed {label}: {value!r}") from None


def _parse_timestamp(value, label: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"Malformed {label}: {value!r}") from None
    else:
        raise ValidationError(f"Malformed {label}: {value!r}")
    # Naive timestamps are UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_minutes(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{label} must be a non-negative number of minutes")
    return value


def _parse_flag(value, label: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{label} must be true or false")
    return value
