"""Scheduling results and the typed update sent to the task store."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .calendar import CandidateSlot


class SchedulingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFLICT = "conflict"
    NO_SLOTS = "no_slots"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Human-facing label written to the task store."""
        match self:
            case SchedulingStatus.SCHEDULED:
                return "Scheduled"
            case SchedulingStatus.CONFLICT:
                return "Conflict"
            case SchedulingStatus.NO_SLOTS:
                return "No Slots"
            case SchedulingStatus.ERROR:
                return "Error"


@dataclass
class SchedulingOutcome:
    """Result of one scheduling request."""

    success: bool
    status: SchedulingStatus
    message: str
    start: datetime | None = None
    end: datetime | None = None
    alternatives: list["CandidateSlot"] = field(default_factory=list)
    reason: str | None = None

    @classmethod
    def scheduled(cls, start: datetime, end: datetime, message: str) -> "SchedulingOutcome":
        return cls(success=True, status=SchedulingStatus.SCHEDULED, message=message, start=start, end=end)

    @classmethod
    def failed(
        cls,
        status: SchedulingStatus,
        message: str,
        alternatives: list["CandidateSlot"] | None = None,
        reason: str | None = None,
    ) -> "SchedulingOutcome":
        return cls(
            success=False,
            status=status,
            message=message,
            alternatives=list(alternatives or []),
            reason=reason,
        )

    def to_dict(self) -> dict:
        data: dict = {
            "success": self.success,
            "status": self.status.value,
            "message": self.message,
        }
        if self.start and self.end:
            data["scheduled_time"] = {
                "start": self.start.isoformat(),
                "end": self.end.isoformat(),
            }
        if not self.success:
            data["alternative_slots"] = [slot.to_dict() for slot in self.alternatives]
        return data


@dataclass(frozen=True)
class ScheduleUpdate:
    """Fields to write back to the task store. Unset fields are left alone."""

    start: datetime | None = None
    end: datetime | None = None
    status_label: str | None = None
    message: str | None = None
