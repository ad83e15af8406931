"""Functional core - pure scheduling logic with no I/O."""

from .tasks import Task, Priority, FocusCategory, Domain, DayPart, preferred_hours_for
from .settings import FocusProfile, SchedulingSettings, DEFAULT_FOCUS_PROFILES
from .calendar import (
    BusyInterval,
    CandidateSlot,
    QualityTier,
    has_conflict,
    generate_day_slots,
)
from .scoring import score_slot, calculate_urgency
from .scheduler import (
    find_candidate_slots,
    filter_candidates,
    rank_candidates,
    select_slot,
    check_lead_time,
    format_window,
)
from .outcome import SchedulingOutcome, SchedulingStatus, ScheduleUpdate
from .errors import (
    SchedulingError,
    ValidationError,
    NoSlotsError,
    ConflictError,
    TooSoonError,
    UpstreamError,
)

__all__ = [
    # Tasks
    "Task",
    "Priority",
    "FocusCategory",
    "Domain",
    "DayPart",
    "preferred_hours_for",
    # Settings
    "FocusProfile",
    "SchedulingSettings",
    "DEFAULT_FOCUS_PROFILES",
    # Calendar
    "BusyInterval",
    "CandidateSlot",
    "QualityTier",
    "has_conflict",
    "generate_day_slots",
    # Scoring
    "score_slot",
    "calculate_urgency",
    # Selection
    "find_candidate_slots",
    "filter_candidates",
    "rank_candidates",
    "select_slot",
    "check_lead_time",
    "format_window",
    # Outcomes
    "SchedulingOutcome",
    "SchedulingStatus",
    "ScheduleUpdate",
    # Errors
    "SchedulingError",
    "ValidationError",
    "NoSlotsError",
    "ConflictError",
    "TooSoonError",
    "UpstreamError",
]
