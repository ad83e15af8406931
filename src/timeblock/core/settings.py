"""Immutable scheduling configuration shared by the core."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .tasks import FocusCategory


@dataclass(frozen=True)
class FocusProfile:
    """Scheduling preferences for one focus category."""

    preferred_hours: frozenset[int]
    min_duration: int
    max_duration: int
    preferred_duration: int
    requires_buffer: bool
    buffer_before: int
    buffer_after: int


DEFAULT_FOCUS_PROFILES: Mapping[FocusCategory, FocusProfile] = MappingProxyType(
    {
        FocusCategory.DEEP_WORK: FocusProfile(
            preferred_hours=frozenset(range(9, 15)),  # 9 AM - 2 PM
            min_duration=60,
            max_duration=240,
            preferred_duration=120,
            requires_buffer=True,
            buffer_before=15,
            buffer_after=15,
        ),
        FocusCategory.ADMIN: FocusProfile(
            preferred_hours=frozenset(range(9, 17)),  # 9 AM - 4 PM
            min_duration=15,
            max_duration=90,
            preferred_duration=30,
            requires_buffer=False,
            buffer_before=5,
            buffer_after=5,
        ),
        FocusCategory.CALLS: FocusProfile(
            preferred_hours=frozenset(range(10, 16)),  # 10 AM - 3 PM
            min_duration=15,
            max_duration=120,
            preferred_duration=60,
            requires_buffer=True,
            buffer_before=10,
            buffer_after=10,
        ),
        FocusCategory.CREATIVE: FocusProfile(
            preferred_hours=frozenset(range(9, 16)),  # 9 AM - 3 PM
            min_duration=30,
            max_duration=180,
            preferred_duration=90,
            requires_buffer=True,
            buffer_before=10,
            buffer_after=10,
        ),
    }
)


@dataclass(frozen=True)
class SchedulingSettings:
    """Everything the scheduling core reads besides the task and the calendar."""

    work_start_hour: int = 9
    work_end_hour: int = 17
    timezone: str = "America/New_York"
    lookahead_days: int = 14
    step_minutes: int = 30
    conflict_buffer_minutes: int = 5
    min_lead_minutes: int = 30
    same_day_lead_minutes: int = 60
    urgency_threshold: float = 0.8
    max_alternatives: int = 3
    focus_profiles: Mapping[FocusCategory, FocusProfile] = field(
        default_factory=lambda: DEFAULT_FOCUS_PROFILES
    )

    def __post_init__(self):
        if not 0 <= self.work_start_hour < self.work_end_hour <= 24:
            raise ValueError(
                f"Invalid work hours: {self.work_start_hour}-{self.work_end_hour}"
            )
        if self.lookahead_days < 1 or self.step_minutes < 1:
            raise ValueError("lookahead_days and step_minutes must be positive")
        missing = [c.value for c in FocusCategory if c not in self.focus_profiles]
        if missing:
            raise ValueError(f"Missing focus profiles: {', '.join(missing)}")
        # Freeze caller-supplied dicts
        if not isinstance(self.focus_profiles, MappingProxyType):
            object.__setattr__(self, "focus_profiles", MappingProxyType(dict(self.focus_profiles)))
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {self.timezone}") from None

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def profile_for(self, category: FocusCategory) -> FocusProfile:
        return self.focus_profiles[category]
