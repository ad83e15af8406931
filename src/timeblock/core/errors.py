"""Scheduling error taxonomy.

Errors are raised where they occur inside the pipeline and converted into a
SchedulingOutcome at the service boundary.
"""

from .outcome import SchedulingStatus


class SchedulingError(Exception):
    """Base class for failures that end a scheduling request."""

    status = SchedulingStatus.ERROR
    reason: str | None = "internal"

    def __init__(self, message: str, alternatives: list | None = None):
        super().__init__(message)
        self.message = message
        self.alternatives = list(alternatives or [])


class ValidationError(SchedulingError):
    """Malformed task payload. Raised before any I/O is attempted."""

    reason = "validation"


class NoSlotsError(SchedulingError):
    """The search finished but no candidate satisfies the task constraints."""

    status = SchedulingStatus.NO_SLOTS
    reason = None


class ConflictError(SchedulingError):
    """A chosen slot collides with a calendar commitment."""

    status = SchedulingStatus.CONFLICT
    reason = None


class TooSoonError(SchedulingError):
    """A slot was found but starts before the minimum lead time."""

    reason = "too_soon"


class UpstreamError(SchedulingError):
    """The calendar source or the task store failed."""

    reason = "upstream"

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source
