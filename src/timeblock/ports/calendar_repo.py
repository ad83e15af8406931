"""Calendar repository interface."""

from datetime import datetime
from typing import Protocol

from timeblock.core.calendar import BusyInterval


class CalendarRepository(Protocol):
    """Interface for reading busy time from any calendar backend."""

    def list_busy_intervals(self, range_start: datetime, range_end: datetime) -> list[BusyInterval]:
        """Return every event overlapping [range_start, range_end).

        Raises UpstreamError if the backend cannot be reached.
        """
        ...
