"""Adapters - I/O implementations of ports."""

from .google_calendar import GoogleCalendarAdapter
from .notion_api import NotionAdapter
from .local import JsonCalendarAdapter, DryRunTaskStore

__all__ = [
    "GoogleCalendarAdapter",
    "NotionAdapter",
    "JsonCalendarAdapter",
    "DryRunTaskStore",
]
