"""timeblock - schedules tasks into free calendar slots."""

__version__ = "0.1.0"
