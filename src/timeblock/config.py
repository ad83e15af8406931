"""Configuration management for timeblock."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.settings import SchedulingSettings

logger = logging.getLogger(__name__)

TIMEBLOCK_HOME = Path(os.environ.get("TIMEBLOCK_HOME", Path.home() / ".timeblock"))
CONFIG_FILE = TIMEBLOCK_HOME / "config" / "timeblock.conf"

ENV_KEYS = [
    "notion_api_key",
    "notion_database_id",
    "google_calendar_credentials",
    "google_calendar_credentials_path",
    "google_calendar_id",
    "default_timezone",
    "timezone",
    "work_hours",
    "work_start_hour",
    "work_end_hour",
    "lookahead_days",
    "port",
]


@dataclass
class Config:
    """timeblock configuration."""

    notion_api_key: str = ""
    notion_database_id: str = ""
    google_calendar_credentials: str = ""
    google_calendar_id: str = "primary"
    timezone: str = "America/New_York"
    work_hours: str = "09:00-17:00"
    lookahead_days: int = 14
    port: int = 3000

    def work_hour_bounds(self) -> tuple[int, int]:
        """Parse WORK_HOURS ("09:00-17:00") into (start_hour, end_hour)."""
        start_str, _, end_str = self.work_hours.partition("-")
        return int(start_str.split(":")[0]), int(end_str.split(":")[0])

    def scheduling_settings(self) -> SchedulingSettings:
        """Build the immutable settings object consumed by the core."""
        work_start, work_end = self.work_hour_bounds()
        return SchedulingSettings(
            work_start_hour=work_start,
            work_end_hour=work_end,
            timezone=self.timezone,
            lookahead_days=self.lookahead_days,
        )

    def missing_credentials(self) -> list[str]:
        """Names of required settings that are not configured."""
        required = {
            "NOTION_API_KEY": self.notion_api_key,
            "NOTION_DATABASE_ID": self.notion_database_id,
            "GOOGLE_CALENDAR_CREDENTIALS": self.google_calendar_credentials,
        }
        return [name for name, value in required.items() if not value]


def load_config(config_file: Path | None = None, environ: dict | None = None) -> Config:
    """Load configuration from timeblock.conf, then apply environment overrides."""
    config = Config()
    config_file = config_file or CONFIG_FILE
    environ = os.environ if environ is None else environ

    if config_file.exists():
        for line in config_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _unquote(value.strip()))

    for key in ENV_KEYS:
        value = environ.get(key.upper())
        if value:
            _apply(config, key, value.strip())

    return config


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"'):
        end_quote = value.find('"', 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if value.startswith("'"):
        end_quote = value.find("'", 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _apply(config: Config, key: str, value: str) -> None:
    match key:
        case "notion_api_key":
            config.notion_api_key = value
        case "notion_database_id":
            config.notion_database_id = value
        case "google_calendar_credentials" | "google_calendar_credentials_path":
            config.google_calendar_credentials = value
        case "google_calendar_id":
            config.google_calendar_id = value
        case "timezone" | "default_timezone":
            config.timezone = value
        case "work_hours":
            config.work_hours = value
        case "work_start_hour":
            start, end = config.work_hour_bounds()
            config.work_hours = f"{_int(value, key, start):02d}:00-{end:02d}:00"
        case "work_end_hour":
            start, end = config.work_hour_bounds()
            config.work_hours = f"{start:02d}:00-{_int(value, key, end):02d}:00"
        case "lookahead_days":
            config.lookahead_days = _int(value, key, config.lookahead_days)
        case "port":
            config.port = _int(value, key, config.port)


def _int(value: str, key: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key.upper()}: {value!r}")
        return default
