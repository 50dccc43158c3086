from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///db/development.sqlite3"
CONFIG_FILENAME = "config.json"

VALID_ACCESS_TYPES = ("OPEN", "TRUSTED", "RESTRICTED")
VALID_MODERATION_VALUES = ("OFF", "ON")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigurationError(f"{name} is required")
    return value


@dataclass(frozen=True)
class Settings:
    slack_signing_secret: str
    google_client_id: str
    google_client_secret: str
    app_url: str | None = None
    ga_measurement_id: str | None = None
    ga_api_secret: str | None = None
    app_env: str = "development"
    log_level: str | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        app_url = os.getenv("APP_URL", "").strip().rstrip("/")
        return cls(
            slack_signing_secret=_require_env("SLACK_SIGNING_SECRET"),
            google_client_id=_require_env("GOOGLE_CLIENT_ID"),
            google_client_secret=_require_env("GOOGLE_CLIENT_SECRET"),
            app_url=app_url or None,
            ga_measurement_id=os.getenv("GA_MEASUREMENT_ID") or None,
            ga_api_secret=os.getenv("GA_API_SECRET") or None,
            app_env=os.getenv("APP_ENV", "development").strip().lower() or "development",
            log_level=os.getenv("LOG_LEVEL") or None,
        )


def _parse_bool(raw: Any, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    lowered = str(raw).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class MeetingConfig:
    """Options applied to every Meet space this service creates.

    Values come from ``config.json`` with ``MEET_*`` environment overrides.
    """

    access_type: str = "TRUSTED"
    moderation: str = "OFF"
    auto_transcribe: bool = False
    auto_record: bool = False
    smart_notes: bool = False

    def __post_init__(self) -> None:
        if self.access_type not in VALID_ACCESS_TYPES:
            raise ConfigurationError(
                f"Invalid access_type: {self.access_type}. Must be one of: {', '.join(VALID_ACCESS_TYPES)}"
            )
        if self.moderation not in VALID_MODERATION_VALUES:
            raise ConfigurationError(
                f"Invalid moderation: {self.moderation}. Must be one of: {', '.join(VALID_MODERATION_VALUES)}"
            )

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "MeetingConfig":
        access_type = os.getenv("MEET_ACCESS_TYPE") or data.get("access_type") or "TRUSTED"
        moderation = os.getenv("MEET_MODERATION") or data.get("moderation") or "OFF"
        return cls(
            access_type=str(access_type).upper(),
            moderation=str(moderation).upper(),
            auto_transcribe=_parse_bool(os.getenv("MEET_AUTO_TRANSCRIBE", data.get("auto_transcribe")), False),
            auto_record=_parse_bool(os.getenv("MEET_AUTO_RECORD", data.get("auto_record")), False),
            smart_notes=_parse_bool(os.getenv("MEET_SMART_NOTES", data.get("smart_notes")), False),
        )

    @classmethod
    def load(cls, path: str | Path | None = None) -> "MeetingConfig":
        """Read ``path``, else ``$MEET_CONFIG_PATH``, else ``config.json`` in the working directory."""
        config_path = Path(path or os.getenv("MEET_CONFIG_PATH") or Path.cwd() / CONFIG_FILENAME)
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}\nPlease create config.json with meeting settings."
            )
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config.json: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError("Invalid JSON in config.json: expected an object")
        return cls.from_mapping(data)
