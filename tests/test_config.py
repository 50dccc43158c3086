from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from slackmeet.config import DEFAULT_DATABASE_URL, MeetingConfig, Settings
from slackmeet.db import get_database_url
from slackmeet.errors import ConfigurationError
from slackmeet.log import resolve_log_level

ROOT = Path(__file__).resolve().parents[1]

MEET_ENV = ["MEET_ACCESS_TYPE", "MEET_AUTO_TRANSCRIBE", "MEET_AUTO_RECORD", "MEET_SMART_NOTES", "MEET_MODERATION", "MEET_CONFIG_PATH"]


@pytest.fixture(autouse=True)
def _clear_meet_env(monkeypatch) -> None:
    for name in MEET_ENV:
        monkeypatch.delenv(name, raising=False)


def test_loads_repository_config_file(monkeypatch) -> None:
    monkeypatch.chdir(ROOT)

    config = MeetingConfig.load()

    assert config == MeetingConfig(
        access_type="TRUSTED", moderation="OFF", auto_transcribe=False, auto_record=False, smart_notes=False
    )


def test_default_path_resolves_from_working_directory(monkeypatch, tmp_path) -> None:
    (tmp_path / "config.json").write_text(json.dumps({"access_type": "OPEN"}), encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert MeetingConfig.load().access_type == "OPEN"


def test_config_path_env_wins_over_working_directory(monkeypatch, tmp_path) -> None:
    (tmp_path / "config.json").write_text(json.dumps({"access_type": "OPEN"}), encoding="utf-8")
    elsewhere = tmp_path / "deploy.json"
    elsewhere.write_text(json.dumps({"access_type": "RESTRICTED"}), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MEET_CONFIG_PATH", str(elsewhere))

    assert MeetingConfig.load().access_type == "RESTRICTED"


def test_missing_config_file_raises(tmp_path) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        MeetingConfig.load(tmp_path / "config.json")

    assert "not found" in str(exc_info.value)
    assert "create config.json" in str(exc_info.value)


def test_invalid_json_raises(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid JSON"):
        MeetingConfig.load(path)


def test_file_values_are_normalized(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"access_type": "open", "moderation": "on", "auto_record": "yes"}), encoding="utf-8")

    config = MeetingConfig.load(path)

    assert config.access_type == "OPEN"
    assert config.moderation == "ON"
    assert config.auto_record is True
    assert config.smart_notes is False


def test_env_overrides_file_values(monkeypatch) -> None:
    monkeypatch.setenv("MEET_ACCESS_TYPE", "restricted")
    monkeypatch.setenv("MEET_AUTO_TRANSCRIBE", "1")
    monkeypatch.setenv("MEET_SMART_NOTES", "maybe")

    config = MeetingConfig.from_mapping({"access_type": "OPEN", "smart_notes": True})

    assert config.access_type == "RESTRICTED"
    assert config.auto_transcribe is True
    # unrecognised boolean strings fall back to the default
    assert config.smart_notes is False


def test_invalid_enum_values_raise() -> None:
    with pytest.raises(ConfigurationError, match="Invalid access_type: PUBLIC"):
        MeetingConfig.from_mapping({"access_type": "public"})
    with pytest.raises(ConfigurationError, match="Invalid moderation"):
        MeetingConfig.from_mapping({"moderation": "sometimes"})


def test_settings_require_secrets(monkeypatch) -> None:
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "secret")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "cid")
    monkeypatch.delenv("GOOGLE_CLIENT_SECRET", raising=False)

    with pytest.raises(ConfigurationError, match="GOOGLE_CLIENT_SECRET is required"):
        Settings.from_env()


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "secret")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "cid")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "csecret")
    monkeypatch.setenv("APP_URL", "https://meet.example.com/")
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("GA_MEASUREMENT_ID", raising=False)

    settings = Settings.from_env()

    assert settings.app_url == "https://meet.example.com"
    assert settings.app_env == "production"
    assert settings.ga_measurement_id is None


@pytest.mark.parametrize(
    ("level", "env", "expected"),
    [
        ("warn", "development", logging.WARNING),
        ("ERROR", "production", logging.ERROR),
        ("nonsense", "development", logging.INFO),
    ],
)
def test_resolve_log_level_from_value(level, env, expected) -> None:
    assert resolve_log_level(level, env) == expected


def test_resolve_log_level_defaults_by_environment(monkeypatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert resolve_log_level(None, "production") == logging.INFO
    assert resolve_log_level(None, "development") == logging.DEBUG


def test_database_url_comes_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://meet@db/meet")
    assert get_database_url() == "postgresql+psycopg://meet@db/meet"

    monkeypatch.setenv("DATABASE_URL", "  ")
    assert get_database_url() == DEFAULT_DATABASE_URL
