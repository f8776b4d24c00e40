"""Tests for war_council.config."""

import json
from pathlib import Path

import pytest

from war_council.config import Settings, load_settings
from war_council.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("OPENROUTER_API_KEY", "OPENROUTER_BASE_URL", "COUNCILOR_MODEL", "WAR_COUNCIL_CONFIG"):
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "missing.json")
    assert settings.max_sentences == 5
    assert settings.max_words == 90
    assert settings.max_tool_rounds == 6
    assert settings.api_key is None


def test_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "max_sentences": 3,
        "models": {"councilor": "anthropic/claude-3-haiku"},
        "tts_voices": {"marshal": "onyx"},
    }))
    settings = load_settings(path)
    assert settings.max_sentences == 3
    assert settings.models.councilor == "anthropic/claude-3-haiku"
    assert settings.models.tts == "gpt-4o-mini-tts"
    assert settings.voice_for("marshal") == "onyx"
    assert settings.voice_for("treasurer") == "alloy"


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-env")
    monkeypatch.setenv("OPENROUTER_BASE_URL", "http://localhost:8080/v1")
    monkeypatch.setenv("COUNCILOR_MODEL", "local/model")
    settings = load_settings(tmp_path / "missing.json")
    assert settings.api_key == "sk-env"
    assert settings.base_url == "http://localhost:8080/v1"
    assert settings.models.councilor == "local/model"


def test_config_path_from_env(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "alt.json"
    path.write_text(json.dumps({"max_words": 40}))
    monkeypatch.setenv("WAR_COUNCIL_CONFIG", str(path))
    assert load_settings().max_words == 40


def test_unparseable_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{oops")
    with pytest.raises(ConfigError, match="Cannot read config file"):
        load_settings(path)


def test_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"max_sentences": 1}))
    with pytest.raises(ConfigError, match="Invalid config"):
        load_settings(path)


def test_api_key_not_serialized() -> None:
    assert "api_key" not in Settings(api_key="secret").model_dump()
