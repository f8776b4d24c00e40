"""Runtime configuration - config.json plus environment overrides."""

from __future__ import annotations
import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from war_council.errors import ConfigError

load_dotenv()

DEFAULT_CONFIG_PATH = Path("config.json")


class ModelSettings(BaseModel):
    """Model identifiers per task."""
    councilor: str = "openai/gpt-4o-mini"
    tts: str = "gpt-4o-mini-tts"


class Settings(BaseModel):
    """All tunables for a council session."""
    max_sentences: int = Field(default=5, ge=2)
    max_words: int = Field(default=90, ge=1)
    max_tool_rounds: int = Field(default=6, ge=1)
    request_timeout: float = Field(default=60.0, gt=0)
    loop_timeout: float = Field(default=180.0, gt=0)

    data_dir: Path = Path("data")
    persistence_path: Path = Path("data/state.json")
    runtime_audio_dir: Path = Path("runtime/audio")

    base_url: str = "https://openrouter.ai/api/v1"
    api_key: Optional[str] = Field(default=None, exclude=True)
    models: ModelSettings = Field(default_factory=ModelSettings)
    tts_voices: dict[str, str] = Field(default_factory=dict)
    default_voice: str = "alloy"

    def voice_for(self, advisor_id: str) -> str:
        """Voice used when synthesizing this advisor's speech."""
        return self.tts_voices.get(advisor_id, self.default_voice)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a JSON file, then apply environment overrides.

    A missing file is not an error; defaults apply. A file that exists but
    cannot be parsed raises ConfigError.
    """
    config_path = path or Path(os.getenv("WAR_COUNCIL_CONFIG", str(DEFAULT_CONFIG_PATH)))

    raw: dict = {}
    if config_path.exists():
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    try:
        settings = Settings(**raw)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e

    settings.api_key = os.getenv("OPENROUTER_API_KEY") or settings.api_key
    settings.base_url = os.getenv("OPENROUTER_BASE_URL", settings.base_url)
    settings.models.councilor = os.getenv("COUNCILOR_MODEL", settings.models.councilor)
    return settings
