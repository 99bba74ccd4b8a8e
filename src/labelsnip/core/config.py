from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from labelsnip.core.chunking import DEFAULT_MAX_CHUNK_CHARS
from labelsnip.core.errors import ConfigError

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"


@dataclass(frozen=True)
class Settings:
    """Everything the completion client needs, built once at startup. The repr omits api_key."""

    api_key: str
    model: str = DEFAULT_MODEL
    endpoint: str = OPENAI_CHAT_URL
    temperature: float = 0.7
    max_tokens: int = 2000
    top_p: float = 1.0
    n: int = 1
    timeout_s: float = 300.0
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS

    def __repr__(self) -> str:
        return (
            f"Settings(model={self.model!r}, endpoint={self.endpoint!r}, "
            f"temperature={self.temperature}, max_tokens={self.max_tokens}, "
            f"max_chunk_chars={self.max_chunk_chars})"
        )


def load_settings(env_file: str | Path | None = ".env", **overrides) -> Settings:
    """
    Load an optional .env file, then build Settings from the environment.
    Variables already set in the process win over the file; non-None keyword
    overrides win over both.
    """
    if env_file is not None:
        env_path = Path(env_file)
        if env_path.is_file():
            load_dotenv(dotenv_path=env_path, override=False)
        else:
            logger.warning("Environment file %s not found, using process environment only", env_path)

    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("OPENAI_API_KEY is not set in environment variables.")

    values = {"api_key": api_key}
    model = os.getenv("OPENAI_MODEL", "").strip()
    if model:
        values["model"] = model
    endpoint = os.getenv("OPENAI_ENDPOINT", "").strip()
    if endpoint:
        values["endpoint"] = endpoint

    values.update({k: v for k, v in overrides.items() if v is not None})

    settings = Settings(**values)
    if settings.max_chunk_chars < 1:
        raise ConfigError(f"max_chunk_chars must be positive, got {settings.max_chunk_chars}")
    if settings.timeout_s <= 0:
        raise ConfigError(f"timeout must be positive, got {settings.timeout_s}")
    return settings
