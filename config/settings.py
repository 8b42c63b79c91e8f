from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_PORT = 5000
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.8
OPENAI_REQUEST_TIMEOUT = 30.0


def load_env_files(root: Optional[Path] = None) -> None:
    """Load `.env.local` (taking precedence) and then `.env` from the project root."""

    root = Path(root or Path.cwd())
    env_local = root / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)
    load_dotenv(dotenv_path=root / ".env", override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. Values are resolved
    once, when the settings object is built, and handed to the app at
    construction time.
    """

    def __init__(
        self,
        app_env: str = "development",
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        openai_api_key: Optional[str] = None,
        openai_model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        request_timeout: float = OPENAI_REQUEST_TIMEOUT,
        rate_limit_max: int = 10,
        rate_limit_window: float = 60.0,
        trust_forwarded: bool = False,
    ) -> None:
        self.app_env = app_env
        self.host = host
        self.port = port
        self.openai_api_key = openai_api_key or None
        self.openai_model = openai_model
        self.temperature = temperature
        self.request_timeout = request_timeout
        self.rate_limit_max = rate_limit_max
        self.rate_limit_window = rate_limit_window
        self.trust_forwarded = trust_forwarded

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            app_env=os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development",
            host=os.getenv("HOST", "0.0.0.0"),
            port=_int_env("PORT", DEFAULT_PORT),
            openai_api_key=(os.getenv("OPENAI_API_KEY") or "").strip() or None,
            openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            temperature=_float_env("MODEL_TEMPERATURE", DEFAULT_TEMPERATURE),
            request_timeout=_float_env("OPENAI_REQUEST_TIMEOUT", OPENAI_REQUEST_TIMEOUT),
            rate_limit_max=_int_env("RATE_LIMIT_MAX", 10),
            rate_limit_window=_float_env("RATE_LIMIT_WINDOW", 60.0),
            trust_forwarded=(os.getenv("TRUST_FORWARDED") or "").strip().lower() in {"1", "true", "yes"},
        )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"prod", "production"}

    @property
    def live_enabled(self) -> bool:
        return bool(self.openai_api_key)

    def api_key_preview(self) -> Optional[str]:
        # sk-proj...XXXX
        key = self.openai_api_key
        if not key:
            return None
        return f"{key[:7]}...{key[-4:]}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_env_files()
    return Settings.from_env()
