"""Environment-driven settings for the assistant."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Runtime configuration read from the environment."""

    # Completion service
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_referer: str = "https://sahulat-ai.vercel.app"
    openrouter_title: str = "Sahulat AI"
    model_tier: str = "chat"
    completion_timeout: float = 60.0

    # Search providers
    serper_api_key: str | None = None
    serper_url: str = "https://google.serper.dev/search"
    duckduckgo_url: str = "https://api.duckduckgo.com/"
    search_timeout: float = 10.0

    # Locale
    default_locale: str = "en"
    default_country: str = "Pakistan"

    # Collaborators
    programs_path: str = "programs.yaml"
    chat_db_path: str = "chats.db"

    log_level: str = "INFO"

    @property
    def has_completion_credentials(self) -> bool:
        return bool(self.openrouter_api_key)


def load_settings() -> Settings:
    """Build Settings from environment variables (call load_dotenv() first)."""
    return Settings(
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
        openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
        openrouter_referer=os.getenv("OPENROUTER_REFERER", "https://sahulat-ai.vercel.app"),
        openrouter_title=os.getenv("OPENROUTER_TITLE", "Sahulat AI"),
        model_tier=os.getenv("MODEL_TIER", "chat"),
        completion_timeout=_env_float("COMPLETION_TIMEOUT", 60.0),
        serper_api_key=os.getenv("SERPER_API_KEY") or None,
        serper_url=os.getenv("SERPER_URL", "https://google.serper.dev/search"),
        duckduckgo_url=os.getenv("DUCKDUCKGO_URL", "https://api.duckduckgo.com/"),
        search_timeout=_env_float("SEARCH_TIMEOUT", 10.0),
        default_locale=os.getenv("DEFAULT_LOCALE", "en"),
        default_country=os.getenv("DEFAULT_COUNTRY", "Pakistan"),
        programs_path=os.getenv("PROGRAMS_PATH", "programs.yaml"),
        chat_db_path=os.getenv("CHAT_DB_PATH", "chats.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r - using %s", name, raw, default)
        return default
