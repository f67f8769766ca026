"""Configuration constants and environment-driven settings.

Centralizes magic strings and defaults shared by the client, the
translation service and the CLI.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Languages offered by the language selector
SUPPORTED_LANGUAGES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "hi": "Hindi",
}

# A doctor reads in Spanish and a patient in English unless they pick otherwise
ROLE_DEFAULT_LANGUAGES = {
    "doctor": "es",
    "patient": "en",
}

# Debounce window before a reconciliation pass runs (seconds)
DEFAULT_DEBOUNCE_SECONDS = 1.0

# Shown while a translation for the viewer's language is missing
TRANSLATION_PLACEHOLDER = "..."

# Error tag reported by the service when the upstream model call failed
AI_UNAVAILABLE = "AI_UNAVAILABLE"

# Audio messages carry a stub transcript until transcription exists
AUDIO_TRANSCRIPT_PLACEHOLDER = "[Audio Message]"
AUDIO_TRANSLATION_PLACEHOLDER = "[Audio Translation Pending]"

# Summary fallbacks
SUMMARY_EMPTY_FALLBACK = "Failed to generate summary."
SUMMARY_ERROR_FALLBACK = "Error generating summary."
SUMMARY_SERVICE_FALLBACK = "Summary unavailable."


def service_fallback_translation(text: str, target_language: str) -> str:
    """Tagged passthrough returned by the service when the model is down."""
    return f"[AI unavailable: {target_language}] {text}"


def local_mock_translation(text: str) -> str:
    """Client-side substitute used when the service cannot be reached at all."""
    return f"[Mock Translate]: {text}"


def default_language_for(role: str) -> str:
    """Return the default target language for a role."""
    return ROLE_DEFAULT_LANGUAGES.get(str(role), "en")


class Settings(BaseModel):
    """Runtime settings gathered from the environment."""

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default="http://localhost:3000", description="Translation service base URL")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    llm_provider: str = Field(default="gemini")
    translation_mode: str = Field(default="http", description="'http' or 'local'")
    store_backend: str = Field(default="sqlite")
    db_path: Path = Field(default=Path("./medlingo.db"))
    cache_backend: str = Field(default="sqlite")
    cache_path: Path = Field(default=Path("./translations_cache.db"))
    audio_dir: Path = Field(default=Path("./audio"))
    audio_base_url: str | None = Field(default=None)
    debounce_seconds: float = Field(default=DEFAULT_DEBOUNCE_SECONDS, gt=0)
    log_level: str = Field(default="INFO")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Environment variables:
            MEDLINGO_API_URL: Translation service base URL
            HOST / PORT: Bind address for ``medlingo serve``
            ALLOWED_ORIGINS: Comma separated CORS origins
            LLM_PROVIDER: 'gemini' or 'openai'
            MEDLINGO_TRANSLATION_MODE: 'http' (call the service) or 'local'
            MEDLINGO_STORE_BACKEND / MEDLINGO_DB_PATH: Message store
            MEDLINGO_CACHE_BACKEND / MEDLINGO_CACHE_PATH: Translation cache
            MEDLINGO_AUDIO_DIR / MEDLINGO_AUDIO_BASE_URL: Audio uploads
            MEDLINGO_DEBOUNCE_SECONDS: Reconciliation debounce window
            MEDLINGO_LOG_LEVEL: Log level name
        """
        origins = os.getenv("ALLOWED_ORIGINS", "*")
        return cls(
            api_url=os.getenv("MEDLINGO_API_URL", "http://localhost:3000"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
            llm_provider=os.getenv("LLM_PROVIDER", "gemini").lower(),
            translation_mode=os.getenv("MEDLINGO_TRANSLATION_MODE", "http").lower(),
            store_backend=os.getenv("MEDLINGO_STORE_BACKEND", "sqlite").lower(),
            db_path=Path(os.getenv("MEDLINGO_DB_PATH", "./medlingo.db")),
            cache_backend=os.getenv("MEDLINGO_CACHE_BACKEND", "sqlite").lower(),
            cache_path=Path(os.getenv("MEDLINGO_CACHE_PATH", "./translations_cache.db")),
            audio_dir=Path(os.getenv("MEDLINGO_AUDIO_DIR", "./audio")),
            audio_base_url=os.getenv("MEDLINGO_AUDIO_BASE_URL") or None,
            debounce_seconds=float(
                os.getenv("MEDLINGO_DEBOUNCE_SECONDS", str(DEFAULT_DEBOUNCE_SECONDS))
            ),
            log_level=os.getenv("MEDLINGO_LOG_LEVEL", "INFO").upper(),
        )
