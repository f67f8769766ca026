"""Provider factory functions for CLI.

Centralizes creation of the LLM, translation provider, message store,
cache and audio storage from environment variables. Hides configuration
details from command implementations.
"""

import os

import typer
from rich.console import Console

from ..blobs import BlobStore, create_blob_store
from ..cache import TranslationCache, create_cache_backend
from ..config import Settings
from ..llm import LLMProvider, create_llm_provider
from ..messages import MessageStore, create_message_store
from ..translation import HttpTranslationClient, TranslationProvider, Translator

# Default console for output
_console = Console()


def get_settings() -> Settings:
    """Read settings from the environment."""
    return Settings.from_env()


def get_llm(settings: Settings, console: Console | None = None) -> LLMProvider | None:
    """Create the LLM provider from environment variables.

    Returns:
        LLM provider instance, or None if the API key is missing (the service
        then answers with fallback translations)

    Raises:
        SystemExit: If LLM_PROVIDER names an unsupported provider

    Environment variables:
        LLM_PROVIDER: Provider type (gemini, openai; default: gemini)
        GEMINI_API_KEY: Gemini API key (for gemini provider)
        GEMINI_MODEL: Gemini model (default: gemini-2.5-flash)
        OPENAI_API_KEY: OpenAI API key (for openai provider)
        OPENAI_CHAT_MODEL: OpenAI model (default: gpt-4o-mini)
    """
    con = console or _console
    llm_provider = settings.llm_provider

    if llm_provider == "gemini":
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: GEMINI_API_KEY not set, translations will use fallback text[/yellow]")
            return None
        model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        return create_llm_provider("gemini", api_key=api_key, model=model)

    if llm_provider == "openai":
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set, translations will use fallback text[/yellow]")
            return None
        model = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
        return create_llm_provider("openai", api_key=api_key, model=model)

    con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
    con.print("Set LLM_PROVIDER to 'gemini' or 'openai'")
    raise typer.Exit(code=1)


def get_translator(settings: Settings, console: Console | None = None) -> Translator:
    """Create the service-side translator."""
    return Translator(get_llm(settings, console))


def get_translation_provider(settings: Settings, console: Console | None = None) -> TranslationProvider:
    """Create the client-side translation provider.

    ``MEDLINGO_TRANSLATION_MODE=http`` (default) talks to the service at
    ``MEDLINGO_API_URL``; ``local`` runs the translator in-process.
    """
    if settings.translation_mode == "local":
        return get_translator(settings, console)
    return HttpTranslationClient(base_url=settings.api_url)


def get_message_store(settings: Settings) -> MessageStore:
    """Create the message store.

    Environment variables:
        MEDLINGO_STORE_BACKEND: 'sqlite' (default) or 'memory'
        MEDLINGO_DB_PATH: SQLite file shared by both participants
    """
    if settings.store_backend == "sqlite":
        return create_message_store("sqlite", path=settings.db_path)
    return create_message_store(settings.store_backend)


def get_cache(settings: Settings) -> TranslationCache:
    """Create this viewer's translation cache.

    Environment variables:
        MEDLINGO_CACHE_BACKEND: 'sqlite' (default), 'json' or 'memory'
        MEDLINGO_CACHE_PATH: Cache file location
    """
    if settings.cache_backend in ("sqlite", "json"):
        backend = create_cache_backend(settings.cache_backend, path=settings.cache_path)
    else:
        backend = create_cache_backend(settings.cache_backend)
    return TranslationCache(backend)


def get_blob_store(settings: Settings) -> BlobStore:
    """Create audio storage.

    Environment variables:
        MEDLINGO_AUDIO_DIR: Directory for recordings
        MEDLINGO_AUDIO_BASE_URL: Public URL prefix for that directory
    """
    return create_blob_store(
        "local",
        directory=settings.audio_dir,
        base_url=settings.audio_base_url,
    )
