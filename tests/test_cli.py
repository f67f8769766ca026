"""Tests for configuration and the command line interface."""
import io
import logging

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from medlingo.cli.app import app
from medlingo.cli.providers import get_llm
from medlingo.config import Settings, default_language_for, local_mock_translation
from medlingo.logging_setup import setup_logging

runner = CliRunner()


@pytest.fixture
def offline_env(monkeypatch, tmp_path):
    """In-process translation with no model and throwaway storage."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.setenv("MEDLINGO_TRANSLATION_MODE", "local")
    monkeypatch.setenv("MEDLINGO_STORE_BACKEND", "sqlite")
    monkeypatch.setenv("MEDLINGO_DB_PATH", str(tmp_path / "chat.db"))
    monkeypatch.setenv("MEDLINGO_CACHE_BACKEND", "memory")
    monkeypatch.setenv("MEDLINGO_AUDIO_DIR", str(tmp_path / "audio"))
    monkeypatch.setenv("MEDLINGO_LOG_LEVEL", "WARNING")
    yield tmp_path
    logging.getLogger("medlingo").propagate = True


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("MEDLINGO_API_URL", "PORT", "ALLOWED_ORIGINS", "MEDLINGO_DEBOUNCE_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.api_url == "http://localhost:3000"
        assert settings.port == 3000
        assert settings.allowed_origins == ["*"]
        assert settings.debounce_seconds == 1.0

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:5173, https://clinic.example")
        monkeypatch.setenv("LLM_PROVIDER", "OpenAI")
        monkeypatch.setenv("MEDLINGO_DEBOUNCE_SECONDS", "2.5")

        settings = Settings.from_env()

        assert settings.port == 8080
        assert settings.allowed_origins == ["http://localhost:5173", "https://clinic.example"]
        assert settings.llm_provider == "openai"
        assert settings.debounce_seconds == 2.5

    def test_role_defaults(self):
        assert default_language_for("doctor") == "es"
        assert default_language_for("patient") == "en"

    def test_mock_translation(self):
        assert local_mock_translation("Hello") == "[Mock Translate]: Hello"


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "medlingo.log"

        logger = setup_logging("debug", log_file=log_file)
        logging.getLogger("medlingo.conversation.session").debug("session started")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert "session started" in log_file.read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True

    def test_unknown_level_falls_back_to_info(self, tmp_path):
        logger = setup_logging("chatty", log_file=tmp_path / "medlingo.log")

        assert logger.level == logging.INFO

        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True


class TestCommands:
    """Tests for the Typer commands."""

    def test_send_and_history(self, offline_env):
        sent = runner.invoke(app, ["send", "I have a fever", "--role", "patient"])

        assert sent.exit_code == 0, sent.output
        assert "Sent #1" in sent.output

        shown = runner.invoke(app, ["history", "--role", "patient", "--search", "fever"])

        assert shown.exit_code == 0, shown.output
        assert "I have a fever" in shown.output

    def test_history_empty(self, offline_env):
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0, result.output
        assert "No messages." in result.output

    def test_send_audio(self, offline_env):
        clip = offline_env / "clip.webm"
        clip.write_bytes(b"webm-bytes")

        result = runner.invoke(app, ["send", "ignored", "--audio", str(clip)])

        assert result.exit_code == 0, result.output
        assert "[Audio Translation Pending]" in result.output
        assert len(list((offline_env / "audio").iterdir())) == 1

    def test_unsupported_language(self, offline_env):
        result = runner.invoke(app, ["history", "--language", "de"])

        assert result.exit_code == 1
        assert "Unsupported language" in result.output

    def test_summarize_without_model(self, offline_env):
        runner.invoke(app, ["send", "Hello", "--role", "doctor"])

        result = runner.invoke(app, ["summarize"])

        assert result.exit_code == 0, result.output
        assert "Error generating summary." in result.output

    def test_unknown_llm_provider_stops_serve(self, offline_env, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "deepseek")

        result = runner.invoke(app, ["serve", "--port", "3999"])

        assert result.exit_code == 1
        assert "Unknown LLM provider: deepseek" in result.output


class TestProviders:
    """Tests for environment-driven provider construction."""

    def test_missing_key_runs_in_fallback_mode(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("LLM_PROVIDER", "gemini")

        assert get_llm(Settings.from_env(), console=Console(file=io.StringIO())) is None

    def test_unknown_provider_exits(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "deepseek")
        output = io.StringIO()

        with pytest.raises(typer.Exit) as excinfo:
            get_llm(Settings.from_env(), console=Console(file=output))

        assert excinfo.value.exit_code == 1
        assert "Unknown LLM provider" in output.getvalue()
