"""Pytest configuration and shared fixtures."""
import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from medlingo.cache import TranslationCache
from medlingo.config import AI_UNAVAILABLE
from medlingo.llm import ChatMessage, LLMProvider, LLMResponse
from medlingo.messages import Message, Role, create_message_store
from medlingo.translation import (
    BatchInput,
    BatchTranslation,
    MalformedResponseError,
    ProviderUnavailableError,
    SummarizeResponse,
    TranslateBatchResponse,
    TranslateResponse,
    TranslationProvider,
)

BASE_TIME = datetime(2026, 1, 15, 9, 30, tzinfo=UTC)


def make_message(
    message_id: int,
    text: str,
    role: Role = Role.PATIENT,
    target_language: str = "en",
    translated: str | None = None,
    audio_url: str | None = None,
) -> Message:
    """Build a stored message with a deterministic timestamp."""
    return Message(
        id=message_id,
        role=role,
        text_original=text,
        text_translated=translated if translated is not None else f"{target_language}:{text}",
        target_language=target_language,
        audio_url=audio_url,
        created_at=BASE_TIME + timedelta(seconds=message_id),
    )


class FakeTranslationProvider(TranslationProvider):
    """Scriptable provider that records every call.

    Translations default to ``"<lang>:<text>"`` unless overridden in
    ``translations[(text, lang)]``.
    """

    def __init__(self, translations: dict[tuple[str, str], str] | None = None):
        self.translations = dict(translations or {})
        self.translate_calls: list[tuple[str, str, Role | None]] = []
        self.batch_calls: list[tuple[list[int], str]] = []
        self.summarize_calls: list[str] = []

        self.fail_translate = False
        self.degraded = False
        self.fail_batch = False
        self.malformed_batch = False
        self.unexpected_error: Exception | None = None
        self.drop_ids: set[int] = set()
        self.gate: asyncio.Event | None = None

        self.summary = "Patient reports a fever."
        self.fail_summary = False
        self.closed = False

    def render(self, text: str, target_language: str) -> str:
        return self.translations.get((text, target_language), f"{target_language}:{text}")

    async def translate(
        self,
        text: str,
        target_language: str,
        role: Role | None = None,
    ) -> TranslateResponse:
        self.translate_calls.append((text, target_language, role))
        if self.fail_translate:
            raise ProviderUnavailableError("connection refused")
        return TranslateResponse(
            translated=self.render(text, target_language),
            error=AI_UNAVAILABLE if self.degraded else None,
        )

    async def translate_batch(
        self,
        inputs: list[BatchInput],
        target_language: str,
    ) -> TranslateBatchResponse:
        self.batch_calls.append(([item.id for item in inputs], target_language))
        if self.gate is not None:
            await self.gate.wait()
        if self.unexpected_error is not None:
            raise self.unexpected_error
        if self.fail_batch:
            raise ProviderUnavailableError("connection refused")
        if self.malformed_batch:
            raise MalformedResponseError("not JSON")
        return TranslateBatchResponse(
            translations=[
                BatchTranslation(id=item.id, translated=self.render(item.text, target_language))
                for item in inputs
                if item.id not in self.drop_ids
            ],
            error=AI_UNAVAILABLE if self.degraded else None,
        )

    async def summarize(self, conversation: str) -> SummarizeResponse:
        self.summarize_calls.append(conversation)
        if self.fail_summary:
            raise ProviderUnavailableError("connection refused")
        return SummarizeResponse(summary=self.summary)

    async def close(self) -> None:
        self.closed = True


class FakeLLM(LLMProvider):
    """LLM stand-in answering from a script."""

    def __init__(
        self,
        answers: list[str] | None = None,
        error: Exception | None = None,
        finish_reason: str | None = "stop",
    ):
        self.answers = list(answers or [])
        self.error = error
        self.finish_reason = finish_reason
        self.calls: list[list[ChatMessage]] = []
        self.options: list[dict[str, Any]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_output: bool = False,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append(messages)
        self.options.append({"temperature": temperature, "json_output": json_output, **kwargs})
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.answers.pop(0), model=self.model, finish_reason=self.finish_reason
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider():
    """Return a fresh fake translation provider."""
    return FakeTranslationProvider()


@pytest.fixture
def cache():
    """Return an in-memory translation cache."""
    return TranslationCache()


@pytest.fixture
def store():
    """Return an in-memory message store."""
    return create_message_store("memory")


@pytest.fixture
def fake_llm():
    """Return a fake LLM with no scripted answers."""
    return FakeLLM()
