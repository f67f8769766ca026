"""LLM-backed translator used by the translation service.

Hidden design decisions:
- Prompt wording per speaker role
- How a batch is packed into one model call and unpacked again
- What is returned when the model is down (tagged passthrough text)
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from ..config import AI_UNAVAILABLE, SUPPORTED_LANGUAGES, service_fallback_translation
from ..llm import ChatMessage, LLMProvider
from ..messages.models import Role
from ..prompts import load_prompt, render_prompt
from .base import SummarizationError, TranslationProvider
from .models import (
    BatchInput,
    BatchTranslation,
    SummarizeResponse,
    TranslateBatchResponse,
    TranslateResponse,
)

logger = logging.getLogger(__name__)

_ROLE_GUIDANCE = {
    Role.DOCTOR: (
        "The speaker is the doctor. Use clear, patient-friendly wording while keeping "
        "medical terms accurate."
    ),
    Role.PATIENT: (
        "The speaker is the patient. Render their description faithfully, keeping their "
        "own way of describing symptoms."
    ),
}

_batch_answer = TypeAdapter(TranslateBatchResponse | list[BatchTranslation])


def language_name(code: str) -> str:
    """Human-readable name for a language code (the code itself if unknown)."""
    return SUPPORTED_LANGUAGES.get(code, code)


def parse_batch_answer(content: str, expected_ids: list[int]) -> dict[int, str]:
    """Parse the model's JSON answer for a batch.

    Args:
        content: Raw model output, ``{"translations": [{id, translated}]}``
            or the bare list
        expected_ids: Ids that must all be present

    Returns:
        Mapping of id to translation, restricted to ``expected_ids``

    Raises:
        ValueError: If the answer is not valid JSON of that shape or does
            not cover every expected id
    """
    try:
        answer = _batch_answer.validate_json(content.strip())
    except ValidationError as e:
        raise ValueError(f"Unparseable batch answer: {e}") from e

    items = answer.translations if isinstance(answer, TranslateBatchResponse) else answer
    wanted = set(expected_ids)
    translations = {item.id: item.translated for item in items if item.id in wanted}
    missing = wanted - translations.keys()
    if missing:
        raise ValueError(f"Batch answer is missing ids: {sorted(missing)}")
    return translations


class Translator(TranslationProvider):
    """Translation provider that calls an LLM directly.

    Model failures never escape ``translate`` or ``translate_batch``: they
    degrade to tagged passthrough text with ``error="AI_UNAVAILABLE"``.
    """

    def __init__(self, llm: LLMProvider | None, temperature: float = 0.3):
        """Initialize the translator.

        Args:
            llm: Model backend, or None to run in permanent fallback mode
            temperature: Sampling temperature for translations
        """
        self._llm = llm
        self._temperature = temperature

    @property
    def available(self) -> bool:
        return self._llm is not None

    async def translate(
        self,
        text: str,
        target_language: str,
        role: Role | None = None,
    ) -> TranslateResponse:
        if self._llm is None:
            return self._fallback(text, target_language)

        system = render_prompt(
            "translate",
            language_name=language_name(target_language),
            language_code=target_language,
            role_guidance=_ROLE_GUIDANCE.get(role, "") if role else "",
        )
        try:
            response = await self._llm.chat_completion(
                [ChatMessage.system(system), ChatMessage.user(text)],
                temperature=self._temperature,
            )
            translated = response.content.strip()
            if not translated:
                raise ValueError("empty translation")
        except Exception as e:  # vendor SDKs raise their own hierarchies
            logger.warning("Translation to %s failed, using fallback: %s", target_language, e)
            return self._fallback(text, target_language)

        return TranslateResponse(translated=translated)

    async def translate_batch(
        self,
        inputs: list[BatchInput],
        target_language: str,
    ) -> TranslateBatchResponse:
        if not inputs:
            return TranslateBatchResponse(translations=[])
        if self._llm is None:
            return self._batch_fallback(inputs, target_language)

        system = render_prompt(
            "translate_batch",
            language_name=language_name(target_language),
            language_code=target_language,
        )
        payload = json.dumps(
            [{"id": item.id, "role": item.role.value if item.role else None, "text": item.text}
             for item in inputs],
            ensure_ascii=False,
        )
        ids = [item.id for item in inputs]

        try:
            response = await self._llm.chat_completion(
                [ChatMessage.system(system), ChatMessage.user(payload)],
                temperature=self._temperature,
                json_output=True,
            )
            if response.truncated:
                raise ValueError("batch answer was cut off at the token limit")
            translations = parse_batch_answer(response.content, ids)
        except Exception as e:  # vendor SDK errors and unusable answers alike
            logger.warning(
                "Batch translation of %d messages to %s failed, using fallback: %s",
                len(inputs), target_language, e
            )
            return self._batch_fallback(inputs, target_language)

        return TranslateBatchResponse(
            translations=[BatchTranslation(id=i, translated=translations[i]) for i in ids]
        )

    async def summarize(self, conversation: str) -> SummarizeResponse:
        """Summarize a transcript.

        Raises:
            SummarizationError: If no model is configured or the call fails
        """
        if not conversation.strip():
            return SummarizeResponse(summary="No conversation to summarize yet.")
        if self._llm is None:
            raise SummarizationError("No language model configured")

        try:
            response = await self._llm.chat_completion(
                [
                    ChatMessage.system(load_prompt("summarize")),
                    ChatMessage.user(conversation),
                ],
                temperature=self._temperature,
            )
        except Exception as e:  # vendor SDKs raise their own hierarchies
            raise SummarizationError(f"Summarization failed: {e}") from e

        summary = response.content.strip()
        if not summary:
            raise SummarizationError("Model returned an empty summary")
        return SummarizeResponse(summary=summary)

    async def close(self) -> None:
        if self._llm is not None:
            await self._llm.close()

    @staticmethod
    def _fallback(text: str, target_language: str) -> TranslateResponse:
        return TranslateResponse(
            translated=service_fallback_translation(text, target_language),
            error=AI_UNAVAILABLE,
        )

    @staticmethod
    def _batch_fallback(inputs: list[BatchInput], target_language: str) -> TranslateBatchResponse:
        return TranslateBatchResponse(
            translations=[
                BatchTranslation(
                    id=item.id,
                    translated=service_fallback_translation(item.text, target_language),
                )
                for item in inputs
            ],
            error=AI_UNAVAILABLE,
        )
