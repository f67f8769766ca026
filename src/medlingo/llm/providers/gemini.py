"""Google Gemini LLM provider implementation.

Clinical descriptions (symptoms, injuries, medication) trip Gemini's default
safety filters often enough that the thresholds are relaxed. Blank answers
are retried a few times before giving up, and the candidate's finish reason
is kept so a SAFETY block shows up in the logs instead of as a silent blank.
"""

import asyncio
import logging
from typing import Any

from google import genai
from google.genai import types

from ..base import EmptyCompletionError, LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"

DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]


def _finish_reason(response: Any) -> str | None:
    if not response.candidates:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        return getattr(block_reason, "name", None) or (str(block_reason) if block_reason else None)
    reason = response.candidates[0].finish_reason
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


def _response_text(response: Any) -> str:
    """Concatenate the first candidate's text parts ("" when blocked)."""
    if not response.candidates:
        return ""
    candidate = response.candidates[0]
    if not candidate.content or not candidate.content.parts:
        return ""
    return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - System prompt goes to ``system_instruction``, the rest to ``contents``
    - JSON output via ``response_mime_type``
    - Relaxed safety thresholds and retry on blank answers
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model
            max_retries: Attempts before giving up on blank answers
            **client_kwargs: Additional kwargs for Client
        """
        self._model = model
        self._max_retries = max_retries
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    def build_config(
        self,
        messages: list[ChatMessage],
        temperature: float,
        max_tokens: int | None,
        json_output: bool,
        extra: dict[str, Any],
    ) -> tuple[types.GenerateContentConfig, list[types.Content]]:
        """Split prompt messages into a request config and conversation contents."""
        system_parts = [m.content for m in messages if m.role == "system"]
        contents = [
            types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[types.Part(text=m.content)]
            )
            for m in messages
            if m.role != "system"
        ]

        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction="\n\n".join(system_parts) or None,
            safety_settings=DEFAULT_SAFETY_SETTINGS,
            max_output_tokens=max_tokens,
            response_mime_type=JSON_MIME_TYPE if json_output else None,
            **extra
        )
        return config, contents

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_output: bool = False,
        **kwargs: Any
    ) -> LLMResponse:
        model_to_use = model or self._model
        config, contents = self.build_config(messages, temperature, max_tokens, json_output, kwargs)

        finish_reason = None
        for attempt in range(1, self._max_retries + 1):
            response = await self._client.aio.models.generate_content(
                model=model_to_use,
                contents=contents,
                config=config
            )
            finish_reason = _finish_reason(response)
            content = _response_text(response)
            if content.strip():
                usage = None
                if response.usage_metadata:
                    usage = {
                        "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
                        "completion_tokens": response.usage_metadata.candidates_token_count or 0,
                        "total_tokens": response.usage_metadata.total_token_count or 0
                    }
                return LLMResponse(
                    content=content,
                    model=model_to_use,
                    finish_reason=finish_reason,
                    usage=usage
                )

            logger.debug(
                "Blank Gemini answer (attempt %d/%d, finish_reason=%s)",
                attempt, self._max_retries, finish_reason
            )
            if attempt < self._max_retries:
                await asyncio.sleep(0.5 * attempt)

        raise EmptyCompletionError(
            f"Gemini returned no content after {self._max_retries} attempts "
            f"(finish_reason={finish_reason})"
        )

    async def close(self) -> None:
        """The GenAI client holds no resources that need explicit release."""
