"""OpenAI chat completions provider.

Structured answers (batch translations) use JSON mode, which only accepts a
top-level JSON object and requires the word "JSON" somewhere in the prompt.
"""

import logging
from typing import Any

from openai import AsyncOpenAI

from ..base import EmptyCompletionError, LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

JSON_RESPONSE_FORMAT = {"type": "json_object"}


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation.

    Hidden design decisions:
    - JSON mode via ``response_format`` for structured answers
    - Refusals and blank answers surface as EmptyCompletionError
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default chat model
            base_url: Optional OpenAI-compatible endpoint
            organization: Optional organization ID
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    def _build_request(
        self,
        messages: list[ChatMessage],
        model: str | None,
        temperature: float,
        max_tokens: int | None,
        json_output: bool,
        extra: dict[str, Any],
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": model or self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            **extra,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        if json_output:
            request["response_format"] = JSON_RESPONSE_FORMAT
        return request

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_output: bool = False,
        **kwargs: Any
    ) -> LLMResponse:
        request = self._build_request(messages, model, temperature, max_tokens, json_output, kwargs)
        completion = await self._client.chat.completions.create(**request)

        choice = completion.choices[0]
        refusal = getattr(choice.message, "refusal", None)
        if refusal:
            raise EmptyCompletionError(f"OpenAI refused the request: {refusal}")
        content = choice.message.content or ""
        if not content.strip():
            raise EmptyCompletionError(
                f"OpenAI returned no content (finish_reason={choice.finish_reason})"
            )

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }
            logger.debug("OpenAI %s used %d tokens", completion.model, usage["total_tokens"])

        return LLMResponse(
            content=content,
            model=completion.model,
            finish_reason=choice.finish_reason,
            usage=usage
        )

    async def close(self) -> None:
        await self._client.close()
