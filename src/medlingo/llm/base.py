from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse


class EmptyCompletionError(RuntimeError):
    """The model answered with no usable text (blocked, refused or blank)."""


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which model vendor translates
    and summarizes. Implementations handle:
    - API client setup and authentication
    - Mapping prompts onto the vendor's message format
    - Switching the vendor into JSON output mode for structured answers
    - Turning blocked or blank answers into EmptyCompletionError

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            response = await provider.chat_completion(messages)
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Get the default model name."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        json_output: bool = False,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Prompt messages (system instruction first, if any)
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            json_output: Constrain the answer to a single JSON document.
                The prompt must still describe the expected shape.
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            EmptyCompletionError: If the model produced no text
            Exception: Provider-specific errors during generation
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors raised by httpx/anyio
        when the client is closed during interpreter shutdown.
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
