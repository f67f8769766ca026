"""Translation provider contract.

Hides whether translations come from the HTTP service or from an
in-process translator. Callers see one of two outcomes:
- a response, possibly degraded (``error == "AI_UNAVAILABLE"``), which is
  a success and must not be retried;
- a ``TranslationProviderError``, meaning nothing usable came back.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..messages.models import Role
from .models import BatchInput, SummarizeResponse, TranslateBatchResponse, TranslateResponse


class TranslationProviderError(Exception):
    """Base class for translation provider failures."""


class ProviderUnavailableError(TranslationProviderError):
    """Transport failure: network error, timeout or unusable error status."""


class MalformedResponseError(TranslationProviderError):
    """The response could not be parsed or had the wrong shape."""


class SummarizationError(TranslationProviderError):
    """The model could not produce a summary."""


class TranslationProvider(ABC):
    """Request/response translation and summarization oracle."""

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_language: str,
        role: Role | None = None,
    ) -> TranslateResponse:
        """Translate a single text."""

    @abstractmethod
    async def translate_batch(
        self,
        inputs: list[BatchInput],
        target_language: str,
    ) -> TranslateBatchResponse:
        """Translate many texts in one request."""

    @abstractmethod
    async def summarize(self, conversation: str) -> SummarizeResponse:
        """Summarize a ``role: text`` transcript."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""

    async def __aenter__(self) -> "TranslationProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
