"""HTTP client for the translation service.

Hidden design decisions:
- httpx client setup and timeouts
- Mapping of transport and parsing failures onto the provider error types
- Validation that a batch answer covers every requested id
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from ..messages.models import Role
from .base import MalformedResponseError, ProviderUnavailableError, TranslationProvider
from .models import (
    BatchInput,
    SummarizeRequest,
    SummarizeResponse,
    TranslateBatchRequest,
    TranslateBatchResponse,
    TranslateRequest,
    TranslateResponse,
)

logger = logging.getLogger(__name__)


class HttpTranslationClient(TranslationProvider):
    """Translation provider that talks to the medlingo HTTP service."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Service base URL
            timeout: Per-request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"POST {path} failed: {e!r}") from e

    @staticmethod
    def _parse(response: httpx.Response, model: type[BaseModel]) -> Any:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(
                f"Unexpected {model.__name__} body from {response.request.url}: {e}"
            ) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_error:
            raise ProviderUnavailableError(
                f"{response.request.method} {response.request.url} returned {response.status_code}"
            )

    async def translate(
        self,
        text: str,
        target_language: str,
        role: Role | None = None,
    ) -> TranslateResponse:
        request = TranslateRequest(text=text, target_language=target_language, role=role)
        response = await self._post("/api/translate", request.to_wire())
        self._raise_for_status(response)
        result = self._parse(response, TranslateResponse)
        if result.degraded:
            logger.info("Service returned degraded translation (%s)", result.error)
        return result

    async def translate_batch(
        self,
        inputs: list[BatchInput],
        target_language: str,
    ) -> TranslateBatchResponse:
        request = TranslateBatchRequest(inputs=inputs, target_language=target_language)
        response = await self._post("/api/translate-batch", request.to_wire())
        self._raise_for_status(response)
        result = self._parse(response, TranslateBatchResponse)

        # A partial answer is as useless as none: the caller must not cache half a batch
        missing = {item.id for item in inputs} - result.as_mapping().keys()
        if missing:
            raise MalformedResponseError(f"Batch response is missing ids: {sorted(missing)}")
        return result

    async def summarize(self, conversation: str) -> SummarizeResponse:
        request = SummarizeRequest(conversation=conversation)
        response = await self._post("/api/summarize", request.to_wire())
        if response.is_error:
            # The service still sends a fallback summary with its error status
            try:
                return SummarizeResponse.model_validate(response.json())
            except (ValueError, ValidationError):
                self._raise_for_status(response)
        return self._parse(response, SummarizeResponse)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
