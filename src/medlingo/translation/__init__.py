"""Translation provider module for medlingo.

Provides the translate / translate-batch / summarize contract, the HTTP
client that consumes the service, and the LLM-backed translator behind it.
"""

from .base import (
    MalformedResponseError,
    ProviderUnavailableError,
    SummarizationError,
    TranslationProvider,
    TranslationProviderError,
)
from .client import HttpTranslationClient
from .models import (
    BatchInput,
    BatchTranslation,
    SummarizeRequest,
    SummarizeResponse,
    TranslateBatchRequest,
    TranslateBatchResponse,
    TranslateRequest,
    TranslateResponse,
)
from .translator import Translator, parse_batch_answer

__all__ = [
    "BatchInput",
    "BatchTranslation",
    "HttpTranslationClient",
    "MalformedResponseError",
    "ProviderUnavailableError",
    "SummarizationError",
    "SummarizeRequest",
    "SummarizeResponse",
    "TranslateBatchRequest",
    "TranslateBatchResponse",
    "TranslateRequest",
    "TranslateResponse",
    "TranslationProvider",
    "TranslationProviderError",
    "Translator",
    "parse_batch_answer",
]
