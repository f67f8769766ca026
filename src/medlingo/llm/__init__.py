from .base import EmptyCompletionError, LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, LLMResponse
from .providers import GeminiProvider, OpenAIProvider

__all__ = [
    "EmptyCompletionError",
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "LLMResponse",
    "GeminiProvider",
    "OpenAIProvider",
]
