from .gemini import GeminiProvider
from .openai import OpenAIProvider

__all__ = ["GeminiProvider", "OpenAIProvider"]
