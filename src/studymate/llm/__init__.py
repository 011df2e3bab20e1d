from .base import ChatSession, LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, GenerationSettings, LLMResponse
from .providers import GeminiProvider

__all__ = [
    "ChatSession",
    "LLMProvider",
    "create_llm_provider",
    "ChatMessage",
    "GenerationSettings",
    "LLMResponse",
    "GeminiProvider",
]
