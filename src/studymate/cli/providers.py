"""Provider factory functions for CLI.

Centralizes creation of the LLM provider, transcript store and assistant
from environment variables. Hides configuration details from command
implementations.
"""

import os

from ..assistant import LearningAssistant
from ..config import DEFAULT_DB_PATH, DEFAULT_GEMINI_MODEL, DEFAULT_PROVIDER, DEFAULT_STORE_BACKEND
from ..errors import ConfigurationError
from ..generation import GenerationClient
from ..llm import LLMProvider, create_llm_provider
from ..transcript import TranscriptStore, create_key_value_store


def get_llm() -> LLMProvider:
    """Create the LLM provider from environment variables.

    Returns:
        LLM provider instance

    Raises:
        ConfigurationError: If the provider is unknown or its API key is not set

    Environment variables:
        LLM_PROVIDER: Provider type (default: gemini)
        GEMINI_API_KEY: Gemini API key (required)
        GEMINI_MODEL: Gemini model (default: gemini-2.5-flash)
    """
    llm_provider = os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER).lower()

    if llm_provider in ("gemini", "google"):
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
        model = os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)
        return create_llm_provider("gemini", api_key=api_key, model=model)

    raise ConfigurationError(f"Unknown LLM provider: {llm_provider}")


def get_transcript_store(backend: str | None = None, path: str | None = None) -> TranscriptStore:
    """Create the transcript store from arguments or environment variables.

    Environment variables:
        STUDYMATE_STORE: Store backend, 'memory' or 'sqlite' (default: sqlite)
        STUDYMATE_DB: SQLite database path (default: ./studymate.db)
    """
    backend = backend or os.getenv("STUDYMATE_STORE", DEFAULT_STORE_BACKEND)
    config = {}
    if backend == "sqlite":
        config["path"] = path or os.getenv("STUDYMATE_DB", DEFAULT_DB_PATH)
    return TranscriptStore(create_key_value_store(backend, **config))


def get_assistant(
    backend: str | None = None,
    path: str | None = None,
) -> LearningAssistant:
    """Build a fully wired assistant.

    Raises:
        ConfigurationError: If the provider cannot be configured
    """
    client = GenerationClient(get_llm())
    return LearningAssistant(client, get_transcript_store(backend, path))
