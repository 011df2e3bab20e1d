"""Configuration constants.

Centralizes magic numbers and fixed strings used across the core.
Environment-driven settings are read in cli/providers.py.
"""

from .llm.models import GenerationSettings

# Provider defaults
DEFAULT_PROVIDER = "gemini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

# Generation parameters
REPLY_SETTINGS = GenerationSettings(max_output_tokens=1000)
STRUCTURED_SETTINGS = GenerationSettings(max_output_tokens=2048)

# Persistence
CHAT_HISTORY_KEY = "chat_history"
DEFAULT_STORE_BACKEND = "sqlite"
DEFAULT_DB_PATH = "./studymate.db"

# Notes compilation
NOTES_WINDOW = 10  # Most recent messages included in a notes request
NOTES_QUIET_PERIOD = 1.0  # Seconds without transcript changes before compiling
NOTES_FAILED_MESSAGE = "Failed to generate notes. Please try again later."

# Roadmap regeneration
ROADMAP_DEBOUNCE = 0.5  # Seconds without context changes before regenerating

# Chat
FALLBACK_REPLY = (
    "I'm sorry, I couldn't process your request right now. Please try again later."
)
CONCEPT_INPUT_TEMPLATE = "Tell me more about {concept} with examples."
CONCEPT_CONTEXT_TEMPLATE = (
    "Based on our discussion about {context}, explain {concept} in detail, "
    "showing its relevance to {context} and provide specific examples."
)
