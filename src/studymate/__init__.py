"""
Studymate: a learning assistant that turns a chat into a roadmap and study notes.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .assistant import LearningAssistant
from .errors import (
    ConfigurationError,
    GenerationError,
    ParseError,
    ProviderError,
    StudymateError,
)
from .generation import GenerationClient
from .roadmap import ConceptDetail, ResourceLink, RoadmapStep, parse_roadmap
from .transcript import Message, TranscriptStore, create_key_value_store

__all__ = [
    "ConceptDetail",
    "ConfigurationError",
    "GenerationClient",
    "GenerationError",
    "LearningAssistant",
    "Message",
    "ParseError",
    "ProviderError",
    "ResourceLink",
    "RoadmapStep",
    "StudymateError",
    "TranscriptStore",
    "create_key_value_store",
    "parse_roadmap",
]
