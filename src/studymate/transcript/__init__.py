"""Transcript module for studymate.

Provides the message model and its key-value persistence.
"""

from .base import KeyValueStore
from .factory import create_key_value_store
from .models import Message, Role, last_assistant_content
from .store import TranscriptStore

__all__ = [
    "KeyValueStore",
    "Message",
    "Role",
    "TranscriptStore",
    "create_key_value_store",
    "last_assistant_content",
]
