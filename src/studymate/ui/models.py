"""Display models for the TUI.

Hides how transcript messages are decorated for rendering.
"""

from dataclasses import dataclass, field
from datetime import datetime

from ..transcript import Message


@dataclass
class DisplayedMessage:
    """A transcript message as shown in the chat panel."""

    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_message(cls, message: Message) -> "DisplayedMessage":
        return cls(role=message.role, content=message.content)
