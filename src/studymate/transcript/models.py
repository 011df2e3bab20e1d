"""Data models for the conversation transcript.

These models define the structure of a transcript independent of the
key-value backend it is persisted in.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Role = Literal["user", "assistant"]


class Message(BaseModel):
    """One entry of the transcript. Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Who produced the message: 'user' or 'assistant'")
    content: str = Field(description="Message text (markdown for assistant replies)")


TranscriptAdapter = TypeAdapter(list[Message])


def last_assistant_content(messages: list[Message]) -> str | None:
    """Content of the final message when it is an assistant reply."""
    if messages and messages[-1].role == "assistant":
        return messages[-1].content
    return None
