"""Explicit lifecycle for the provider-side chat session.

The handle is the only owner of the session object. A session is created
lazily from the transcript, reused while calls succeed, and dropped on the
first failure so the next call starts from a clean replay of the history.
"""

from typing import Any

from ..llm import ChatMessage, ChatSession, GenerationSettings, LLMProvider
from ..transcript import Message


class ChatSessionHandle:
    """Create/reuse/invalidate wrapper around LLMProvider.start_chat()."""

    def __init__(
        self,
        llm: LLMProvider,
        settings: GenerationSettings,
        system_instruction: str | None = None,
        **provider_kwargs: Any
    ):
        self._llm = llm
        self._settings = settings
        self._system_instruction = system_instruction
        self._provider_kwargs = provider_kwargs
        self._session: ChatSession | None = None

    @property
    def active(self) -> bool:
        return self._session is not None

    def get_or_create(self, history: list[Message]) -> ChatSession:
        """Return the live session, opening one seeded with history if needed."""
        if self._session is None:
            seed = [ChatMessage(role=msg.role, content=msg.content) for msg in history]
            self._session = self._llm.start_chat(
                seed,
                system_instruction=self._system_instruction,
                **self._settings.as_kwargs(),
                **self._provider_kwargs,
            )
        return self._session

    def invalidate(self, session: ChatSession | None = None) -> None:
        """Forget the current session; the next call opens a fresh one.

        When a session is given, the handle is only cleared if it still holds
        that session, so a late failure cannot drop a newer one.
        """
        if session is None or session is self._session:
            self._session = None
