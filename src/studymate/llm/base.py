from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse


class ChatSession(ABC):
    """A provider-side stateful conversation.

    The provider keeps the turn history; callers only send the next message.
    A session that raised should be discarded rather than reused.
    """

    @abstractmethod
    async def send_message(self, text: str) -> LLMResponse:
        """Send one user turn and return the model's reply."""

    @property
    @abstractmethod
    def history_length(self) -> int:
        """Number of turns the provider currently holds for this session."""


class LLMProvider(ABC):
    """Text-generation backend used by the generation client.

    Two kinds of request are needed: one-shot completions for structured
    output (roadmap, notes) and stateful chat sessions for replies.
    Implementations own client setup, message conversion and retries.

    Usable as an async context manager; close() runs on exit.
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a single stateless completion.

        Args:
            messages: List of chat messages forming the request
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters (top_p, top_k, ...)

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            Exception: Provider-specific errors during generation
        """
        pass

    @abstractmethod
    def start_chat(
        self,
        history: list[ChatMessage],
        system_instruction: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> ChatSession:
        """Open a stateful chat seeded with previous turns.

        Args:
            history: Previous user/assistant turns to replay into the session
            system_instruction: Optional system instruction for the session
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate per turn
            **kwargs: Provider-specific parameters

        Returns:
            ChatSession bound to this provider
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the provider, tolerating an already-closed event loop."""
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
