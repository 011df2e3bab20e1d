"""Pytest configuration and shared fixtures."""
import asyncio
import os
from typing import Any

import pytest

from studymate.generation import GenerationClient
from studymate.llm import ChatMessage, ChatSession, LLMProvider, LLMResponse
from studymate.transcript import Message, TranscriptStore, create_key_value_store


class FakeChatSession(ChatSession):
    """Chat session that answers from the owning provider's script."""

    def __init__(self, provider: "FakeProvider", history: list[ChatMessage]):
        self._provider = provider
        self.seed = list(history)
        self.sent: list[str] = []

    async def send_message(self, text: str) -> LLMResponse:
        self.sent.append(text)
        return await self._provider._next("reply", text)

    @property
    def history_length(self) -> int:
        return len(self.seed) + 2 * len(self.sent)


class FakeProvider(LLMProvider):
    """Scripted LLMProvider.

    Each script is a list of str (returned as content) or Exception (raised).
    An exhausted script returns an empty string.
    """

    def __init__(
        self,
        replies: list[Any] | None = None,
        completions: list[Any] | None = None,
    ):
        self.replies = list(replies or [])
        self.completions = list(completions or [])
        self.sessions: list[FakeChatSession] = []
        self.completion_calls: list[dict[str, Any]] = []
        self.start_chat_kwargs: list[dict[str, Any]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def _next(self, kind: str, prompt: str) -> LLMResponse:
        gate = self.gates.get(kind)
        if gate is not None:
            await gate.wait()
        script = self.replies if kind == "reply" else self.completions
        item = script.pop(0) if script else ""
        if isinstance(item, BaseException):
            raise item
        return LLMResponse(
            content=item,
            model=self.model,
            usage={"prompt_tokens": len(prompt.split()), "completion_tokens": len(item.split())},
        )

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.completion_calls.append({
            "messages": list(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        })
        return await self._next("completion", messages[-1].content)

    def start_chat(
        self,
        history: list[ChatMessage],
        system_instruction: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> ChatSession:
        self.start_chat_kwargs.append({
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        })
        session = FakeChatSession(self, history)
        self.sessions.append(session)
        return session

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_llm():
    """Return an unscripted fake provider."""
    return FakeProvider()


@pytest.fixture
def client(fake_llm):
    """Return a GenerationClient over the fake provider."""
    return GenerationClient(fake_llm)


@pytest.fixture
def store():
    """Return an in-memory transcript store."""
    return TranscriptStore(create_key_value_store("memory"))


@pytest.fixture
def sample_transcript():
    """Return a short two-turn conversation."""
    return [
        Message(role="user", content="What is recursion?"),
        Message(role="assistant", content="Recursion is when a function calls itself."),
        Message(role="user", content="Show an example"),
        Message(role="assistant", content="def fact(n): return 1 if n == 0 else n * fact(n - 1)"),
    ]


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "gemini": os.getenv("GEMINI_API_KEY"),
    }
