"""Unit tests for the generation client."""
import asyncio

import pytest
from hypothesis import given
from hypothesis import strategies as st
from conftest import FakeProvider

from studymate.config import NOTES_WINDOW
from studymate.errors import GenerationError, ProviderError
from studymate.generation import (
    GenerationClient,
    UsageSummary,
    group_by_role,
    strip_links,
    summarize_history,
)
from studymate.llm import LLMResponse
from studymate.transcript import Message

ROADMAP_OUTPUT = '```json\n[{"title":"Intro","descriptions":[{"concept":"X","description":"Y","link":""}]}]\n```'


class TestSanitize:
    """Tests for link stripping and role grouping."""

    def test_strip_links(self):
        """Test that links keep their label and bare URLs disappear."""
        assert strip_links("See [docs](http://x.com/y) or http://z.com") == "See docs or "

    @given(st.text(alphabet=st.characters(blacklist_characters="[]()"), max_size=100))
    def test_text_without_links_unchanged(self, text: str):
        """Property test: text with no link syntax and no URL is untouched."""
        if "http://" in text or "https://" in text:
            return
        assert strip_links(text) == text

    def test_group_by_role(self, sample_transcript):
        """Test splitting questions from explanations in order."""
        questions, explanations = group_by_role(sample_transcript)

        assert questions == ["What is recursion?", "Show an example"]
        assert len(explanations) == 2
        assert explanations[0].startswith("Recursion")

    def test_summarize_history(self):
        """Test the role-prefixed transcript serialization."""
        history = [Message(role="user", content="hi"), Message(role="assistant", content="hello")]
        assert summarize_history(history) == "user: hi\nassistant: hello"


class TestReply:
    """Tests for GenerationClient.reply()."""

    @pytest.mark.asyncio
    async def test_reply_returns_content(self):
        """Test a successful reply through a new session."""
        llm = FakeProvider(replies=["Recursion is self-reference."])
        client = GenerationClient(llm)

        result = await client.reply("What is recursion?", [])

        assert result == "Recursion is self-reference."
        assert len(llm.sessions) == 1
        prompt = llm.sessions[0].sent[0]
        assert "What is recursion?" in prompt

    @pytest.mark.asyncio
    async def test_reply_prompt_includes_history(self, sample_transcript):
        """Test that the serialized transcript is part of the prompt."""
        llm = FakeProvider(replies=["ok"])
        client = GenerationClient(llm)

        await client.reply("And iteration?", sample_transcript)

        prompt = llm.sessions[0].sent[0]
        assert "user: What is recursion?" in prompt
        assert "And iteration?" in prompt
        assert len(llm.sessions[0].seed) == len(sample_transcript)

    @pytest.mark.asyncio
    async def test_session_is_reused(self):
        """Test that consecutive replies share one provider session."""
        llm = FakeProvider(replies=["one", "two"])
        client = GenerationClient(llm)

        await client.reply("first", [])
        await client.reply("second", [Message(role="user", content="first")])

        assert len(llm.sessions) == 1
        assert "second" in llm.sessions[0].sent[1]

    @pytest.mark.asyncio
    async def test_reply_uses_reply_settings(self):
        """Test that sessions are opened with the reply token limit."""
        llm = FakeProvider(replies=["ok"])
        client = GenerationClient(llm)

        await client.reply("hi", [])

        kwargs = llm.start_chat_kwargs[0]
        assert kwargs["max_tokens"] == 1000
        assert kwargs["temperature"] == 0.7
        assert kwargs["top_p"] == 0.8
        assert kwargs["top_k"] == 40

    @pytest.mark.asyncio
    async def test_failure_invalidates_session(self):
        """Test that a failed call drops the session and raises ProviderError."""
        llm = FakeProvider(replies=[ConnectionError("connection reset"), "recovered"])
        client = GenerationClient(llm)

        with pytest.raises(ProviderError) as exc_info:
            await client.reply("hi", [])

        assert exc_info.value.is_retryable()
        assert not client.session.active

        assert await client.reply("hi again", []) == "recovered"
        assert len(llm.sessions) == 2

    @pytest.mark.asyncio
    async def test_late_failure_keeps_newer_session(self):
        """Test that a failure from a replaced session does not drop its successor."""
        llm = FakeProvider(replies=[RuntimeError("connection reset"), "ok", "ok2"])
        gate = asyncio.Event()
        llm.gates["reply"] = gate
        client = GenerationClient(llm)

        stale = asyncio.create_task(client.reply("one", []))
        await asyncio.sleep(0.01)
        assert len(llm.sessions) == 1

        client.reset_session()
        fresh = asyncio.create_task(client.reply("two", []))
        await asyncio.sleep(0.01)
        assert len(llm.sessions) == 2

        gate.set()
        results = await asyncio.gather(stale, fresh, return_exceptions=True)

        assert isinstance(results[0], ProviderError)
        assert results[1] == "ok"
        assert client.session.active

        assert await client.reply("three", []) == "ok2"
        assert len(llm.sessions) == 2
        assert len(llm.sessions[1].sent) == 2

    @pytest.mark.asyncio
    async def test_debug_output_reports_retryability_and_turns(self):
        """Test that reply logging names the error class and session length."""
        llm = FakeProvider(replies=[ConnectionError("connection reset"), "fine"])
        client = GenerationClient(llm)
        events = []
        client.set_debug_callback(lambda level, component, message: events.append((level, message)))

        with pytest.raises(ProviderError):
            await client.reply("hi", [])
        await client.reply("hi again", [])

        errors = [message for level, message in events if level == "error"]
        infos = [message for level, message in events if level == "info"]
        assert "(retryable)" in errors[0]
        assert any("new session, 2 turns" in message for message in infos)

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self):
        """Test that an empty reply is a GenerationError and drops the session."""
        llm = FakeProvider(replies=["   "])
        client = GenerationClient(llm)

        with pytest.raises(GenerationError):
            await client.reply("hi", [])

        assert not client.session.active

    @pytest.mark.asyncio
    async def test_reset_session(self):
        """Test that reset_session() forces a new session."""
        llm = FakeProvider(replies=["a", "b"])
        client = GenerationClient(llm)

        await client.reply("one", [])
        client.reset_session()
        await client.reply("two", [])

        assert len(llm.sessions) == 2


class TestRoadmap:
    """Tests for GenerationClient.roadmap()."""

    @pytest.mark.asyncio
    async def test_roadmap_parses_output(self):
        """Test that fenced model output becomes roadmap steps."""
        llm = FakeProvider(completions=[ROADMAP_OUTPUT])
        client = GenerationClient(llm)

        steps = await client.roadmap("Recursion is self-reference.")

        assert [step.title for step in steps] == ["Intro"]
        prompt = llm.completion_calls[0]["messages"][0].content
        assert "Recursion is self-reference." in prompt

    @pytest.mark.asyncio
    async def test_roadmap_uses_structured_settings(self):
        """Test that roadmap requests use the larger token limit."""
        llm = FakeProvider(completions=[ROADMAP_OUTPUT])
        client = GenerationClient(llm)

        await client.roadmap("topic")

        assert llm.completion_calls[0]["max_tokens"] == 2048
        assert not llm.sessions

    @pytest.mark.asyncio
    async def test_roadmap_failure_returns_empty(self):
        """Test that provider failures never escape roadmap()."""
        llm = FakeProvider(completions=[RuntimeError("boom")])
        client = GenerationClient(llm)

        assert await client.roadmap("topic") == []

    @pytest.mark.asyncio
    async def test_roadmap_garbage_returns_empty(self):
        """Test that unparseable output gives an empty roadmap."""
        llm = FakeProvider(completions=["I cannot help with that."])
        client = GenerationClient(llm)

        assert await client.roadmap("topic") == []


class TestNotes:
    """Tests for GenerationClient.notes()."""

    @pytest.mark.asyncio
    async def test_notes_sanitizes_links(self):
        """Test that links are stripped before the prompt is built."""
        llm = FakeProvider(completions=["# Notes"])
        client = GenerationClient(llm)

        await client.notes([
            Message(role="user", content="See [docs](http://x.com/y) or http://z.com"),
            Message(role="assistant", content="Explained"),
        ])

        prompt = llm.completion_calls[0]["messages"][0].content
        assert "See docs or " in prompt
        assert "http://" not in prompt

    @pytest.mark.asyncio
    async def test_notes_window(self):
        """Test that only the most recent messages are sent."""
        history = [
            Message(role="user" if i % 2 == 0 else "assistant", content=f"message-{i:02d}")
            for i in range(NOTES_WINDOW + 4)
        ]
        llm = FakeProvider(completions=["# Notes"])
        client = GenerationClient(llm)

        await client.notes(history)

        prompt = llm.completion_calls[0]["messages"][0].content
        for i in range(4):
            assert f"message-{i:02d}" not in prompt
        for i in range(4, NOTES_WINDOW + 4):
            assert f"message-{i:02d}" in prompt

    @pytest.mark.asyncio
    async def test_notes_failure_raises_provider_error(self):
        """Test that notes failures are surfaced."""
        llm = FakeProvider(completions=[RuntimeError("429 Too Many Requests")])
        client = GenerationClient(llm)

        with pytest.raises(ProviderError, match="Rate limit"):
            await client.notes([Message(role="user", content="hi")])

    @pytest.mark.asyncio
    async def test_empty_notes_raise(self):
        """Test that empty notes output is a GenerationError."""
        llm = FakeProvider(completions=[""])
        client = GenerationClient(llm)

        with pytest.raises(GenerationError):
            await client.notes([Message(role="user", content="hi")])


class TestUsageSummary:
    """Tests for usage accounting."""

    def test_add_response(self):
        """Test accumulating tokens and per-operation counts."""
        usage = UsageSummary()
        usage.add_response("reply", LLMResponse(
            content="x", model="m", usage={"prompt_tokens": 10, "completion_tokens": 4}
        ))
        usage.add_response("notes", LLMResponse(content="y", model="m"))

        assert usage.total_calls == 2
        assert usage.total_input_tokens == 10
        assert usage.total_output_tokens == 4
        assert usage.operation_breakdown == {"reply": 1, "notes": 1}

    @pytest.mark.asyncio
    async def test_client_records_usage(self):
        """Test that every returned response is counted."""
        llm = FakeProvider(replies=["hello"], completions=["# Notes"])
        client = GenerationClient(llm)

        await client.reply("hi", [])
        await client.notes([Message(role="user", content="hi")])

        assert client.usage.operation_breakdown == {"reply": 1, "notes": 1}
