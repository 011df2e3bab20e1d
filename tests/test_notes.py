"""Unit tests for debounced notes compilation."""
import asyncio

import pytest
from conftest import FakeProvider

from studymate.config import NOTES_FAILED_MESSAGE
from studymate.generation import GenerationClient
from studymate.notes import NotesCompiler, NotesState
from studymate.transcript import Message

QUIET = 0.02


def _transcript(n: int) -> list[Message]:
    return [
        Message(role="user" if i % 2 == 0 else "assistant", content=f"message {i}")
        for i in range(n)
    ]


def _compiler(llm: FakeProvider, quiet_period: float = QUIET) -> NotesCompiler:
    return NotesCompiler(GenerationClient(llm), quiet_period=quiet_period)


class TestNotesCompiler:
    """Tests for NotesCompiler."""

    def test_initial_state(self):
        """Test that a new compiler has no notes."""
        compiler = _compiler(FakeProvider())

        assert compiler.state is NotesState.EMPTY
        assert compiler.notes == ""
        assert compiler.last_processed_length == 0

    @pytest.mark.asyncio
    async def test_compiles_after_quiet_period(self):
        """Test that notes are generated once the transcript settles."""
        llm = FakeProvider(completions=["# Recursion"])
        compiler = _compiler(llm)

        assert compiler.notify(_transcript(2))
        assert compiler.state is NotesState.EMPTY
        await compiler.flush()

        assert compiler.state is NotesState.READY
        assert compiler.notes == "# Recursion"
        assert compiler.last_processed_length == 2

    @pytest.mark.asyncio
    async def test_debounce_coalesces_changes(self):
        """Test that rapid changes produce a single request."""
        llm = FakeProvider(completions=["# Notes"])
        compiler = _compiler(llm, quiet_period=0.05)

        compiler.notify(_transcript(1))
        compiler.notify(_transcript(2))
        compiler.notify(_transcript(3))
        await compiler.flush()

        assert len(llm.completion_calls) == 1
        assert compiler.last_processed_length == 3

    @pytest.mark.asyncio
    async def test_same_length_is_not_recompiled(self):
        """Test that an unchanged transcript length schedules nothing."""
        llm = FakeProvider(completions=["# Notes", "# Again"])
        compiler = _compiler(llm)

        compiler.notify(_transcript(2))
        await compiler.flush()

        assert not compiler.notify(_transcript(2))
        await compiler.flush()

        assert len(llm.completion_calls) == 1
        assert compiler.notes == "# Notes"

    @pytest.mark.asyncio
    async def test_empty_transcript_is_ignored(self):
        """Test that an empty transcript never triggers a request."""
        llm = FakeProvider()
        compiler = _compiler(llm)

        assert not compiler.notify([])
        await compiler.flush()

        assert llm.completion_calls == []

    @pytest.mark.asyncio
    async def test_in_flight_result_discarded_when_superseded(self):
        """Test that a newer transcript wins over a slow older request."""
        llm = FakeProvider(completions=["# Latest"])
        gate = asyncio.Event()
        llm.gates["completion"] = gate
        compiler = _compiler(llm, quiet_period=0)

        compiler.notify(_transcript(2))
        await asyncio.sleep(0.01)
        assert compiler.state is NotesState.GENERATING

        compiler.notify(_transcript(4))
        gate.set()
        await compiler.flush()

        assert len(llm.completion_calls) == 2
        assert "message 3" in llm.completion_calls[1]["messages"][0].content
        assert compiler.notes == "# Latest"
        assert compiler.last_processed_length == 4
        assert compiler.state is NotesState.READY

    @pytest.mark.asyncio
    async def test_failure_sets_failed_state(self):
        """Test that a provider failure shows the fixed message."""
        llm = FakeProvider(completions=[RuntimeError("boom")])
        compiler = _compiler(llm)
        states = []
        compiler.on_change(lambda c: states.append(c.state))

        compiler.notify(_transcript(2))
        await compiler.flush()

        assert compiler.state is NotesState.FAILED
        assert compiler.error == NOTES_FAILED_MESSAGE
        assert compiler.last_processed_length == 0
        assert states == [NotesState.GENERATING, NotesState.FAILED]

    @pytest.mark.asyncio
    async def test_failure_is_retried_on_next_change(self):
        """Test that a failed length is compiled again later."""
        llm = FakeProvider(completions=[RuntimeError("boom"), "# Notes"])
        compiler = _compiler(llm)

        compiler.notify(_transcript(2))
        await compiler.flush()
        assert compiler.notify(_transcript(2))
        await compiler.flush()

        assert compiler.state is NotesState.READY
        assert compiler.error is None

    @pytest.mark.asyncio
    async def test_refresh_skips_quiet_period(self):
        """Test that refresh() regenerates immediately."""
        llm = FakeProvider(completions=["# One", "# Two"])
        compiler = _compiler(llm, quiet_period=10)

        compiler.notify(_transcript(2))
        assert compiler.refresh()
        await compiler.flush()

        assert compiler.notes == "# One"
        assert len(llm.completion_calls) == 1

    def test_refresh_without_transcript(self):
        """Test that refresh() with nothing to summarize is rejected."""
        compiler = _compiler(FakeProvider())
        assert not compiler.refresh()

    @pytest.mark.asyncio
    async def test_reset_cancels_pending_work(self):
        """Test that reset() drops notes and stops scheduled compilation."""
        llm = FakeProvider(completions=["# First", "# Late"])
        compiler = _compiler(llm)

        compiler.notify(_transcript(2))
        await compiler.flush()
        compiler.notify(_transcript(4))
        compiler.reset()
        await asyncio.sleep(QUIET * 3)

        assert compiler.state is NotesState.EMPTY
        assert compiler.notes == ""
        assert compiler.last_processed_length == 0
        assert len(llm.completion_calls) == 1
