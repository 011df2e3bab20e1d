"""Debounced notes compilation.

Notes are regenerated only when the transcript length differs from the
length last compiled, and only after a quiet period without further changes.
Every run carries a scheduler token; a run that was superseded (by a newer
transcript, a manual refresh or a reset) never writes its result.
"""

import enum
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import NOTES_FAILED_MESSAGE, NOTES_QUIET_PERIOD
from ..errors import GenerationError
from ..scheduling import LatestTaskScheduler
from ..transcript import Message

if TYPE_CHECKING:
    from ..generation import GenerationClient

DebugCallback = Callable[[str, str, str], None]
ChangeCallback = Callable[["NotesCompiler"], None]


class NotesState(str, enum.Enum):
    """Lifecycle of the notes document."""

    EMPTY = "empty"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class NotesCompiler:
    """Owns the notes document and decides when to regenerate it."""

    def __init__(self, client: "GenerationClient", quiet_period: float = NOTES_QUIET_PERIOD):
        self._client = client
        self._quiet_period = quiet_period
        self._scheduler = LatestTaskScheduler()
        self._messages: list[Message] = []
        self._notes = ""
        self._error: str | None = None
        self._state = NotesState.EMPTY
        self._last_processed_length = 0
        self._listeners: list[ChangeCallback] = []
        self._debug_callback: DebugCallback | None = None

    @property
    def state(self) -> NotesState:
        return self._state

    @property
    def notes(self) -> str:
        return self._notes

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def last_processed_length(self) -> int:
        return self._last_processed_length

    @property
    def pending(self) -> bool:
        return self._scheduler.pending

    def on_change(self, callback: ChangeCallback) -> None:
        self._listeners.append(callback)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Notes", message)

    def _set_state(self, state: NotesState) -> None:
        self._state = state
        for listener in self._listeners:
            listener(self)

    def notify(self, messages: list[Message]) -> bool:
        """Record the latest transcript and schedule compilation if it changed.

        Returns:
            True if a compilation was (re)scheduled
        """
        self._messages = list(messages)
        if not self._messages or len(self._messages) == self._last_processed_length:
            return False
        self._scheduler.schedule(self._compile, self._quiet_period)
        self._debug("debug", f"Notes scheduled for {len(self._messages)} message(s)")
        return True

    def refresh(self) -> bool:
        """Compile now from the latest transcript, ignoring the quiet period."""
        if not self._messages:
            return False
        self._scheduler.schedule(self._compile)
        return True

    def reset(self) -> None:
        """Cancel pending work and drop the document."""
        self._scheduler.cancel()
        self._messages = []
        self._notes = ""
        self._error = None
        self._last_processed_length = 0
        self._set_state(NotesState.EMPTY)

    async def flush(self) -> None:
        """Wait for any scheduled or running compilation to finish."""
        await self._scheduler.wait()

    async def _compile(self, token: int) -> None:
        snapshot = list(self._messages)
        self._error = None
        self._set_state(NotesState.GENERATING)

        try:
            notes = await self._client.notes(snapshot)
        except GenerationError as e:
            if not self._scheduler.is_current(token):
                return
            self._debug("error", f"Notes generation failed: {e}")
            self._error = NOTES_FAILED_MESSAGE
            self._set_state(NotesState.FAILED)
            return

        if not self._scheduler.is_current(token):
            self._debug("debug", "Discarding notes for superseded transcript")
            return

        self._notes = notes
        self._last_processed_length = len(snapshot)
        self._set_state(NotesState.READY)
