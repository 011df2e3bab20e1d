"""Chat orchestration: one conversation turn at a time.

Turn state machine: IDLE -> SUBMITTING -> IDLE. The user message is appended
optimistically; the reply (or a fixed apology on failure) is appended when
the provider call settles. Every transcript mutation is persisted and
broadcast to listeners; successful replies are published as context.
"""

import enum
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import CONCEPT_CONTEXT_TEMPLATE, CONCEPT_INPUT_TEMPLATE, FALLBACK_REPLY
from ..errors import GenerationError
from ..transcript import Message, TranscriptStore, last_assistant_content

if TYPE_CHECKING:
    from ..generation import GenerationClient

DebugCallback = Callable[[str, str, str], None]
TranscriptCallback = Callable[[list[Message]], None]
ContextCallback = Callable[[str], None]


class TurnState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class ChatOrchestrator:
    """Owns the transcript, the pending input and the published context."""

    def __init__(self, client: "GenerationClient", store: TranscriptStore):
        self._client = client
        self._store = store
        self._transcript: list[Message] = []
        self._input = ""
        self._context = ""
        self._state = TurnState.IDLE
        # Bumped by reset(); a reply that started in an older epoch is dropped
        self._epoch = 0
        self._transcript_listeners: list[TranscriptCallback] = []
        self._context_listeners: list[ContextCallback] = []
        self._debug_callback: DebugCallback | None = None

    @property
    def transcript(self) -> list[Message]:
        return list(self._transcript)

    @property
    def input_text(self) -> str:
        return self._input

    @property
    def context(self) -> str:
        return self._context

    @property
    def state(self) -> TurnState:
        return self._state

    def set_input(self, text: str) -> None:
        self._input = text

    def on_transcript_change(self, callback: TranscriptCallback) -> None:
        self._transcript_listeners.append(callback)

    def on_context_change(self, callback: ContextCallback) -> None:
        self._context_listeners.append(callback)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Chat", message)

    async def load(self) -> list[Message]:
        """Restore the persisted transcript; the last reply becomes context."""
        self._transcript = await self._store.load()
        self._debug("info", f"Restored {len(self._transcript)} message(s)")
        self._notify_transcript()
        last_reply = last_assistant_content(self._transcript)
        if last_reply is not None:
            self._publish_context(last_reply)
        return self.transcript

    async def submit(self, text: str | None = None) -> bool:
        """Send the input (or the given text) as the next user turn.

        Returns:
            False if the submission was rejected (blank input or a turn
            already in progress), True once the turn has completed
        """
        raw = self._input if text is None else text
        user_text = raw.strip()
        if not user_text or self._state is TurnState.SUBMITTING:
            return False

        epoch = self._epoch
        history = list(self._transcript)
        self._input = ""
        self._state = TurnState.SUBMITTING

        reply: str | None = None
        try:
            await self._append(Message(role="user", content=user_text))
            if epoch != self._epoch:
                return True
            reply = await self._client.reply(user_text, history)
        except GenerationError as e:
            self._debug("error", f"Reply failed: {e}")
        finally:
            if epoch == self._epoch:
                self._state = TurnState.IDLE

        if epoch != self._epoch:
            self._debug("debug", "Dropping reply that finished after a reset")
            return True

        if reply is None:
            await self._append(Message(role="assistant", content=FALLBACK_REPLY))
        else:
            await self._append(Message(role="assistant", content=reply))
            self._publish_context(reply)
        return True

    def select_concept(self, concept: str) -> str:
        """Prepare a drill-down question about a roadmap concept.

        Fills the input (nothing is appended until the user submits it) and
        publishes a context that relates the concept to the current one.

        Returns:
            The synthesized input text
        """
        previous = self._context
        self._input = CONCEPT_INPUT_TEMPLATE.format(concept=concept)
        self._publish_context(
            CONCEPT_CONTEXT_TEMPLATE.format(context=previous, concept=concept)
        )
        return self._input

    async def reset(self) -> None:
        """Clear transcript, input, context and provider session.

        All in-memory state is cleared before the first await, so no
        partially reset state is observable.
        """
        self._epoch += 1
        self._transcript = []
        self._input = ""
        self._state = TurnState.IDLE
        self._client.reset_session()
        self._notify_transcript()
        self._publish_context("")
        await self._store.clear()
        self._debug("info", "Conversation reset")

    async def _append(self, message: Message) -> None:
        self._transcript.append(message)
        self._notify_transcript()
        await self._store.save(self._transcript)

    def _notify_transcript(self) -> None:
        snapshot = self.transcript
        for listener in self._transcript_listeners:
            listener(snapshot)

    def _publish_context(self, context: str) -> None:
        self._context = context
        for listener in self._context_listeners:
            listener(context)
