"""Transcript persistence on top of a KeyValueStore.

The whole transcript lives under a single key and is rewritten after every
mutation. Loading never fails: an absent or unreadable value yields an
empty transcript. Saving never fails either: backend errors are logged.
"""

from collections.abc import Callable

from pydantic import ValidationError

from ..config import CHAT_HISTORY_KEY
from .base import KeyValueStore
from .models import Message, TranscriptAdapter

DebugCallback = Callable[[str, str, str], None]


class TranscriptStore:
    """Saves and loads the ordered message list."""

    def __init__(self, backend: KeyValueStore, key: str = CHAT_HISTORY_KEY):
        self._backend = backend
        self._key = key
        self._debug_callback: DebugCallback | None = None

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Store", message)

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    @property
    def key(self) -> str:
        return self._key

    async def connect(self) -> None:
        await self._backend.connect()

    async def disconnect(self) -> None:
        await self._backend.disconnect()

    async def load(self) -> list[Message]:
        """Read the stored transcript, or [] if missing or corrupt."""
        raw = await self._backend.get(self._key)
        if raw is None:
            return []
        try:
            messages = TranscriptAdapter.validate_json(raw)
        except ValidationError as e:
            self._debug("warning", f"Discarding unreadable transcript: {e.error_count()} error(s)")
            return []
        self._debug("debug", f"Loaded {len(messages)} message(s) from '{self._key}'")
        return messages

    async def save(self, messages: list[Message]) -> None:
        """Write the transcript; a failed write is reported, never raised.

        The in-memory transcript stays authoritative and the next mutation
        rewrites the whole list.
        """
        payload = TranscriptAdapter.dump_json(messages).decode("utf-8")
        try:
            await self._backend.put(self._key, payload)
        except Exception as e:
            self._debug("error", f"Failed to save {len(messages)} message(s): {e}")

    async def clear(self) -> None:
        await self._backend.delete(self._key)
        self._debug("debug", f"Cleared '{self._key}'")
