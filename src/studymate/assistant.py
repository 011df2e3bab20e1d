"""Learning assistant facade.

Wires the transcript store, generation client, chat orchestrator, roadmap
tracker and notes compiler together:
- transcript changes feed the notes compiler
- published context feeds the roadmap tracker
- reset clears every component before yielding to the event loop
"""

from collections.abc import Callable

from .chat import ChatOrchestrator
from .config import NOTES_QUIET_PERIOD, ROADMAP_DEBOUNCE
from .generation import GenerationClient
from .notes import NotesCompiler
from .roadmap.tracker import RoadmapTracker
from .transcript import Message, TranscriptStore

DebugCallback = Callable[[str, str, str], None]


class LearningAssistant:
    """Single-session assistant composed of the core components."""

    def __init__(
        self,
        client: GenerationClient,
        store: TranscriptStore,
        quiet_period: float = NOTES_QUIET_PERIOD,
        roadmap_debounce: float = ROADMAP_DEBOUNCE,
    ):
        self._client = client
        self._store = store
        self.chat = ChatOrchestrator(client, store)
        self.notes = NotesCompiler(client, quiet_period=quiet_period)
        self.roadmap = RoadmapTracker(client, debounce=roadmap_debounce)

        self.chat.on_transcript_change(self.notes.notify)
        self.chat.on_context_change(self.roadmap.notify)

    @property
    def client(self) -> GenerationClient:
        return self._client

    @property
    def store(self) -> TranscriptStore:
        return self._store

    @property
    def transcript(self) -> list[Message]:
        return self.chat.transcript

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Route debug messages from every component to one callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
        """
        for component in (self._client, self._store, self.chat, self.notes, self.roadmap):
            component.set_debug_callback(callback)

    async def start(self) -> list[Message]:
        """Connect the store and restore the previous transcript."""
        await self._store.connect()
        return await self.chat.load()

    async def submit(self, text: str | None = None) -> bool:
        return await self.chat.submit(text)

    def select_concept(self, concept: str) -> str:
        return self.chat.select_concept(concept)

    def refresh_notes(self) -> bool:
        return self.notes.refresh()

    def refresh_roadmap(self) -> bool:
        return self.roadmap.refresh()

    async def reset(self) -> None:
        self.notes.reset()
        self.roadmap.reset()
        await self.chat.reset()

    async def flush(self) -> None:
        """Wait for scheduled notes and roadmap work to settle."""
        await self.roadmap.flush()
        await self.notes.flush()

    async def close(self) -> None:
        self.notes.reset()
        self.roadmap.reset()
        await self._store.disconnect()
        await self._client.llm.close()
