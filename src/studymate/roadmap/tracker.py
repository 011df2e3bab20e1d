"""Context-keyed roadmap regeneration.

The roadmap is a disposable cache keyed on the published context string.
Context changes are debounced, and only the newest request may write its
result, so a slow response for an old context never replaces a newer roadmap.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import ROADMAP_DEBOUNCE
from ..scheduling import LatestTaskScheduler
from .models import RoadmapStep

if TYPE_CHECKING:
    from ..generation import GenerationClient

DebugCallback = Callable[[str, str, str], None]
ChangeCallback = Callable[["RoadmapTracker"], None]


class RoadmapTracker:
    """Keeps the roadmap in step with the latest context."""

    def __init__(self, client: "GenerationClient", debounce: float = ROADMAP_DEBOUNCE):
        self._client = client
        self._debounce = debounce
        self._scheduler = LatestTaskScheduler()
        self._steps: list[RoadmapStep] = []
        self._context = ""
        self._loading = False
        self._listeners: list[ChangeCallback] = []
        self._debug_callback: DebugCallback | None = None

    @property
    def steps(self) -> list[RoadmapStep]:
        return list(self._steps)

    @property
    def context(self) -> str:
        """Context the current (or pending) roadmap is keyed on."""
        return self._context

    @property
    def loading(self) -> bool:
        return self._loading

    def on_change(self, callback: ChangeCallback) -> None:
        self._listeners.append(callback)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Roadmap", message)

    def _emit(self) -> None:
        for listener in self._listeners:
            listener(self)

    def notify(self, context: str) -> bool:
        """React to a newly published context.

        Returns:
            True if a regeneration was scheduled
        """
        if not context or context == self._context:
            return False
        self._context = context
        self._scheduler.schedule(self._regenerate, self._debounce)
        self._debug("debug", f"Roadmap regeneration scheduled in {self._debounce:.1f}s")
        return True

    def refresh(self) -> bool:
        """Regenerate immediately for the current context."""
        if not self._context:
            return False
        self._scheduler.schedule(self._regenerate)
        return True

    def reset(self) -> None:
        self._scheduler.cancel()
        self._steps = []
        self._context = ""
        self._loading = False
        self._emit()

    async def flush(self) -> None:
        """Wait for any scheduled regeneration to finish."""
        await self._scheduler.wait()

    async def _regenerate(self, token: int) -> None:
        context = self._context
        self._loading = True
        self._emit()
        try:
            steps = await self._client.roadmap(context)
        finally:
            if self._scheduler.is_current(token):
                self._loading = False

        if not self._scheduler.is_current(token):
            self._debug("debug", "Discarding roadmap for superseded context")
            return

        self._steps = steps
        self._emit()
