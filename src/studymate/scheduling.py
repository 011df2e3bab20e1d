"""Latest-wins delayed task scheduling.

Hides how debounce and supersede are implemented on the event loop:
each schedule() cancels the previous task (whether still sleeping or already
awaiting the provider) and hands the new task a fresh token. Completion code
calls is_current(token) before committing anything, so a result that
survived cancellation can never overwrite newer state.
"""

import asyncio
from collections.abc import Awaitable, Callable


class LatestTaskScheduler:
    """Runs at most one live task, always the most recently scheduled."""

    def __init__(self) -> None:
        self._token = 0
        self._task: asyncio.Task | None = None

    @property
    def token(self) -> int:
        """Token of the most recent schedule() or cancel()."""
        return self._token

    @property
    def pending(self) -> bool:
        """True while the latest task has not finished."""
        return self._task is not None and not self._task.done()

    def is_current(self, token: int) -> bool:
        return token == self._token

    def schedule(
        self,
        factory: Callable[[int], Awaitable[None]],
        delay: float = 0.0,
    ) -> int:
        """Cancel any live task and start factory(token) after delay seconds.

        Must be called from within a running event loop.

        Returns:
            The token assigned to the new task
        """
        self.cancel()
        token = self._token

        async def _run() -> None:
            if delay > 0:
                await asyncio.sleep(delay)
            await factory(token)

        self._task = asyncio.create_task(_run())
        return token

    def cancel(self) -> None:
        """Cancel the live task and invalidate every outstanding token."""
        self._token += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait until no task is live, following reschedules made meanwhile.

        A cancelled task counts as finished. Exceptions raised by the task
        are left on the task object.
        """
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
