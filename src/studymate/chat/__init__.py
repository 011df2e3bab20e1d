"""Chat module: turn orchestration over the transcript."""

from .orchestrator import ChatOrchestrator, TurnState

__all__ = ["ChatOrchestrator", "TurnState"]
