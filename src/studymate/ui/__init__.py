"""Terminal UI module for studymate.

Provides a Textual-based TUI for the learning assistant.

Module structure (Parnas principle - each module hides a design decision):
- models.py: Display structures (decorated transcript messages)
- widgets.py: Custom widgets (chat, roadmap tree, notes, status, log)
- styles.py: CSS styling (layout decisions)
- app.py: Application orchestration (user interaction flow)
"""

from .app import StudymateApp, run_textual_tui
from .config import LogLevel
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, NotesPanel, RoadmapTree, StatusPanel

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "LogLevel",
    "NotesPanel",
    "RoadmapTree",
    "StatusPanel",
    "StudymateApp",
    "run_textual_tui",
]
