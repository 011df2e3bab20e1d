"""Main Textual TUI application.

Presents the assistant's three views (chat, roadmap, notes) and feeds user
input and concept selections back into the core.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header

from ..assistant import LearningAssistant
from ..chat import TurnState
from ..notes import NotesCompiler
from ..roadmap.tracker import RoadmapTracker
from ..transcript import Message
from .config import LogLevel
from .styles import APP_CSS
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    NotesPanel,
    RoadmapTree,
    StatusPanel,
)


class StudymateApp(App):
    """Textual TUI for the learning assistant."""

    CSS = APP_CSS
    TITLE = "Studymate"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "reset", "Reset"),
        Binding("ctrl+r", "refresh_roadmap", "Roadmap"),
        Binding("ctrl+n", "refresh_notes", "Notes"),
        Binding("ctrl+y", "copy_last_response", "Copy Response"),
        Binding("ctrl+b", "toggle_maximize_chat", "Max Chat"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(self, assistant: LearningAssistant, log_level: str | None = None) -> None:
        super().__init__()
        self._assistant = assistant
        self._log_level = log_level
        self._model_name = getattr(assistant.client.llm, "model", "unknown")

    @property
    def assistant(self) -> LearningAssistant:
        return self._assistant

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        yield ChatHistoryWidget(id="chat-history")

        with Vertical(id="right-panel"):
            yield RoadmapTree(id="roadmap")
            yield NotesPanel(id="notes")
            yield DebugPanel(id="debug-panel")

        with Vertical(id="bottom-bar"):
            yield StatusPanel(id="status")
            yield ChatInputBar(id="chat-input-bar")

        yield Footer()

    async def on_mount(self) -> None:
        self.theme = "catppuccin-mocha"
        self.sub_title = f"{self._model_name} | {self._assistant.store.backend.backend_type}"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.log_message("TUI", f"Log panel enabled with level: {self._log_level.upper()}", LogLevel.INFO)

        assistant = self._assistant
        assistant.set_debug_callback(self._route_debug)
        assistant.chat.on_transcript_change(self._on_transcript)
        assistant.roadmap.on_change(self._on_roadmap)
        assistant.notes.on_change(self._on_notes)

        self.query_one("#roadmap", RoadmapTree).show_steps([])
        restored = await assistant.start()
        if not restored:
            self.notify("Ask a question to get started", timeout=4)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_unmount(self) -> None:
        await self._assistant.close()

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route component debug messages to the log panel."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        log_panel.log_message(component, message, LogLevel.from_string(level))

    def _on_transcript(self, messages: list[Message]) -> None:
        self.query_one("#chat-history", ChatHistoryWidget).sync(messages)
        self._update_status()

    def _on_roadmap(self, tracker: RoadmapTracker) -> None:
        self.query_one("#roadmap", RoadmapTree).show_steps(tracker.steps, loading=tracker.loading)

    def _on_notes(self, compiler: NotesCompiler) -> None:
        self.query_one("#notes", NotesPanel).show_state(compiler.state, compiler.notes, compiler.error)
        self._update_status()

    def _update_status(self) -> None:
        self.query_one("#status", StatusPanel).update_status(
            self._assistant.chat.state.value,
            self._assistant.client.usage,
        )

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self._assistant.chat.state is TurnState.SUBMITTING:
            self.notify("Still waiting for the previous reply", severity="warning", timeout=2)
            return
        self._run_turn(event.value)

    def on_roadmap_tree_concept_selected(self, event: RoadmapTree.ConceptSelected) -> None:
        """Prepare a drill-down question for the selected concept."""
        text = self._assistant.select_concept(event.concept)
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.set_text(text)
        input_bar.focus_input()

    @work(exclusive=True, group="chat")
    async def _run_turn(self, user_input: str) -> None:
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.set_waiting(True)
        try:
            await self._assistant.submit(user_input)
        except asyncio.CancelledError:
            self.notify("Cancelled", severity="warning", timeout=2)
            raise
        finally:
            chat.set_waiting(False)
            self._update_status()

    async def action_reset(self) -> None:
        """Clear the conversation and every derived view."""
        await self._assistant.reset()
        self.query_one("#chat-input-bar", ChatInputBar).set_text("")
        self.notify("Conversation cleared", timeout=2)

    def action_refresh_roadmap(self) -> None:
        if not self._assistant.refresh_roadmap():
            self.notify("No topic yet for a roadmap", severity="warning", timeout=2)

    def action_refresh_notes(self) -> None:
        if not self._assistant.refresh_notes():
            self.notify("No conversation to take notes on", severity="warning", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_maximize_chat(self) -> None:
        """Toggle maximize for chat panel."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        right_panel = self.query_one("#right-panel", Vertical)
        if chat.has_class("-maximized"):
            chat.remove_class("-maximized")
            right_panel.display = True
        else:
            chat.add_class("-maximized")
            right_panel.display = False

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(assistant: LearningAssistant, log_level: str | None = None) -> None:
    """Run the Textual TUI.

    Args:
        assistant: Fully wired assistant (store not yet connected)
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = StudymateApp(assistant, log_level=log_level)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
