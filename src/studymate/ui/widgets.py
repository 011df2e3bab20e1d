"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat message rendering
- Roadmap tree construction and concept selection
- Notes state display
- Log rendering and level filtering
"""

from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message
from textual.widgets import Button, Markdown, RichLog, Static, TextArea, Tree

from ..generation import UsageSummary
from ..notes import NotesState
from ..roadmap import ConceptDetail, ResourceLink, RoadmapStep
from ..transcript import Message as TranscriptMessage
from .config import (
    COMPONENT_COLORS,
    INPUT_HISTORY_MAX_SIZE,
    LOG_MAX_MESSAGE_LENGTH,
    LOG_TIMESTAMP_FORMAT,
    ROADMAP_DESCRIPTION_PREVIEW,
    LogLevel,
)
from .models import DisplayedMessage


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(Message):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Submit message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if value:
            if not self._history or self._history[-1] != value:
                self._history.append(value)
                del self._history[:-INPUT_HISTORY_MAX_SIZE]
            self._history_index = -1
            text_area.text = ""
            self.post_message(self.Submitted(value))

    def set_text(self, value: str) -> None:
        """Replace the input text (used for concept drill-down)."""
        text_area = self.query_one("#chat-input", TextArea)
        text_area.text = value
        text_area.move_cursor(text_area.document.end)

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history mirroring the transcript."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._messages: list[DisplayedMessage] = []

    def sync(self, transcript: list[TranscriptMessage]) -> None:
        """Render whatever the transcript gained since the last sync.

        A shorter transcript (after a reset) re-renders from scratch.
        """
        if len(transcript) < len(self._messages):
            self.clear_history()
        for message in transcript[len(self._messages):]:
            displayed = DisplayedMessage.from_message(message)
            self._messages.append(displayed)
            self._render_message(displayed)

        if self._messages:
            self.border_subtitle = f"{len(self._messages)} messages"
        self.scroll_end(animate=False)

    def set_waiting(self, waiting: bool) -> None:
        self.set_class(waiting, "waiting")
        if waiting:
            self.border_subtitle = "Thinking..."
        elif self._messages:
            self.border_subtitle = f"{len(self._messages)} messages"

    def get_last_response(self) -> str | None:
        """Get the last assistant response."""
        for msg in reversed(self._messages):
            if msg.role == "assistant":
                return msg.content
        return None

    def clear_history(self) -> None:
        self._messages.clear()
        self.remove_children()
        self.border_subtitle = "Conversation history"

    def _render_message(self, msg: DisplayedMessage) -> None:
        if msg.role == "user":
            header_text = f"> You [{msg.timestamp.strftime('%H:%M:%S')}]"
            border_class = "user-message"
        else:
            header_text = f"< Assistant [{msg.timestamp.strftime('%H:%M:%S')}]"
            border_class = "assistant-message"

        container = Vertical(classes=f"chat-message {border_class}")
        container.compose_add_child(Static(header_text, classes="message-header", markup=False))
        if msg.role == "assistant":
            container.compose_add_child(Markdown(msg.content, classes="message-content"))
        else:
            container.compose_add_child(Static(msg.content, classes="message-content", markup=False))
        self.mount(container)


class RoadmapTree(Tree):
    """Roadmap steps as a tree; selecting a concept posts ConceptSelected."""

    BORDER_TITLE = "Roadmap"
    BORDER_SUBTITLE = "Waiting for a topic"

    class ConceptSelected(Message):
        """Posted when the user selects a concept leaf."""

        def __init__(self, concept: str) -> None:
            super().__init__()
            self.concept = concept

    def __init__(self, *args, **kwargs) -> None:
        super().__init__("Learning Roadmap", *args, **kwargs)
        self.show_root = False

    def show_steps(self, steps: list[RoadmapStep], loading: bool = False) -> None:
        """Rebuild the tree from scratch (roadmaps are replaced, never merged)."""
        self.clear()
        for index, step in enumerate(steps, 1):
            branch = self.root.add(
                Text(f"{index}. {step.title or 'Untitled step'}", style="bold"),
                expand=True,
            )
            if isinstance(step.descriptions, str):
                if step.descriptions:
                    branch.add_leaf(Text(step.descriptions))
                continue
            for item in step.descriptions:
                if isinstance(item, ConceptDetail):
                    self._add_concept(branch, item)
                elif isinstance(item, ResourceLink):
                    branch.add_leaf(Text(f"{item.resource} {item.link}".strip(), style="italic"))

        if loading:
            self.border_subtitle = "Generating..."
        elif steps:
            self.border_subtitle = f"{len(steps)} steps - select a concept to ask about it"
        else:
            self.border_subtitle = "No roadmap yet"

    def _add_concept(self, branch, item: ConceptDetail) -> None:
        label = Text(item.concept or "Concept", style="bold cyan")
        if item.description:
            preview = item.description
            if len(preview) > ROADMAP_DESCRIPTION_PREVIEW:
                preview = preview[:ROADMAP_DESCRIPTION_PREVIEW] + "..."
            label.append(f" - {preview}", style="")
        node = branch.add(label, data=item.concept or None)
        for caption, value in (
            ("Prerequisite", item.prerequisite),
            ("Time", item.estimated_time),
            ("Link", item.link),
        ):
            if value:
                node.add_leaf(Text(f"{caption}: {value}", style="dim"))

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if event.node.data:
            event.stop()
            self.post_message(self.ConceptSelected(event.node.data))


class NotesPanel(VerticalScroll):
    """Notes document with distinct empty, generating, ready and failed states."""

    BORDER_TITLE = "Notes"
    BORDER_SUBTITLE = "Study notes"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._notes = ""

    def compose(self):
        yield Static("No notes generated yet", id="notes-status", markup=False)
        yield Markdown("", id="notes-content")

    def show_state(self, state: NotesState, notes: str, error: str | None) -> None:
        status = self.query_one("#notes-status", Static)
        content = self.query_one("#notes-content", Markdown)
        self.remove_class("failed")

        if state is NotesState.GENERATING:
            status.update("Generating notes...")
            status.display = True
            self.border_subtitle = "Generating..."
        elif state is NotesState.FAILED:
            status.update(error or "Failed to generate notes.")
            status.display = True
            self.add_class("failed")
            self.border_subtitle = "Error"
        elif state is NotesState.READY and notes:
            status.display = False
            self.border_subtitle = "Click to copy"
        else:
            status.update("No notes generated yet")
            status.display = True
            self.border_subtitle = "Study notes"

        if notes != self._notes:
            self._notes = notes
            content.update(notes)
        content.display = bool(notes) and state is not NotesState.FAILED

    def on_click(self, event: Click) -> None:
        """Copy the notes to the clipboard when clicked."""
        event.stop()
        self.copy_notes()

    def copy_notes(self) -> bool:
        """Copy the notes, falling back to the terminal clipboard (OSC 52)."""
        if not self._notes.strip():
            self.app.notify("No notes to copy", timeout=2)
            return False
        try:
            import pyperclip
            pyperclip.copy(self._notes)
            self.app.notify("Notes copied", timeout=2)
        except Exception:
            self.app.copy_to_clipboard(self._notes)
            self.app.notify("Notes copied (terminal)", timeout=2)
        return True


class StatusPanel(Static):
    """One-line summary of turn state and token usage."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._turn = "idle"
        self._usage = UsageSummary()

    def on_mount(self) -> None:
        self._update_display()

    def update_status(self, turn: str, usage: UsageSummary) -> None:
        self._turn = turn
        self._usage = usage
        self._update_display()

    def _update_display(self) -> None:
        usage = self._usage
        turn_style = "bold yellow" if self._turn == "submitting" else "bold green"
        parts = [
            f"[{turn_style}]{self._turn.capitalize()}[/]",
            f"[bold cyan]Calls:[/] {usage.total_calls}",
            f"[bold magenta]Tokens:[/] {usage.total_input_tokens + usage.total_output_tokens:,} "
            f"[dim]({usage.total_input_tokens:,}/{usage.total_output_tokens:,})[/]",
        ]
        self.update("  ".join(parts))


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_message(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        if len(message) > LOG_MAX_MESSAGE_LENGTH:
            message = message[:LOG_MAX_MESSAGE_LENGTH] + "..."

        line = Text.from_markup(
            f"[dim]{timestamp}[/] "
            f"[{level_colors.get(level, 'white')}]{LogLevel.name(level):<5}[/] "
        )
        line.append(f"[{component}] ", style=COMPONENT_COLORS.get(component, "white"))
        line.append(message)
        self.write(line)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
