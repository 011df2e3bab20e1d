"""Textual CSS for the TUI.

Layout: chat on the left; roadmap, notes and the optional log stacked on
the right; status line and input across the bottom.
"""

APP_CSS = """
Screen {
    layout: grid;
    grid-size: 2 2;
    grid-columns: 3fr 2fr;
    grid-rows: 1fr auto;
}

/* Bordered panels share one look; each gets its own accent colour */
#chat-history, #roadmap, #notes, #debug-panel {
    background: $panel;
    padding: 0 1;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
}

#chat-history {
    height: 100%;
    border: round $primary 50%;
    border-title-color: $primary;
    scrollbar-gutter: stable;

    &:focus-within { border: round $primary; }
    &.waiting {
        border: round $warning;
        border-subtitle-color: $warning;
    }
}

.chat-message {
    height: auto;
    margin-top: 1;
    padding-left: 1;
}

.user-message { border-left: thick $accent; }
.assistant-message { border-left: thick $secondary; }
.message-header { color: $text-muted; text-style: bold; }
.message-content { height: auto; }

#right-panel { height: 100%; }

#roadmap {
    height: 1fr;
    border: round $secondary 50%;
    border-title-color: $secondary;

    &:focus { border: round $secondary; }
}

#notes {
    height: 1fr;
    border: round $accent 50%;
    border-title-color: $accent;

    &:focus-within { border: round $accent; }
    &.failed {
        border: round $error;
        border-subtitle-color: $error;
    }
}

#notes-status {
    width: 100%;
    color: $text-muted;
    text-align: center;
    padding-top: 1;
}

#notes.failed #notes-status { color: $error; }

#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 14;
    margin-top: 1;
    border: round $warning 50%;
    border-title-color: $warning;
}

#bottom-bar {
    column-span: 2;
    height: auto;
    padding: 0 1 1 1;
    border-top: solid $border;
}

#status {
    height: 1;
    margin-bottom: 1;
    padding: 0 2;
    background: $surface;
}

ChatInputBar {
    height: 5;
    border: round $primary 50%;

    &:focus-within { border: round $primary; }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin-left: 1;
}

.-maximized { column-span: 2; }
"""
