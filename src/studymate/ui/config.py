"""Display constants for the TUI."""


class LogLevel:
    """Numeric thresholds for the log panel.

    Components report levels as strings ('debug', 'info', 'warning',
    'error'); the panel compares them numerically.
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _by_name = {"debug": DEBUG, "info": INFO, "warning": WARNING, "error": ERROR}

    @classmethod
    def name(cls, level: int) -> str:
        for label, value in cls._by_name.items():
            if value == level:
                return label.upper()
        return "UNKNOWN"

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Unrecognized names fall back to DEBUG."""
        return cls._by_name.get(level_str.lower(), cls.DEBUG)


# Log panel
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating a log line

COMPONENT_COLORS = {
    "TUI": "cyan",
    "Chat": "green",
    "LLM": "magenta",
    "Notes": "bright_green",
    "Roadmap": "bright_blue",
    "Store": "yellow",
}

# Input bar
INPUT_HISTORY_MAX_SIZE = 100  # Submitted inputs kept for up/down recall

# Roadmap tree
ROADMAP_DESCRIPTION_PREVIEW = 120  # Characters of a concept description shown inline
