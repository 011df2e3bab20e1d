"""Generation module: reply, roadmap and notes derivations."""

from .client import GenerationClient, summarize_history
from .models import UsageSummary
from .sanitize import group_by_role, strip_links
from .session import ChatSessionHandle

__all__ = [
    "ChatSessionHandle",
    "GenerationClient",
    "UsageSummary",
    "group_by_role",
    "strip_links",
    "summarize_history",
]
