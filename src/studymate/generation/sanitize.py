"""Text cleanup applied to transcript content before it reaches a prompt."""

import re

from ..transcript import Message

# [text](url) -> text
_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
# Bare http(s) URLs are removed entirely
_BARE_URL = re.compile(r"https?://\S+")


def strip_links(text: str) -> str:
    """Replace markdown links with their label and delete bare URLs.

    >>> strip_links("See [docs](http://x.com/y) or http://z.com")
    'See docs or '
    """
    text = _MARKDOWN_LINK.sub(r"\1", text)
    return _BARE_URL.sub("", text)


def group_by_role(messages: list[Message]) -> tuple[list[str], list[str]]:
    """Split sanitized contents into (questions, explanations)."""
    questions: list[str] = []
    explanations: list[str] = []
    for msg in messages:
        cleaned = strip_links(msg.content)
        if msg.role == "user":
            questions.append(cleaned)
        else:
            explanations.append(cleaned)
    return questions, explanations
