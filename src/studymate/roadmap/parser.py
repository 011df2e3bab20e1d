"""Tolerant parser for roadmap JSON produced by the model.

The model is asked for a JSON array but may wrap it in a code fence, surround
it with prose, or return something else entirely. parse_roadmap() never
raises: anything it cannot make sense of becomes an empty roadmap.
"""

import json
import re
from typing import Any

from ..errors import ParseError
from .models import ConceptDetail, Description, DescriptionItem, ResourceLink, RoadmapStep

_FENCE_START = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_FENCE_END = re.compile(r"\n?```\s*$")

_CONCEPT_FIELDS = ("concept", "description", "link", "prerequisite", "estimatedTime")
_RESOURCE_FIELDS = ("resource", "link")


def strip_code_fence(text: str) -> str:
    """Remove a leading/trailing triple-backtick fence with optional language tag."""
    text = _FENCE_START.sub("", text, count=1)
    text = _FENCE_END.sub("", text, count=1)
    return text.strip()


def load_roadmap_json(text: str) -> list[Any]:
    """Decode the raw model output into a JSON array.

    Tries the fence-stripped text first, then the substring between the
    first '[' and the last ']' of the raw text.

    Raises:
        ParseError: If no JSON array can be recovered
    """
    candidates = [strip_code_fence(text)]
    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError) as e:
            last_error = e
            continue
        if not isinstance(data, list):
            raise ParseError(f"Expected a JSON array, got {type(data).__name__}")
        return data

    raise ParseError(f"No JSON array found in model output: {last_error}")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def decode_item(obj: Any) -> DescriptionItem | None:
    """Classify one description entry by the keys it carries.

    An object with a 'concept' key is a ConceptDetail (extra keys are ignored);
    otherwise an object with a 'resource' key is a ResourceLink. Objects with
    neither are treated as concepts with empty fields filled in. Non-objects
    are dropped.
    """
    if not isinstance(obj, dict):
        return None
    if "concept" not in obj and "resource" in obj:
        return ResourceLink(**{field: _text(obj.get(field)) for field in _RESOURCE_FIELDS})
    return ConceptDetail(**{field: _text(obj.get(field)) for field in _CONCEPT_FIELDS})


def decode_description(value: Any) -> Description:
    """Decode a step's 'descriptions' value into the Description sum type."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        value = [value]
    if isinstance(value, list):
        items = (decode_item(entry) for entry in value)
        return [item for item in items if item is not None]
    return _text(value)


def decode_step(obj: Any) -> RoadmapStep | None:
    if not isinstance(obj, dict):
        return None
    return RoadmapStep(
        title=_text(obj.get("title")),
        descriptions=decode_description(obj.get("descriptions")),
    )


def parse_roadmap(text: str) -> list[RoadmapStep]:
    """Parse model output into roadmap steps, returning [] on any failure."""
    try:
        data = load_roadmap_json(text or "")
    except ParseError:
        return []
    steps = (decode_step(entry) for entry in data)
    return [step for step in steps if step is not None]
