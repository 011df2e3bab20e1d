"""Roadmap module: step model, tolerant parser and context-keyed tracker."""

from .models import ConceptDetail, Description, DescriptionItem, ResourceLink, RoadmapStep
from .parser import (
    decode_description,
    decode_item,
    load_roadmap_json,
    parse_roadmap,
    strip_code_fence,
)

__all__ = [
    "ConceptDetail",
    "Description",
    "DescriptionItem",
    "ResourceLink",
    "RoadmapStep",
    "decode_description",
    "decode_item",
    "load_roadmap_json",
    "parse_roadmap",
    "strip_code_fence",
]
