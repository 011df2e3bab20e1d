"""Roadmap data structures.

A step's descriptions are a sum type decided once at decode time:
either plain text, or a list whose items are ConceptDetail or ResourceLink.
"""

from pydantic import BaseModel, ConfigDict, Field


class ConceptDetail(BaseModel):
    """A concept to study within a roadmap step."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    concept: str = ""
    description: str = ""
    link: str = ""
    prerequisite: str = ""
    estimated_time: str = Field(default="", alias="estimatedTime")


class ResourceLink(BaseModel):
    """An external resource attached to a roadmap step."""

    model_config = ConfigDict(frozen=True)

    resource: str = ""
    link: str = ""


DescriptionItem = ConceptDetail | ResourceLink
Description = str | list[DescriptionItem]


class RoadmapStep(BaseModel):
    """One stage of a learning roadmap."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    descriptions: Description = ""

    @property
    def concepts(self) -> list[ConceptDetail]:
        if isinstance(self.descriptions, str):
            return []
        return [item for item in self.descriptions if isinstance(item, ConceptDetail)]

    @property
    def resources(self) -> list[ResourceLink]:
        if isinstance(self.descriptions, str):
            return []
        return [item for item in self.descriptions if isinstance(item, ResourceLink)]
