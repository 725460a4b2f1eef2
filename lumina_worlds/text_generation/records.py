"""
Typed records decoded from the structured list responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

MAX_IDEAS = 5
MAX_CUSTOMIZATIONS = 5
MAX_CHARACTERS = 6


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value).strip()


@dataclass(frozen=True)
class IdeaRecord:
    """A game or book idea set in the generated world."""

    title: str
    synopsis: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "IdeaRecord":
        return cls(title=_text(payload, "title"), synopsis=_text(payload, "synopsis"))

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "synopsis": self.synopsis}


@dataclass(frozen=True)
class CustomizationOption:
    title: str
    description: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "CustomizationOption":
        return cls(title=_text(payload, "title"), description=_text(payload, "description"))

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description}


@dataclass(frozen=True)
class CharacterConcept:
    """A character living in the generated world."""

    name: str
    role: str
    description: str

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "CharacterConcept":
        return cls(
            name=_text(payload, "name"),
            role=_text(payload, "role"),
            description=_text(payload, "description"),
        )

    @classmethod
    def placeholder(cls, position: int) -> "CharacterConcept":
        """Stand-in for an empty character slot; ``position`` is 1-based."""
        return cls(
            name=f"Character {position}",
            role="Available for expansion",
            description="Additional character concept available for development in your world.",
        )

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "role": self.role, "description": self.description}


@dataclass(frozen=True)
class ScenarioArchetype:
    """
    One of the built-in scenario cards.

    ``focus`` describes the location for image prompts; ``title``, ``tag`` and
    ``description`` are what the exported cards show.
    """

    title: str
    tag: str
    description: str
    focus: str


_SCENARIO_DESCRIPTION = (
    "This scenario represents a key moment or location in your world, "
    "offering unique challenges and opportunities for storytelling."
)

SCENARIO_ARCHETYPES: tuple[ScenarioArchetype, ...] = (
    ScenarioArchetype(
        title="Scenario 1",
        tag="Quest",
        description=_SCENARIO_DESCRIPTION,
        focus="a key location where important events unfold",
    ),
    ScenarioArchetype(
        title="Scenario 2",
        tag="Quest",
        description=_SCENARIO_DESCRIPTION,
        focus="a mysterious place filled with secrets and danger",
    ),
    ScenarioArchetype(
        title="Scenario 3",
        tag="Quest",
        description=_SCENARIO_DESCRIPTION,
        focus="a central hub where characters gather and stories begin",
    ),
)


def pad_characters(
    characters: Iterable[CharacterConcept],
    *,
    slots: int = MAX_CHARACTERS,
) -> list[CharacterConcept]:
    """
    Truncate or pad ``characters`` to exactly ``slots`` entries with placeholders.
    """
    padded = list(characters)[:slots]
    while len(padded) < slots:
        padded.append(CharacterConcept.placeholder(len(padded) + 1))
    return padded
