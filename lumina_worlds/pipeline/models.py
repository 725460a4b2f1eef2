"""
The generated world aggregate and its serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from lumina_worlds.common import split_paragraphs
from lumina_worlds.image_generation import GeneratedImage, ImageResult, image_result_from_dict
from lumina_worlds.text_generation import (
    CharacterConcept,
    CustomizationOption,
    IdeaRecord,
    pad_characters,
)

from .progress import CHARACTER, SCENARIO, SLOT_COUNTS

CHARACTER_SLOTS = SLOT_COUNTS[CHARACTER]
SCENARIO_SLOTS = SLOT_COUNTS[SCENARIO]


@dataclass(frozen=True)
class RegionSection:
    heading: str
    body: str


def parse_region_sections(text: str) -> list[RegionSection]:
    """
    Split region text on blank lines; the first line of each block is its heading.
    """
    sections: list[RegionSection] = []
    for block in split_paragraphs(text):
        heading, _, body = block.partition("\n")
        sections.append(RegionSection(heading=heading.strip(), body=body.strip()))
    return sections


def _fit(values: Any, length: int) -> tuple[ImageResult | None, ...]:
    fitted = list(values or ())[:length]
    fitted.extend([None] * (length - len(fitted)))
    return tuple(fitted)


@dataclass(frozen=True)
class WorldAggregate:
    """
    Everything produced by one generation run.

    ``character_visuals`` and ``scenario_visuals`` are always exactly 6 and 3
    long, index-aligned with the characters and the scenario archetypes; empty
    slots hold ``None``.
    """

    user_idea: str
    world_type: str
    narrative: str
    ideas: tuple[IdeaRecord, ...] = ()
    customizations: tuple[CustomizationOption, ...] = ()
    characters: tuple[CharacterConcept, ...] = ()
    region_text: str = ""
    concept_visual: ImageResult | None = None
    character_visuals: tuple[ImageResult | None, ...] = (None,) * CHARACTER_SLOTS
    scenario_visuals: tuple[ImageResult | None, ...] = (None,) * SCENARIO_SLOTS

    def __post_init__(self) -> None:
        object.__setattr__(self, "ideas", tuple(self.ideas))
        object.__setattr__(self, "customizations", tuple(self.customizations))
        object.__setattr__(self, "characters", tuple(self.characters))
        object.__setattr__(self, "character_visuals", _fit(self.character_visuals, CHARACTER_SLOTS))
        object.__setattr__(self, "scenario_visuals", _fit(self.scenario_visuals, SCENARIO_SLOTS))

    @property
    def has_visuals(self) -> bool:
        return self.concept_visual is not None or any(
            visual is not None for visual in (*self.character_visuals, *self.scenario_visuals)
        )

    @property
    def concept_image(self) -> GeneratedImage | None:
        if isinstance(self.concept_visual, GeneratedImage):
            return self.concept_visual
        return None

    def narrative_paragraphs(self) -> list[str]:
        return split_paragraphs(self.narrative)

    def region_sections(self) -> list[RegionSection]:
        return parse_region_sections(self.region_text)

    def display_characters(self) -> list[CharacterConcept]:
        """Characters padded or truncated to the 6 display slots."""
        return pad_characters(self.characters, slots=CHARACTER_SLOTS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_idea": self.user_idea,
            "world_type": self.world_type,
            "narrative": self.narrative,
            "ideas": [idea.as_dict() for idea in self.ideas],
            "customizations": [option.as_dict() for option in self.customizations],
            "characters": [character.as_dict() for character in self.characters],
            "region_text": self.region_text,
            "concept_visual": _visual_to_dict(self.concept_visual),
            "character_visuals": [_visual_to_dict(visual) for visual in self.character_visuals],
            "scenario_visuals": [_visual_to_dict(visual) for visual in self.scenario_visuals],
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "WorldAggregate":
        for key in ("user_idea", "world_type"):
            if key not in payload:
                raise ValueError(f"World payload must include '{key}'.")

        return cls(
            user_idea=str(payload["user_idea"]).strip(),
            world_type=str(payload["world_type"]).strip(),
            narrative=str(payload.get("narrative") or "").strip(),
            ideas=tuple(IdeaRecord.from_mapping(entry) for entry in payload.get("ideas") or ()),
            customizations=tuple(
                CustomizationOption.from_mapping(entry) for entry in payload.get("customizations") or ()
            ),
            characters=tuple(
                CharacterConcept.from_mapping(entry) for entry in payload.get("characters") or ()
            ),
            region_text=str(payload.get("region_text") or "").strip(),
            concept_visual=_visual_from_dict(payload.get("concept_visual")),
            character_visuals=tuple(
                _visual_from_dict(entry) for entry in payload.get("character_visuals") or ()
            ),
            scenario_visuals=tuple(
                _visual_from_dict(entry) for entry in payload.get("scenario_visuals") or ()
            ),
        )

    @classmethod
    def from_yaml(cls, source: str | Path) -> "WorldAggregate":
        path = Path(source)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("World YAML must deserialize to a mapping.")
        return cls.from_dict(data)


def _visual_to_dict(visual: ImageResult | None) -> dict[str, Any] | None:
    return None if visual is None else visual.to_dict()


def _visual_from_dict(payload: Any) -> ImageResult | None:
    if payload is None:
        return None
    if not isinstance(payload, Mapping):
        raise ValueError(f"Invalid visual entry: {payload!r}")
    return image_result_from_dict(payload)
