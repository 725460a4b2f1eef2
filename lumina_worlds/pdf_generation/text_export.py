"""
Flat plain-text rendition of a world, used when PDF layout fails.
"""

from __future__ import annotations

from pathlib import Path

from lumina_worlds.pipeline import WorldAggregate
from lumina_worlds.text_generation import SCENARIO_ARCHETYPES

from .builder import BRAND_SUBTITLE, BRAND_TITLE, FOOTER_ATTRIBUTION

RULE = "=" * 60


def _heading(title: str) -> list[str]:
    return ["", title.upper(), "-" * len(title)]


def render_world_text(aggregate: WorldAggregate) -> str:
    """
    Render every textual section of ``aggregate``; images are left out.
    """
    lines: list[str] = [
        RULE,
        f"{BRAND_TITLE} - {BRAND_SUBTITLE}",
        f"World Type: {aggregate.world_type}",
        RULE,
    ]

    lines += _heading("Original World Idea")
    lines.append(f'"{aggregate.user_idea}"')

    if aggregate.narrative:
        lines += _heading("World Narrative")
        for paragraph in aggregate.narrative_paragraphs():
            lines += [paragraph, ""]

    lines += _heading("Character Concepts")
    for index, character in enumerate(aggregate.display_characters(), start=1):
        lines.append(f"{index}. {character.name or f'Character {index}'} ({character.role or 'Role not specified'})")
        if character.description:
            lines.append(f"   {character.description}")

    lines += _heading("World Scenarios")
    for index, archetype in enumerate(SCENARIO_ARCHETYPES, start=1):
        lines.append(f"{index}. {archetype.title} [{archetype.tag}]")
        lines.append(f"   {archetype.description}")

    if aggregate.ideas:
        lines += _heading("Game & Book Ideas")
        for index, idea in enumerate(aggregate.ideas, start=1):
            lines += [f"{index}. {idea.title}", f"   {idea.synopsis}"]

    if aggregate.customizations:
        lines += _heading("Customization Options")
        for index, option in enumerate(aggregate.customizations, start=1):
            lines += [f"{index}. {option.title}", f"   {option.description}"]

    if aggregate.region_text:
        lines += _heading("Conceptual Maps & Regions")
        for section in aggregate.region_sections():
            lines.append(section.heading)
            if section.body:
                lines.append(section.body)
            lines.append("")

    lines += ["", RULE, FOOTER_ATTRIBUTION]
    return "\n".join(lines).rstrip() + "\n"


def write_world_text(aggregate: WorldAggregate, output_path: Path | str) -> Path:
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(render_world_text(aggregate), encoding="utf-8")
    return output_file
