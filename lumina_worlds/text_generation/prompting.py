"""
Prompt construction utilities for the Lumina Worlds text generation calls.
"""

from __future__ import annotations

from .schemas import (
    CHARACTERS_SCHEMA,
    CUSTOMIZATION_SCHEMA,
    IDEAS_SCHEMA,
    GenerationRequest,
)

DEFAULT_MOOD = "atmospheric, detailed, immersive"

WORLD_TYPE_MOODS: dict[str, str] = {
    "Medieval Fantasy": "epic, mystical, magical, ancient, heroic",
    "Sci-Fi Future": "futuristic, technological, sleek, advanced, cosmic",
    "Post-Apocalyptic": "gritty, desolate, survival, ruins, harsh",
    "Steampunk": "industrial, brass, steam, Victorian, mechanical",
    "Cyberpunk": "neon, urban, dystopian, high-tech, noir",
    "Modern Urban Fantasy": "contemporary, magical realism, urban, mysterious",
}

PLAIN_TEXT_INSTRUCTION = (
    "Do not use markdown formatting, asterisks, or special characters. "
    "Write in plain text with natural paragraph breaks."
)


def mood_for_world_type(world_type: str) -> str:
    """Return the mood descriptor for a known world type, or a generic one."""
    return WORLD_TYPE_MOODS.get(world_type, DEFAULT_MOOD)


def _require(user_idea: str, world_type: str) -> None:
    if not user_idea or not user_idea.strip():
        raise ValueError("user_idea must be a non-empty string.")
    if not world_type or not world_type.strip():
        raise ValueError("world_type must be a non-empty string.")


def build_narrative_request(user_idea: str, world_type: str) -> GenerationRequest:
    """
    Request the long-form world narrative.
    """
    _require(user_idea, world_type)
    prompt = (
        f'Create a detailed world-building narrative for a {world_type} world based on the idea: "{user_idea}". '
        "Include history, geography, key factions, magic systems (if applicable), and societal structure. "
        "Make it rich and evocative. Write in engaging prose format with multiple paragraphs. "
        f"Let the tone feel {mood_for_world_type(world_type)}. {PLAIN_TEXT_INSTRUCTION}"
    )
    return GenerationRequest(prompt_text=prompt)


def build_ideas_request(user_idea: str, world_type: str) -> GenerationRequest:
    _require(user_idea, world_type)
    prompt = (
        f'Based on the world idea "{user_idea}" in a {world_type} setting, generate 5 distinct ideas '
        "for games or books set in this world. Each should be creative and different from the others. "
        f"Keep the mood {mood_for_world_type(world_type)}."
    )
    return GenerationRequest(prompt_text=prompt, structured_schema=IDEAS_SCHEMA)


def build_customization_request(user_idea: str, world_type: str) -> GenerationRequest:
    _require(user_idea, world_type)
    prompt = (
        f'For a {world_type} world based on "{user_idea}", suggest 5 specific ways a developer could '
        "further customize or expand upon this world. Be practical and creative. "
        f"Stay true to a {mood_for_world_type(world_type)} feel."
    )
    return GenerationRequest(prompt_text=prompt, structured_schema=CUSTOMIZATION_SCHEMA)


def build_characters_request(user_idea: str, world_type: str) -> GenerationRequest:
    _require(user_idea, world_type)
    prompt = (
        f'Create 5 compelling character concepts for a {world_type} world based on "{user_idea}". '
        "Each character should be unique and fit the world's tone "
        f"({mood_for_world_type(world_type)})."
    )
    return GenerationRequest(prompt_text=prompt, structured_schema=CHARACTERS_SCHEMA)


def build_region_maps_request(user_idea: str, world_type: str) -> GenerationRequest:
    """
    Request two region descriptions, each a heading line followed by its body.
    """
    _require(user_idea, world_type)
    prompt = (
        f'Create textual descriptions for 2 different regions/areas in a {world_type} world based on "{user_idea}". '
        "Include geography, notable landmarks, settlements, and atmosphere. "
        f"Convey a {mood_for_world_type(world_type)} atmosphere. "
        "Format each as a separate section with clear headings using simple text - no asterisks or markdown. "
        "Put each heading on its own line and separate sections with a blank line. Use plain text formatting only."
    )
    return GenerationRequest(prompt_text=prompt)


def build_image_description_prompt(image_prompt: str) -> str:
    """
    Ask the text model for an art-direction brief standing in for an image.
    """
    return f"""Based on this image generation prompt: "{image_prompt}"

Create a detailed visual description that an artist could use to create this image. Include:
- Composition and perspective details
- Color palette and lighting description
- Key visual elements and their placement
- Atmosphere and mood
- Specific artistic style notes
- Technical details for the artist

Write this as a comprehensive art direction brief that captures the essence of what the image should look like."""
