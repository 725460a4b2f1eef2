"""
Prompt construction utilities for Lumina Worlds image generation.
"""

from __future__ import annotations

from lumina_worlds.text_generation import SCENARIO_ARCHETYPES, CharacterConcept, mood_for_world_type


def build_concept_image_prompt(user_idea: str, world_type: str) -> str:
    """
    Build the prompt for the single wide concept-art landscape of the world.
    """
    mood = mood_for_world_type(world_type)
    return f"""Create a stunning cinematic concept art depicting a {world_type} world inspired by: "{user_idea}".
Style: High-quality digital art, masterpiece quality, detailed environment, atmospheric lighting, professional game concept art.
Composition: Epic wide landscape view showcasing the world's unique characteristics and atmosphere.
Mood: {mood}, breathtaking, immersive.
Technical: 4K quality, sharp details, vibrant colors, dramatic composition."""


def build_character_image_prompt(character: CharacterConcept, world_type: str) -> str:
    mood = mood_for_world_type(world_type)
    return f"""Character concept art portrait of {character.name}, a {character.role} in a {world_type} world.
Character Description: {character.description}
Style: Professional digital character portrait, detailed, high-quality game art style, masterpiece.
Composition: Upper body portrait, showing personality and role clearly.
Mood: {mood}, character-focused, expressive.
Technical: Sharp details, good lighting, character design quality."""


def build_scenario_image_prompt(index: int, user_idea: str, world_type: str) -> str:
    """
    Build the environment prompt for scenario archetype ``index`` (0-based).
    """
    if not 0 <= index < len(SCENARIO_ARCHETYPES):
        raise ValueError(f"Scenario index must be between 0 and {len(SCENARIO_ARCHETYPES) - 1}.")

    mood = mood_for_world_type(world_type)
    focus = SCENARIO_ARCHETYPES[index].focus
    return f"""Environmental concept art for {focus} in a {world_type} world.
World Concept: "{user_idea}"
Style: Atmospheric environment art, cinematic composition, professional quality.
Elements: Showcase unique features and atmosphere of this important location.
Mood: {mood}, environmental storytelling, immersive.
Technical: Detailed background art, good composition, atmospheric lighting."""
