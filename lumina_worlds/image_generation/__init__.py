"""
AI image generation package for Lumina Worlds.
"""

from .image_client import (
    DEFAULT_IMAGE_MODEL,
    GeneratedImage,
    ImageClient,
    ImageDescription,
    ImageResult,
    image_result_from_dict,
    synthesized_description,
)
from .prompting import (
    build_character_image_prompt,
    build_concept_image_prompt,
    build_scenario_image_prompt,
)

__all__ = [
    "DEFAULT_IMAGE_MODEL",
    "GeneratedImage",
    "ImageClient",
    "ImageDescription",
    "ImageResult",
    "build_character_image_prompt",
    "build_concept_image_prompt",
    "build_scenario_image_prompt",
    "image_result_from_dict",
    "synthesized_description",
]
