"""
Text generation: prompts, structured-output schemas, records and the Gemini text client.
"""

from .generation_client import DEFAULT_TEXT_MODEL, GenerationClient
from .prompting import (
    build_characters_request,
    build_customization_request,
    build_ideas_request,
    build_image_description_prompt,
    build_narrative_request,
    build_region_maps_request,
    mood_for_world_type,
)
from .records import (
    MAX_CHARACTERS,
    MAX_CUSTOMIZATIONS,
    MAX_IDEAS,
    SCENARIO_ARCHETYPES,
    CharacterConcept,
    CustomizationOption,
    IdeaRecord,
    ScenarioArchetype,
    pad_characters,
)
from .schemas import (
    CHARACTERS_SCHEMA,
    CUSTOMIZATION_SCHEMA,
    IDEAS_SCHEMA,
    GenerationRequest,
    GenerationResult,
    ListSchema,
    PlainText,
    StructuredList,
    records_or_empty,
    result_text,
)

__all__ = [
    "CHARACTERS_SCHEMA",
    "CUSTOMIZATION_SCHEMA",
    "CharacterConcept",
    "CustomizationOption",
    "DEFAULT_TEXT_MODEL",
    "GenerationClient",
    "GenerationRequest",
    "GenerationResult",
    "IDEAS_SCHEMA",
    "IdeaRecord",
    "ListSchema",
    "MAX_CHARACTERS",
    "MAX_CUSTOMIZATIONS",
    "MAX_IDEAS",
    "PlainText",
    "SCENARIO_ARCHETYPES",
    "ScenarioArchetype",
    "StructuredList",
    "build_characters_request",
    "build_customization_request",
    "build_ideas_request",
    "build_image_description_prompt",
    "build_narrative_request",
    "build_region_maps_request",
    "mood_for_world_type",
    "pad_characters",
    "records_or_empty",
    "result_text",
]
