"""
Orchestrates the full Lumina Worlds run from a world idea to text and visuals.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence

from lumina_worlds.common import MissingCredentialError, clean_text
from lumina_worlds.image_generation import (
    GeneratedImage,
    ImageClient,
    ImageResult,
    build_character_image_prompt,
    build_concept_image_prompt,
    build_scenario_image_prompt,
)
from lumina_worlds.text_generation import (
    MAX_CHARACTERS,
    MAX_CUSTOMIZATIONS,
    MAX_IDEAS,
    CharacterConcept,
    CustomizationOption,
    GenerationClient,
    GenerationResult,
    IdeaRecord,
    StructuredList,
    build_characters_request,
    build_customization_request,
    build_ideas_request,
    build_narrative_request,
    build_region_maps_request,
    records_or_empty,
    result_text,
)

from .models import CHARACTER_SLOTS, SCENARIO_SLOTS, WorldAggregate
from .progress import (
    CHARACTER,
    CONCEPT,
    LOADING,
    SCENARIO,
    SlotState,
    VisualProgress,
    finished_state,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, Any]], None]
SleepFunction = Callable[[float], Awaitable[Any]]

DEFAULT_IMAGE_DELAY_SECONDS = 1.0
MISSING_CREDENTIAL_MESSAGE = "API key not configured. Please check your environment variables."


class WorldOrchestrator:
    """
    High-level coordinator that chains the text and image generation calls.

    Calls run strictly one after another. Text failures abort the run; image
    failures degrade to descriptions inside :class:`ImageClient`.
    """

    def __init__(
        self,
        *,
        text_client: GenerationClient | None = None,
        image_client: ImageClient | None = None,
        api_key: str | None = None,
        progress: VisualProgress | None = None,
        image_delay_seconds: float = DEFAULT_IMAGE_DELAY_SECONDS,
        sleep: SleepFunction = asyncio.sleep,
    ) -> None:
        self._text_client = text_client or GenerationClient(api_key=api_key)
        self._image_client = image_client or ImageClient(text_client=self._text_client)
        self.progress = progress or VisualProgress()
        self._image_delay_seconds = image_delay_seconds
        self._sleep = sleep
        self._run_counter = 0
        self.is_loading = False
        self.last_error: str | None = None

    async def __aenter__(self) -> "WorldOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        text_transport = self._text_client.transport
        await text_transport.aclose()
        if self._image_client.transport is not text_transport:
            await self._image_client.transport.aclose()

    async def build_world(
        self,
        user_idea: str,
        world_type: str,
        include_visuals: bool = True,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> WorldAggregate:
        """
        Generate narrative, lists, regions and (optionally) visuals for one world.
        """
        user_idea = (user_idea or "").strip()
        world_type = (world_type or "").strip()
        if not user_idea:
            raise ValueError("user_idea must be a non-empty string.")
        if not world_type:
            raise ValueError("world_type must be a non-empty string.")

        self._run_counter += 1
        run_id = self._run_counter
        self.is_loading = True
        self.last_error = None

        try:
            self.progress.reset()
            self._notify(progress_callback, "pipeline:started", world_type=world_type, visuals=include_visuals)
            if not self._text_client.transport.has_credential:
                raise MissingCredentialError(MISSING_CREDENTIAL_MESSAGE)
            aggregate = await self._generate_text_content(user_idea, world_type, progress_callback)
        except Exception as exc:
            if run_id == self._run_counter:
                self.last_error = str(exc)
                self.is_loading = False
            self._notify(progress_callback, "pipeline:failed", error=str(exc))
            raise

        if include_visuals:
            logger.info("Starting visual content generation...")
            aggregate = await self._generate_visual_content(
                aggregate,
                run_id=run_id,
                progress_callback=progress_callback,
            )

        if run_id == self._run_counter:
            self.is_loading = False
        self._notify(
            progress_callback,
            "pipeline:complete",
            world_type=world_type,
            characters=len(aggregate.characters),
            visuals=aggregate.has_visuals,
        )
        return aggregate

    async def _generate_text_content(
        self,
        user_idea: str,
        world_type: str,
        progress_callback: ProgressCallback | None,
    ) -> WorldAggregate:
        self._notify(progress_callback, "narrative:generating")
        narrative_result = await self._text_client.send(build_narrative_request(user_idea, world_type))
        narrative = clean_text(result_text(narrative_result))
        self._notify(progress_callback, "narrative:generated", word_count=len(narrative.split()))

        self._notify(progress_callback, "ideas:generating")
        ideas_result = await self._text_client.send(build_ideas_request(user_idea, world_type))
        ideas = [IdeaRecord.from_mapping(entry) for entry in _records("ideas", ideas_result)][:MAX_IDEAS]
        self._notify(progress_callback, "ideas:generated", count=len(ideas))

        self._notify(progress_callback, "customization:generating")
        customization_result = await self._text_client.send(build_customization_request(user_idea, world_type))
        customizations = [
            CustomizationOption.from_mapping(entry)
            for entry in _records("customization", customization_result)
        ][:MAX_CUSTOMIZATIONS]
        self._notify(progress_callback, "customization:generated", count=len(customizations))

        self._notify(progress_callback, "characters:generating")
        characters_result = await self._text_client.send(build_characters_request(user_idea, world_type))
        characters = [
            CharacterConcept.from_mapping(entry) for entry in _records("characters", characters_result)
        ][:MAX_CHARACTERS]
        self._notify(progress_callback, "characters:generated", count=len(characters))

        self._notify(progress_callback, "regions:generating")
        regions_result = await self._text_client.send(build_region_maps_request(user_idea, world_type))
        region_text = clean_text(result_text(regions_result))
        self._notify(progress_callback, "regions:generated")

        return WorldAggregate(
            user_idea=user_idea,
            world_type=world_type,
            narrative=narrative,
            ideas=tuple(ideas),
            customizations=tuple(customizations),
            characters=tuple(characters),
            region_text=region_text,
        )

    async def _generate_visual_content(
        self,
        aggregate: WorldAggregate,
        *,
        run_id: int,
        progress_callback: ProgressCallback | None,
    ) -> WorldAggregate:
        concept_visual: ImageResult | None = None
        character_visuals: list[ImageResult | None] = [None] * CHARACTER_SLOTS
        scenario_visuals: list[ImageResult | None] = [None] * SCENARIO_SLOTS

        try:
            concept_visual = await self._generate_visual(
                CONCEPT,
                0,
                build_concept_image_prompt(aggregate.user_idea, aggregate.world_type),
                run_id=run_id,
                progress_callback=progress_callback,
            )

            for index, character in enumerate(aggregate.characters[:CHARACTER_SLOTS]):
                await self._sleep(self._image_delay_seconds)
                character_visuals[index] = await self._generate_visual(
                    CHARACTER,
                    index,
                    build_character_image_prompt(character, aggregate.world_type),
                    run_id=run_id,
                    progress_callback=progress_callback,
                )

            for index in range(SCENARIO_SLOTS):
                await self._sleep(self._image_delay_seconds)
                scenario_visuals[index] = await self._generate_visual(
                    SCENARIO,
                    index,
                    build_scenario_image_prompt(index, aggregate.user_idea, aggregate.world_type),
                    run_id=run_id,
                    progress_callback=progress_callback,
                )
        except Exception:
            logger.exception("Error generating visual content; returning partial results.")
            self._fail_loading_slots(run_id)

        return dataclasses.replace(
            aggregate,
            concept_visual=concept_visual,
            character_visuals=tuple(character_visuals),
            scenario_visuals=tuple(scenario_visuals),
        )

    async def _generate_visual(
        self,
        slot_kind: str,
        slot_index: int,
        prompt: str,
        *,
        run_id: int,
        progress_callback: ProgressCallback | None,
    ) -> ImageResult:
        self._update_slot(run_id, slot_kind, slot_index, LOADING)
        self._notify(progress_callback, "visual:generating", slot_kind=slot_kind, slot_index=slot_index)

        result = await self._image_client.try_generate_image(prompt, slot_kind)
        is_image = isinstance(result, GeneratedImage)

        self._update_slot(run_id, slot_kind, slot_index, finished_state(failed=not is_image))
        self._notify(
            progress_callback,
            "visual:done",
            slot_kind=slot_kind,
            slot_index=slot_index,
            is_image=is_image,
        )
        return result

    def _update_slot(self, run_id: int, slot_kind: str, slot_index: int, state: SlotState) -> None:
        # A newer run owns the progress state; updates from older runs are dropped.
        if run_id == self._run_counter:
            self.progress.update(slot_kind, slot_index, state)

    def _fail_loading_slots(self, run_id: int) -> None:
        for slot_kind, states in self.progress.snapshot().items():
            for slot_index, state in enumerate(states):
                if state.loading:
                    self._update_slot(run_id, slot_kind, slot_index, finished_state(failed=True))

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is not None:
            callback(stage, payload)


def _records(kind: str, result: GenerationResult) -> Sequence[Mapping[str, Any]]:
    if not isinstance(result, StructuredList):
        logger.warning("Structured %s response was not a list; using an empty list.", kind)
    return records_or_empty(result)
