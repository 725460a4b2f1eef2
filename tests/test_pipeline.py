"""
Unit tests for the world orchestrator.

Tests cover:
- Text-only runs and the visual slot layout
- Pacing between image calls
- Failure propagation and progress reset
- Tolerance of malformed structured results
- An end-to-end run against the fake Gemini endpoint
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from lumina_worlds.common import MissingCredentialError, UpstreamError
from lumina_worlds.image_generation import GeneratedImage, ImageClient, ImageDescription
from lumina_worlds.pipeline import WorldOrchestrator
from lumina_worlds.pipeline.pipeline import MISSING_CREDENTIAL_MESSAGE
from lumina_worlds.pipeline.progress import CHARACTER, CONCEPT, LOADING, SCENARIO, finished_state
from lumina_worlds.text_generation import (
    CHARACTERS_SCHEMA,
    CUSTOMIZATION_SCHEMA,
    IDEAS_SCHEMA,
    CharacterConcept,
    GenerationClient,
    PlainText,
    StructuredList,
)

from .fakes import FakeGemini, image_response, prompt_of, text_response

IDEA = "floating cities above toxic clouds"
WORLD_TYPE = "Post-Apocalyptic"
NARRATIVE = "## The Drowned Age\n\nThe **old** world fell.\n\n\n\nThe sky-cities rose."
REGIONS = "The Haze\nA toxic sea of cloud.\n\nSkyport\nA trading hub on stilts."


def character_records(count):
    return tuple(
        {"name": f"Hero {index}", "description": f"Story {index}.", "role": "Scout"}
        for index in range(1, count + 1)
    )


def scripted_text(characters=2, ideas=None, overrides=None):
    """Build a ``send`` side effect answering each request by its schema."""
    overrides = overrides or {}
    ideas = ideas if ideas is not None else ({"title": "Tethers", "synopsis": "Climb."},)

    def respond(request):
        schema = request.structured_schema
        if schema is IDEAS_SCHEMA:
            return overrides.get("ideas", StructuredList(records=tuple(ideas)))
        if schema is CUSTOMIZATION_SCHEMA:
            return overrides.get(
                "customization",
                StructuredList(records=({"title": "Weather", "description": "Acid storms."},)),
            )
        if schema is CHARACTERS_SCHEMA:
            return overrides.get("characters", StructuredList(records=character_records(characters)))
        if "regions/areas" in request.prompt_text:
            return overrides.get("regions", PlainText(text=REGIONS))
        return overrides.get("narrative", PlainText(text=NARRATIVE))

    return respond


def make_text_client(side_effect, has_credential=True):
    text_client = MagicMock()
    text_client.transport.has_credential = has_credential
    text_client.transport.aclose = AsyncMock()
    text_client.send = AsyncMock(side_effect=side_effect)
    return text_client


def make_image_client():
    image_client = MagicMock()
    image_client.try_generate_image = AsyncMock(
        side_effect=lambda prompt, kind: GeneratedImage(kind=kind, image_base64="aW1n")
    )
    image_client.transport.aclose = AsyncMock()
    return image_client


def make_orchestrator(text_client, image_client=None):
    sleep = AsyncMock()
    orchestrator = WorldOrchestrator(
        text_client=text_client,
        image_client=image_client or make_image_client(),
        sleep=sleep,
    )
    return orchestrator, sleep


class TestTextOnlyRun:
    """Tests for runs with visuals disabled."""

    @pytest.mark.asyncio
    async def test_builds_text_sections(self):
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text()))

        world = await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        assert world.user_idea == IDEA
        assert world.world_type == WORLD_TYPE
        assert world.narrative == "The Drowned Age\n\nThe old world fell.\n\nThe sky-cities rose."
        assert [idea.title for idea in world.ideas] == ["Tethers"]
        assert [option.title for option in world.customizations] == ["Weather"]
        assert world.characters[0] == CharacterConcept(name="Hero 1", role="Scout", description="Story 1.")
        assert [section.heading for section in world.region_sections()] == ["The Haze", "Skyport"]

    @pytest.mark.asyncio
    async def test_no_image_calls_and_empty_slots(self):
        image_client = make_image_client()
        orchestrator, sleep = make_orchestrator(make_text_client(scripted_text()), image_client)

        world = await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        image_client.try_generate_image.assert_not_awaited()
        sleep.assert_not_awaited()
        assert world.concept_visual is None
        assert world.character_visuals == (None,) * 6
        assert world.scenario_visuals == (None,) * 3
        assert not world.has_visuals
        assert orchestrator.is_loading is False

    @pytest.mark.asyncio
    async def test_five_text_calls_in_order(self):
        text_client = make_text_client(scripted_text())
        orchestrator, _ = make_orchestrator(text_client)

        await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        requests = [call.args[0] for call in text_client.send.await_args_list]
        assert [request.structured_schema for request in requests] == [
            None,
            IDEAS_SCHEMA,
            CUSTOMIZATION_SCHEMA,
            CHARACTERS_SCHEMA,
            None,
        ]
        assert "world-building narrative" in requests[0].prompt_text
        assert "regions/areas" in requests[4].prompt_text


class TestVisualRun:
    """Tests for runs with visuals enabled."""

    @pytest.mark.asyncio
    async def test_slots_are_index_aligned(self):
        image_client = make_image_client()
        orchestrator, sleep = make_orchestrator(make_text_client(scripted_text(characters=2)), image_client)

        world = await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert world.concept_visual == GeneratedImage(kind=CONCEPT, image_base64="aW1n")
        assert [visual is not None for visual in world.character_visuals] == [True, True] + [False] * 4
        assert all(isinstance(visual, GeneratedImage) for visual in world.scenario_visuals)
        assert image_client.try_generate_image.await_count == 6

    @pytest.mark.asyncio
    async def test_pacing_between_image_calls(self):
        orchestrator, sleep = make_orchestrator(make_text_client(scripted_text(characters=2)))

        await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert sleep.await_count == 5
        sleep.assert_awaited_with(1.0)

    @pytest.mark.asyncio
    async def test_image_kinds_and_prompts(self):
        image_client = make_image_client()
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(characters=1)), image_client)

        await orchestrator.build_world(IDEA, WORLD_TYPE)

        calls = image_client.try_generate_image.await_args_list
        assert [call.args[1] for call in calls] == [CONCEPT, CHARACTER, SCENARIO, SCENARIO, SCENARIO]
        assert "Hero 1" in calls[1].args[0]

    @pytest.mark.asyncio
    async def test_progress_events_published(self):
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(characters=1)))
        events = []
        orchestrator.progress.subscribe(events.append)

        await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert len(events) == 10
        assert (events[0].slot_kind, events[0].slot_index, events[0].state) == (CONCEPT, 0, LOADING)
        assert events[1].state.completed and not events[1].state.failed
        assert orchestrator.progress.state(SCENARIO, 2).completed
        assert orchestrator.progress.state(CHARACTER, 1).completed is False

    @pytest.mark.asyncio
    async def test_description_marks_slot_failed(self):
        image_client = MagicMock()
        image_client.try_generate_image = AsyncMock(
            side_effect=lambda prompt, kind: ImageDescription(kind=kind, text="brief", prompt_echo=prompt[:200])
        )
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(characters=0)), image_client)

        world = await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert isinstance(world.concept_visual, ImageDescription)
        assert orchestrator.progress.state(CONCEPT, 0).failed is True

    @pytest.mark.asyncio
    async def test_unexpected_visual_error_keeps_partial_results(self):
        image_client = MagicMock()
        image_client.try_generate_image = AsyncMock(
            side_effect=[GeneratedImage(kind=CONCEPT, image_base64="aW1n"), RuntimeError("boom")]
        )
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(characters=2)), image_client)

        world = await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert world.concept_image is not None
        assert world.character_visuals == (None,) * 6
        assert world.scenario_visuals == (None,) * 3
        assert world.narrative
        assert orchestrator.is_loading is False
        assert orchestrator.progress.state(CONCEPT, 0).failed is False
        assert orchestrator.progress.state(CHARACTER, 0) == finished_state(failed=True)
        assert not any(
            state.loading for states in orchestrator.progress.snapshot().values() for state in states
        )


class TestFailures:
    """Text failures abort the run and leave the orchestrator consistent."""

    @pytest.mark.asyncio
    async def test_narrative_failure_propagates(self):
        def respond(request):
            raise UpstreamError("API request failed with status 500", status_code=500)

        text_client = make_text_client(respond)
        image_client = make_image_client()
        orchestrator, _ = make_orchestrator(text_client, image_client)
        orchestrator.progress.update(CONCEPT, 0, LOADING)

        with pytest.raises(UpstreamError):
            await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert orchestrator.progress.is_idle
        assert orchestrator.is_loading is False
        assert "500" in orchestrator.last_error
        assert text_client.send.await_count == 1
        image_client.try_generate_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_credential(self):
        text_client = make_text_client(scripted_text(), has_credential=False)
        orchestrator, _ = make_orchestrator(text_client)

        with pytest.raises(MissingCredentialError):
            await orchestrator.build_world(IDEA, WORLD_TYPE)

        text_client.send.assert_not_awaited()
        assert orchestrator.last_error == MISSING_CREDENTIAL_MESSAGE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("idea, world_type", [("", WORLD_TYPE), ("   ", WORLD_TYPE), (IDEA, " ")])
    async def test_blank_input_rejected(self, idea, world_type):
        text_client = make_text_client(scripted_text())
        orchestrator, _ = make_orchestrator(text_client)

        with pytest.raises(ValueError):
            await orchestrator.build_world(idea, world_type)

        text_client.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stage_callbacks(self):
        stages = []

        def respond(request):
            if request.structured_schema is IDEAS_SCHEMA:
                raise UpstreamError("API request failed with status 503", status_code=503)
            return scripted_text()(request)

        orchestrator, _ = make_orchestrator(make_text_client(respond))

        with pytest.raises(UpstreamError):
            await orchestrator.build_world(IDEA, WORLD_TYPE, progress_callback=lambda stage, payload: stages.append(stage))

        assert stages == [
            "pipeline:started",
            "narrative:generating",
            "narrative:generated",
            "ideas:generating",
            "pipeline:failed",
        ]


class TestMalformedStructuredResults:
    @pytest.mark.asyncio
    async def test_non_list_result_becomes_empty(self):
        overrides = {"ideas": PlainText(text="Sorry, here are some ideas...")}
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(overrides=overrides)))

        world = await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        assert world.ideas == ()
        assert len(world.customizations) == 1

    @pytest.mark.asyncio
    async def test_non_mapping_records_dropped(self):
        records = ("junk", 42, {"name": "Ash", "description": "Dives.", "role": "Scavenger"})
        overrides = {"characters": StructuredList(records=records)}
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(overrides=overrides)))

        world = await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        assert [character.name for character in world.characters] == ["Ash"]

    @pytest.mark.asyncio
    async def test_lists_are_capped(self):
        ideas = [{"title": f"Idea {index}", "synopsis": "..."} for index in range(9)]
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text(characters=9, ideas=ideas)))

        world = await orchestrator.build_world(IDEA, WORLD_TYPE, include_visuals=False)

        assert len(world.ideas) == 5
        assert len(world.characters) == 6


class TestRunOwnership:
    def test_stale_run_updates_are_dropped(self):
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text()))
        orchestrator._run_counter = 2

        orchestrator._update_slot(1, CONCEPT, 0, LOADING)
        assert orchestrator.progress.is_idle

        orchestrator._update_slot(2, CONCEPT, 0, LOADING)
        assert orchestrator.progress.state(CONCEPT, 0) == LOADING

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self):
        text_client = make_text_client(scripted_text())

        image_client = make_image_client()

        async with WorldOrchestrator(text_client=text_client, image_client=image_client):
            pass

        text_client.transport.aclose.assert_awaited_once()
        image_client.transport.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shared_transport_closed_once(self):
        text_client = make_text_client(scripted_text())
        image_client = ImageClient(text_client=text_client)

        await WorldOrchestrator(text_client=text_client, image_client=image_client).aclose()

        assert image_client.transport is text_client.transport
        text_client.transport.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_listener_error_during_reset_clears_loading(self):
        orchestrator, _ = make_orchestrator(make_text_client(scripted_text()))
        orchestrator.progress.update(CONCEPT, 0, LOADING)

        def broken_listener(event):
            raise RuntimeError("listener exploded")

        orchestrator.progress.subscribe(broken_listener)

        with pytest.raises(RuntimeError):
            await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert orchestrator.is_loading is False
        assert orchestrator.last_error == "listener exploded"


class TestEndToEnd:
    """A full run through the real clients against the fake endpoint."""

    @staticmethod
    def _on_generate(body):
        config = body["generationConfig"]
        prompt = prompt_of(body)
        if "responseSchema" in config:
            fields = config["responseSchema"]["items"]["propertyOrdering"]
            if "synopsis" in fields:
                records = [{"title": f"Idea {index}", "synopsis": "A tale."} for index in range(5)]
            elif "name" in fields:
                records = [
                    {"name": f"Survivor {index}", "description": "Breathes through a filter.", "role": "Diver"}
                    for index in range(8)
                ]
            else:
                records = [{"title": "Storms", "description": "Add acid rain."}]
            return text_response(json.dumps(records))
        if prompt.startswith("Based on this image generation prompt"):
            return text_response("**Composition:** a low angle over the haze.")
        if "regions/areas" in prompt:
            return text_response(REGIONS)
        return text_response(NARRATIVE)

    @staticmethod
    def _on_predict(body):
        if body["instances"]["prompt"].startswith("Environmental concept art"):
            return httpx.Response(500, text="internal")
        return image_response("aW1hZ2U=")

    @pytest.mark.asyncio
    async def test_full_world(self, make_transport):
        fake = FakeGemini(on_generate=self._on_generate, on_predict=self._on_predict)
        text_client = GenerationClient(transport=make_transport(fake))
        sleep = AsyncMock()
        orchestrator = WorldOrchestrator(
            text_client=text_client,
            image_client=ImageClient(text_client=text_client),
            sleep=sleep,
        )

        world = await orchestrator.build_world(IDEA, WORLD_TYPE)

        assert len(world.ideas) == 5
        assert len(world.characters) == 6
        assert world.concept_image == GeneratedImage(kind=CONCEPT, image_base64="aW1hZ2U=")
        assert all(isinstance(visual, GeneratedImage) for visual in world.character_visuals)
        assert all(isinstance(visual, ImageDescription) for visual in world.scenario_visuals)
        assert world.scenario_visuals[0].text == "Composition: a low angle over the haze."
        assert orchestrator.progress.state(SCENARIO, 0).failed is True
        assert orchestrator.progress.state(CHARACTER, 5).failed is False
        assert len(fake.bodies("predict")) == 10
        assert sleep.await_count == 9
        assert IDEA in prompt_of(fake.bodies("generateContent")[0])
