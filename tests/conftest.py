"""
Pytest configuration and fixtures for Lumina Worlds tests.

This module provides:
- Network blocking fixture to prevent accidental Gemini calls
- Environment isolation for API keys and model overrides
- Factories for mock-backed transports and ready-made world aggregates
"""

from __future__ import annotations

import socket
from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest

from lumina_worlds.common import GeminiHTTPClient
from lumina_worlds.pipeline import WorldAggregate
from lumina_worlds.text_generation import CharacterConcept, CustomizationOption, IdeaRecord

from .fakes import TEST_API_KEY

ENVIRONMENT_KEYS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_BASE_URL",
    "LUMINA_TEXT_MODEL",
    "GEMINI_TEXT_MODEL",
    "LUMINA_IMAGE_MODEL",
    "GEMINI_IMAGE_MODEL",
)


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""


def _block_socket_connect(*args, **kwargs):
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. Use httpx.MockTransport or mocks instead."
    )


@pytest.fixture(autouse=True)
def block_network():
    """
    Automatically block all outbound connections in tests.
    """
    with patch.object(socket.socket, "connect", _block_socket_connect):
        with patch.object(socket, "create_connection", _block_socket_connect):
            yield


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer API keys and model overrides out of the tests."""
    for key in ENVIRONMENT_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_transport() -> Callable[..., GeminiHTTPClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response], api_key: str | None = TEST_API_KEY):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeminiHTTPClient(api_key=api_key, http_client=http_client)

    return factory


@pytest.fixture
def make_world() -> Callable[..., WorldAggregate]:
    def factory(**overrides: Any) -> WorldAggregate:
        values: dict[str, Any] = {
            "user_idea": "floating cities above toxic clouds",
            "world_type": "Post-Apocalyptic",
            "narrative": (
                "The old world drowned beneath a sea of poison.\n\n"
                "Only the sky-cities remain, tethered to rusting pylons."
            ),
            "ideas": (
                IdeaRecord(title="Tethers", synopsis="A climbing survival game."),
                IdeaRecord(title="Below the Haze", synopsis="A novel about a diver."),
            ),
            "customizations": (
                CustomizationOption(title="Weather", description="Add acid storms."),
            ),
            "characters": (
                CharacterConcept(name="Ash", role="Scavenger", description="Dives into the clouds."),
                CharacterConcept(name="Vela", role="Pilot", description="Flies the last airship."),
            ),
            "region_text": "The Haze\nA toxic sea of cloud.\n\nSkyport\nA trading hub on stilts.",
        }
        values.update(overrides)
        return WorldAggregate(**values)

    return factory
