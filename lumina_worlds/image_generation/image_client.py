"""
Image synthesis with a description fallback, so every visual slot gets content.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Union

from lumina_worlds.common import (
    GeminiHTTPClient,
    VisualAssetFailure,
    WorldGenerationError,
    clean_text,
)
from lumina_worlds.text_generation import GenerationClient, build_image_description_prompt, result_text

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "imagen-3.0-generate-002"
PROMPT_ECHO_LENGTH = 200
SYNTHESIZED_PROMPT_LENGTH = 300


@dataclass(frozen=True)
class GeneratedImage:
    kind: str
    image_base64: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "image", "kind": self.kind, "image_base64": self.image_base64}


@dataclass(frozen=True)
class ImageDescription:
    """Art-direction text standing in for an image that could not be synthesized."""

    kind: str
    text: str
    prompt_echo: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "description",
            "kind": self.kind,
            "text": self.text,
            "prompt_echo": self.prompt_echo,
        }


ImageResult = Union[GeneratedImage, ImageDescription]
ImageAttempt = Callable[[str, str], Awaitable["ImageResult | None"]]


def image_result_from_dict(payload: Mapping[str, Any]) -> ImageResult:
    kind = str(payload.get("kind", ""))
    result_type = payload.get("type")
    if result_type == "image":
        return GeneratedImage(kind=kind, image_base64=str(payload.get("image_base64", "")))
    if result_type == "description":
        return ImageDescription(
            kind=kind,
            text=str(payload.get("text", "")),
            prompt_echo=str(payload.get("prompt_echo", "")),
        )
    raise ValueError(f"Unknown image result type: {result_type!r}")


def synthesized_description(prompt: str, kind: str) -> ImageDescription:
    """Last-resort description built from the prompt alone."""
    return ImageDescription(
        kind=kind,
        text=f"Visual concept for {kind}: {prompt[:SYNTHESIZED_PROMPT_LENGTH]}...",
        prompt_echo=prompt[:PROMPT_ECHO_LENGTH],
    )


class ImageClient:
    """
    Tries Imagen first, then a text-model art brief, then a synthesized sentence.

    Parameters
    ----------
    text_client:
        Client used for the description fallback. Shares its transport when given.
    api_key:
        Gemini API key, used only when neither ``transport`` nor ``text_client`` is given.
    model:
        Image model identifier. Falls back to ``LUMINA_IMAGE_MODEL`` then
        ``GEMINI_IMAGE_MODEL``, then ``imagen-3.0-generate-002``.
    transport:
        Optional shared :class:`GeminiHTTPClient`.
    """

    def __init__(
        self,
        *,
        text_client: GenerationClient | None = None,
        api_key: str | None = None,
        model: str | None = None,
        transport: GeminiHTTPClient | None = None,
    ) -> None:
        if transport is None:
            transport = text_client.transport if text_client is not None else GeminiHTTPClient(api_key=api_key)
        self._transport = transport
        self._text_client = text_client or GenerationClient(transport=transport)
        self._model = (
            model
            or os.getenv("LUMINA_IMAGE_MODEL")
            or os.getenv("GEMINI_IMAGE_MODEL")
            or DEFAULT_IMAGE_MODEL
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def transport(self) -> GeminiHTTPClient:
        return self._transport

    async def try_generate_image(self, prompt: str, kind: str = "concept") -> ImageResult:
        """
        Return an image for ``prompt`` or, failing that, a description. Never raises.
        """
        attempts: tuple[ImageAttempt, ...] = (self._attempt_synthesis, self._attempt_description)
        for attempt in attempts:
            result = await attempt(prompt, kind)
            if result is not None:
                return result
        return synthesized_description(prompt, kind)

    async def _attempt_synthesis(self, prompt: str, kind: str) -> ImageResult | None:
        if not self._transport.has_credential:
            logger.warning("API key not available for %s image generation.", kind)
            return None

        logger.info("Attempting to generate %s image...", kind)
        payload = {"instances": {"prompt": prompt}, "parameters": {"sampleCount": 1}}
        try:
            data = await self._transport.post(self._model, "predict", payload)
            image = _extract_image(data)
        except WorldGenerationError as exc:
            logger.warning("Image generation failed for %s, falling back to description: %s", kind, exc)
            return None

        logger.info("%s image generated successfully.", kind)
        return GeneratedImage(kind=kind, image_base64=image)

    async def _attempt_description(self, prompt: str, kind: str) -> ImageResult | None:
        try:
            result = await self._text_client.generate(build_image_description_prompt(prompt))
        except WorldGenerationError as exc:
            logger.warning("Error generating %s image description: %s", kind, exc)
            return None

        text = clean_text(result_text(result))
        if not text:
            logger.warning("Empty %s image description returned.", kind)
            return None
        return ImageDescription(kind=kind, text=text, prompt_echo=prompt[:PROMPT_ECHO_LENGTH])


def _extract_image(data: Mapping[str, Any]) -> str:
    predictions = data.get("predictions")
    if not isinstance(predictions, list) or not predictions:
        raise VisualAssetFailure("No image data in response.")

    first = predictions[0]
    encoded = first.get("bytesBase64Encoded") if isinstance(first, Mapping) else None
    if not isinstance(encoded, str) or not encoded:
        raise VisualAssetFailure("No image data in response.")
    return encoded
