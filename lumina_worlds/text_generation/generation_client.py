"""
Service layer for single text-generation calls against the Gemini API.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from lumina_worlds.common import GeminiHTTPClient, StructuredDecodeError, UpstreamError

from .schemas import GenerationRequest, GenerationResult, ListSchema, PlainText, StructuredList

logger = logging.getLogger(__name__)

DEFAULT_TEXT_MODEL = "gemini-2.0-flash"

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.8,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}


class GenerationClient:
    """
    Issues one ``generateContent`` request per call and decodes the result.

    Parameters
    ----------
    api_key:
        Gemini API key, used when no ``transport`` is supplied.
    model:
        Text model identifier. Falls back to ``LUMINA_TEXT_MODEL`` then
        ``GEMINI_TEXT_MODEL``, then ``gemini-2.0-flash``.
    transport:
        Optional shared :class:`GeminiHTTPClient`.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        transport: GeminiHTTPClient | None = None,
    ) -> None:
        self._transport = transport or GeminiHTTPClient(api_key=api_key)
        self._model = (
            model
            or os.getenv("LUMINA_TEXT_MODEL")
            or os.getenv("GEMINI_TEXT_MODEL")
            or DEFAULT_TEXT_MODEL
        )

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._model

    @property
    def transport(self) -> GeminiHTTPClient:
        return self._transport

    async def generate(self, prompt: str, schema: ListSchema | None = None) -> GenerationResult:
        """
        Generate text for ``prompt``; with a ``schema`` ask for a JSON array instead.

        Raises :class:`TransportError` or :class:`UpstreamError` on failure. A
        structured response that does not decode falls back to ``PlainText``.
        """
        return await self.send(GenerationRequest(prompt_text=prompt, structured_schema=schema))

    async def send(self, request: GenerationRequest) -> GenerationResult:
        generation_config = dict(GENERATION_CONFIG)
        if request.structured_schema is not None:
            generation_config["responseMimeType"] = "application/json"
            generation_config["responseSchema"] = request.structured_schema.to_dict()

        payload = {
            "contents": [{"parts": [{"text": request.prompt_text}]}],
            "generationConfig": generation_config,
        }

        data = await self._transport.post(self._model, "generateContent", payload)
        content = _extract_text(data)

        if request.structured_schema is None:
            return PlainText(text=content)

        try:
            return StructuredList(records=tuple(_decode_array(content)))
        except StructuredDecodeError as exc:
            logger.warning("Failed to parse structured response, returning raw text: %s", exc)
            return PlainText(text=content)


def _extract_text(data: dict[str, Any]) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamError("Invalid response structure from API.") from exc

    if not isinstance(text, str):
        raise UpstreamError("Response text is not a string.")
    return text


def _decode_array(content: str) -> list[Any]:
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise StructuredDecodeError(f"Response is not valid JSON: {exc}") from exc

    if not isinstance(parsed, list):
        raise StructuredDecodeError(f"Expected a JSON array, got {type(parsed).__name__}.")
    return parsed
