"""
Thin async HTTP helper for the Gemini REST endpoints.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping

import httpx

from .errors import TransportError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = httpx.Timeout(600.0, connect=10.0)


def resolve_api_key(api_key: str | None = None) -> str | None:
    """Return the explicit key or the first one found in the environment."""
    return api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


class GeminiHTTPClient:
    """
    Posts JSON payloads to ``{base_url}/models/{model}:{method}``.

    Network failures become :class:`TransportError`; non-success statuses and
    undecodable bodies become :class:`UpstreamError`. Nothing is retried.

    Parameters
    ----------
    api_key:
        Gemini API key. Falls back to ``GEMINI_API_KEY`` / ``GOOGLE_API_KEY``.
    base_url:
        API root. Falls back to ``GEMINI_API_BASE_URL``.
    http_client:
        Optional pre-configured :class:`httpx.AsyncClient`. Mainly useful for testing.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = resolve_api_key(api_key)
        self._base_url = (base_url or os.getenv("GEMINI_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        return self._http_client

    async def post(self, model: str, method: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Send ``payload`` and return the decoded JSON object.
        """
        url = f"{self._base_url}/models/{model}:{method}"
        try:
            response = await self._client().post(
                url,
                params={"key": self._api_key or ""},
                json=dict(payload),
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as exc:
            raise TransportError(f"Request to {model}:{method} failed: {exc}") from exc

        if not response.is_success:
            logger.debug("Gemini %s:%s returned %s: %s", model, method, response.status_code, response.text)
            raise UpstreamError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Response body is not valid JSON.") from exc

        if not isinstance(data, dict):
            raise UpstreamError("Response body is not a JSON object.")
        return data

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
