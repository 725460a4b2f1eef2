"""
Exception hierarchy shared by the Lumina Worlds generation and export layers.
"""

from __future__ import annotations


class WorldGenerationError(RuntimeError):
    """Base class for every error raised by Lumina Worlds."""


class MissingCredentialError(WorldGenerationError):
    """Raised when a run is started without a Gemini API key."""


class TransportError(WorldGenerationError):
    """The HTTP call itself failed (DNS, connection reset, timeout...)."""


class UpstreamError(WorldGenerationError):
    """
    The generation service answered, but not with something usable.

    ``status_code`` is set for non-success responses and left as ``None`` when
    the body had the wrong shape.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StructuredDecodeError(WorldGenerationError, ValueError):
    """A schema-constrained response could not be decoded as a JSON array."""


class VisualAssetFailure(WorldGenerationError):
    """A single image (or its description fallback) could not be obtained."""


class ExportError(WorldGenerationError):
    """Neither the PDF nor the plain-text export could be written."""
