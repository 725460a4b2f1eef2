"""
Common utilities shared across Lumina Worlds modules.
"""

from .errors import (
    ExportError,
    MissingCredentialError,
    StructuredDecodeError,
    TransportError,
    UpstreamError,
    VisualAssetFailure,
    WorldGenerationError,
)
from .gemini import GeminiHTTPClient, resolve_api_key
from .text_cleaning import clean_text, split_paragraphs

__all__ = [
    "ExportError",
    "GeminiHTTPClient",
    "MissingCredentialError",
    "StructuredDecodeError",
    "TransportError",
    "UpstreamError",
    "VisualAssetFailure",
    "WorldGenerationError",
    "clean_text",
    "resolve_api_key",
    "split_paragraphs",
]
