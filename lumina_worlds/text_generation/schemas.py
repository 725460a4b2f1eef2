"""
Structured-output schemas and request/result value types for text generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class ListSchema:
    """
    An ``ARRAY`` of ``OBJECT`` whose properties are all ``STRING``.

    ``fields`` doubles as the ``propertyOrdering`` sent to the model.
    """

    fields: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.fields:
            raise ValueError("ListSchema requires at least one field.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {name: {"type": "STRING"} for name in self.fields},
                "propertyOrdering": list(self.fields),
            },
        }


IDEAS_SCHEMA = ListSchema(fields=("title", "synopsis"))
CUSTOMIZATION_SCHEMA = ListSchema(fields=("title", "description"))
CHARACTERS_SCHEMA = ListSchema(fields=("name", "description", "role"))


@dataclass(frozen=True)
class GenerationRequest:
    """A single prompt, optionally paired with a structured-output schema."""

    prompt_text: str
    structured_schema: ListSchema | None = None


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class StructuredList:
    records: tuple[Any, ...] = field(default_factory=tuple)


GenerationResult = Union[PlainText, StructuredList]


def records_or_empty(result: GenerationResult) -> list[Mapping[str, Any]]:
    """
    Return the JSON objects of a structured result, or ``[]`` for anything else.
    """
    if not isinstance(result, StructuredList):
        return []
    return [record for record in result.records if isinstance(record, Mapping)]


def result_text(result: GenerationResult) -> str:
    """Return the text of a plain result; structured results have none."""
    if isinstance(result, PlainText):
        return result.text
    return ""
