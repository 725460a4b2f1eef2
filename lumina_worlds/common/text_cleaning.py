"""
Strip lightweight Markdown artifacts from generated prose.
"""

from __future__ import annotations

import re

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"^#{1,6}\s*", re.MULTILINE), ""),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"\n{3,}"), "\n\n"),
)


def _apply_rules(text: str) -> str:
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def clean_text(raw: str | None) -> str:
    """
    Remove emphasis markers and heading hashes, collapse blank-line runs and trim.

    The rules only ever delete characters, so re-applying them until nothing
    changes terminates and makes the function idempotent.
    """
    if not raw:
        return ""

    text = str(raw)
    while True:
        cleaned = _apply_rules(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def split_paragraphs(text: str | None) -> list[str]:
    """Split on blank lines, dropping empty blocks."""
    if not text:
        return []
    return [block.strip() for block in re.split(r"\n\s*\n", text) if block.strip()]
