"""
Export a world to PDF, degrading to plain text when layout fails.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from lumina_worlds.common import ExportError
from lumina_worlds.pipeline import WorldAggregate

from .builder import WorldPDFBuilder
from .text_export import write_world_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportOutcome:
    path: Path
    degraded: bool
    message: str

    @property
    def filename(self) -> str:
        return self.path.name


def export_filename(world_type: str, extension: str, *, today: date | None = None) -> str:
    """
    ``Post-Apocalyptic`` on 2024-05-01 becomes ``post_apocalyptic_2024-05-01.{extension}``.
    """
    slug = re.sub(r"[^a-z0-9]", "_", world_type.lower())
    stamp = (today or date.today()).isoformat()
    return f"{slug}_{stamp}.{extension.lstrip('.')}"


def export_world(
    aggregate: WorldAggregate,
    output_dir: Path | str,
    *,
    pdf_builder: WorldPDFBuilder | None = None,
    today: date | None = None,
) -> ExportOutcome:
    """
    Write ``aggregate`` to ``output_dir`` as a PDF, or as text if the PDF fails.

    Raises :class:`ExportError` only when both formats fail.
    """
    directory = Path(output_dir)
    pdf_path = directory / export_filename(aggregate.world_type, "pdf", today=today)

    try:
        builder = pdf_builder or WorldPDFBuilder()
        builder.build(aggregate, pdf_path)
    except Exception as pdf_error:
        logger.warning("PDF export failed, using text fallback: %s", pdf_error)
        pdf_path.unlink(missing_ok=True)
    else:
        return ExportOutcome(
            path=pdf_path,
            degraded=False,
            message=f'PDF exported successfully as "{pdf_path.name}"',
        )

    text_path = directory / export_filename(aggregate.world_type, "txt", today=today)
    try:
        write_world_text(aggregate, text_path)
    except OSError as exc:
        raise ExportError("Failed to export. Please try again.") from exc

    return ExportOutcome(
        path=text_path,
        degraded=True,
        message=f'World exported as text file: "{text_path.name}"',
    )
