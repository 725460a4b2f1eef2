"""
Document export: paginated PDF with a plain-text fallback.
"""

from .builder import DEFAULT_LAYOUT, PAGE_SIZES, PageLayoutConfig, RenderSummary, WorldPDFBuilder
from .exporter import ExportOutcome, export_filename, export_world
from .text_export import render_world_text, write_world_text

__all__ = [
    "DEFAULT_LAYOUT",
    "ExportOutcome",
    "PAGE_SIZES",
    "PageLayoutConfig",
    "RenderSummary",
    "WorldPDFBuilder",
    "export_filename",
    "export_world",
    "render_world_text",
    "write_world_text",
]
