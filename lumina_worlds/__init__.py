"""
Lumina Worlds package exposing world generation, orchestration, and export tooling.
"""

from .pdf_generation import ExportOutcome, WorldPDFBuilder, export_world
from .pipeline import VisualProgress, WorldAggregate, WorldOrchestrator

__all__ = [
    "ExportOutcome",
    "VisualProgress",
    "WorldAggregate",
    "WorldOrchestrator",
    "WorldPDFBuilder",
    "export_world",
]
