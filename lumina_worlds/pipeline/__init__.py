"""
End-to-end orchestration for Lumina Worlds text and image generation.
"""

from .models import RegionSection, WorldAggregate, parse_region_sections
from .pipeline import ProgressCallback, WorldOrchestrator
from .progress import ProgressUpdated, SlotState, VisualProgress

__all__ = [
    "ProgressCallback",
    "ProgressUpdated",
    "RegionSection",
    "SlotState",
    "VisualProgress",
    "WorldAggregate",
    "WorldOrchestrator",
    "parse_region_sections",
]
