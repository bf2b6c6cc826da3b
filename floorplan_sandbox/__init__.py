# Room detection utilities for the floorplan sandbox
from .models import (
    ConstructionType,
    RoomTypeDefinition,
    RoomBoundary,
    RoomDetection,
    Segment,
    PageInput,
    AnalysisResult,
)
from .room_types import (
    BASE_ROOM_TYPES,
    get_room_color,
    label_to_room_type,
    sanitize_custom_types,
    add_custom_room_type,
)
from .mock_detector import seeded_random, mock_analyze_rooms
from .postprocessing import mask_to_boundary, render_room_overlay
from .inference import FloorplanAnalyzer, HuggingFaceSegmenter

__all__ = [
    "ConstructionType",
    "RoomTypeDefinition",
    "RoomBoundary",
    "RoomDetection",
    "Segment",
    "PageInput",
    "AnalysisResult",
    "BASE_ROOM_TYPES",
    "get_room_color",
    "label_to_room_type",
    "sanitize_custom_types",
    "add_custom_room_type",
    "seeded_random",
    "mock_analyze_rooms",
    "mask_to_boundary",
    "render_room_overlay",
    "FloorplanAnalyzer",
    "HuggingFaceSegmenter",
]
