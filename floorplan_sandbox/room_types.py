"""
Room-type palette, label mapping and custom room-type handling.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from .models import ConstructionType, RoomTypeDefinition


BASE_ROOM_TYPES: List[RoomTypeDefinition] = [
    RoomTypeDefinition("Living Room", "#F97316"),
    RoomTypeDefinition("Kitchen", "#0EA5E9"),
    RoomTypeDefinition("Bedroom", "#A855F7"),
    RoomTypeDefinition("Bathroom", "#10B981"),
    RoomTypeDefinition("Circulation", "#F59E0B"),
    RoomTypeDefinition("Storage", "#6B7280"),
    RoomTypeDefinition("Mechanical", "#14B8A6"),
    RoomTypeDefinition("Workspace", "#EF4444"),
]

DEFAULT_ROOM_COLOR = "#94A3B8"

# Confidence multipliers for the mock detector
CONSTRUCTION_BIAS: Dict[str, Dict[str, float]] = {
    ConstructionType.RESIDENTIAL.value: {
        "Living Room": 1.1,
        "Kitchen": 1.05,
        "Bedroom": 1.2,
        "Bathroom": 1.15,
    },
    ConstructionType.COMMERCIAL.value: {
        "Workspace": 1.3,
        "Mechanical": 1.1,
        "Storage": 1.05,
        "Circulation": 1.08,
    },
}

# Ordered keyword rules; first match wins
LABEL_RULES = [
    (("living",), "Living Room"),
    (("kitchen",), "Kitchen"),
    (("bed",), "Bedroom"),
    (("bath", "rest"), "Bathroom"),
    (("storage", "closet"), "Storage"),
    (("mechanical", "utility"), "Mechanical"),
    (("office", "workspace"), "Workspace"),
    (("corridor", "hall"), "Circulation"),
]

_WORD_START = re.compile(r"(^|\s)(\w)")


def get_room_color(
    type_key: str,
    custom_types: Iterable[RoomTypeDefinition] = (),
) -> str:
    """Display color for a room type, falling back to a neutral gray."""
    for definition in BASE_ROOM_TYPES:
        if definition.label == type_key:
            return definition.color
    for definition in custom_types:
        if definition.label == type_key:
            return definition.color
    return DEFAULT_ROOM_COLOR


def label_to_room_type(label: str) -> str:
    """
    Map a free-text segmentation label to a room-type key.

    Unknown labels are title-cased word by word and returned as ad-hoc types.

    Args:
        label: Label text from the segmentation model

    Returns:
        Room-type key
    """
    normalized = label.lower()
    for keywords, room_type in LABEL_RULES:
        if any(keyword in normalized for keyword in keywords):
            return room_type
    return _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), label)


def sanitize_custom_types(raw: Optional[Iterable[Any]]) -> List[RoomTypeDefinition]:
    """
    Keep only well-formed custom room types from untrusted input.

    Accepts dicts or RoomTypeDefinition objects. Labels are stripped and
    duplicate labels keep their first occurrence.
    """
    result: List[RoomTypeDefinition] = []
    seen = set()
    for item in raw or []:
        if isinstance(item, RoomTypeDefinition):
            label, color = item.label, item.color
        elif isinstance(item, dict):
            label, color = item.get("label"), item.get("color")
        else:
            continue
        if not isinstance(label, str) or not label.strip():
            continue
        if not isinstance(color, str):
            continue
        label = label.strip()
        if label in seen:
            continue
        seen.add(label)
        result.append(RoomTypeDefinition(label, color))
    return result


def add_custom_room_type(
    custom_types: List[RoomTypeDefinition],
    label: str,
    color: str,
) -> List[RoomTypeDefinition]:
    """Return a new list with the custom type appended; blanks and duplicates are ignored."""
    label = label.strip()
    if not label or any(definition.label == label for definition in custom_types):
        return list(custom_types)
    return [*custom_types, RoomTypeDefinition(label, color)]
