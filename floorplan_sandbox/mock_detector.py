"""
Deterministic mock room detector.

Used when no segmentation backend is configured or when the backend fails for
a page. Output depends only on the page index, the construction type and the
custom room types, so the same page always yields the same rooms.
"""

import math
from typing import Callable, Iterable, List, Union

from .models import (
    ConstructionType,
    RoomBoundary,
    RoomDetection,
    RoomTypeDefinition,
    round_confidence,
)
from .room_types import BASE_ROOM_TYPES, CONSTRUCTION_BIAS, get_room_color


MODULUS = 2147483647  # 2**31 - 1
MULTIPLIER = 16807

MIN_ROOMS = 3
MAX_CONFIDENCE = 0.99

ROOM_NAMES = [
    "Suite",
    "Studio",
    "Flex Space",
    "Utility",
    "Lobby",
    "Conference",
    "Breakroom",
    "Core",
]


def seeded_random(seed: int) -> Callable[[], float]:
    """
    Park-Miller minimal standard generator.

    Args:
        seed: Any integer; it is folded into [1, MODULUS - 1]

    Returns:
        Function returning uniform floats in [0, 1)
    """
    state = seed % MODULUS
    if state <= 0:
        state += MODULUS - 1

    def rand() -> float:
        nonlocal state
        state = (state * MULTIPLIER) % MODULUS
        return (state - 1) / (MODULUS - 1)

    return rand


def mock_analyze_rooms(
    page_index: int,
    classification: Union[ConstructionType, str],
    custom_types: Iterable[RoomTypeDefinition] = (),
) -> List[RoomDetection]:
    """
    Fabricate a reproducible set of room detections for a page.

    Args:
        page_index: Page index (>= 0), seeds the generator
        classification: residential or commercial
        custom_types: User-defined room types, appended to the base palette

    Returns:
        Between 3 and 8 room detections
    """
    custom_types = list(custom_types)
    rand = seeded_random(page_index + 1)
    room_count = max(MIN_ROOMS, math.floor(rand() * 6))
    definitions = BASE_ROOM_TYPES + custom_types

    if ConstructionType(classification) is ConstructionType.RESIDENTIAL:
        bias_map = CONSTRUCTION_BIAS[ConstructionType.RESIDENTIAL.value]
    else:
        bias_map = CONSTRUCTION_BIAS[ConstructionType.COMMERCIAL.value]

    rooms = []
    for idx in range(room_count):
        selected = definitions[math.floor(rand() * len(definitions))]
        confidence_base = 0.65 + rand() * 0.3
        bias = bias_map.get(selected.label, 1.0)
        confidence = min(MAX_CONFIDENCE, confidence_base * bias)

        # Draw order matters for reproducibility
        width = 0.25 + rand() * 0.45
        height = 0.2 + rand() * 0.4
        x = rand() * (1 - width)
        y = rand() * (1 - height)

        rooms.append(RoomDetection(
            id=f"room-{page_index}-{idx}",
            label=ROOM_NAMES[idx % len(ROOM_NAMES)],
            type=selected.label,
            confidence=round_confidence(confidence),
            boundary=RoomBoundary(x=x, y=y, width=width, height=height),
            color=get_room_color(selected.label, custom_types),
        ))

    return rooms
