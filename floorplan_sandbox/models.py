"""
Data records shared by the mock detector, the mask extractor and the service.

Everything here is plain dataclasses; ``to_dict`` produces the JSON shape the
front end consumes.
"""

from dataclasses import dataclass, asdict
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ConstructionType(str, Enum):
    """Construction classification. Only biases the mock detector."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


def round_confidence(value: float) -> float:
    """Round a confidence to two decimals, ties away from zero."""
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass
class RoomTypeDefinition:
    label: str
    color: str


@dataclass
class RoomBoundary:
    """Axis-aligned box, all values as fractions of the page size."""

    x: float
    y: float
    width: float
    height: float


@dataclass
class RoomDetection:
    """A single detected (or fabricated) room on a page."""

    id: str
    label: str
    type: str
    confidence: float
    boundary: RoomBoundary
    color: str
    manual: bool = False

    def apply_edit(
        self,
        type: Optional[str] = None,
        confidence: Optional[float] = None,
        boundary: Optional[RoomBoundary] = None,
        custom_types: Iterable[RoomTypeDefinition] = (),
    ) -> "RoomDetection":
        """
        Apply a user edit in place and flag the room as a manual override.

        Args:
            type: New room-type key; the display color follows it
            confidence: New confidence value
            boundary: New normalized boundary
            custom_types: User-defined room types for the color lookup

        Returns:
            The same room, for chaining
        """
        from .room_types import get_room_color

        if type is not None:
            self.type = type
            self.color = get_room_color(type, custom_types)
        if confidence is not None:
            self.confidence = confidence
        if boundary is not None:
            self.boundary = boundary
        self.manual = True
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomDetection":
        return cls(
            id=data["id"],
            label=data["label"],
            type=data["type"],
            confidence=data["confidence"],
            boundary=RoomBoundary(**data["boundary"]),
            color=data["color"],
            manual=data.get("manual", False),
        )


@dataclass
class Segment:
    """One region returned by a segmentation backend."""

    mask: Any
    label: Optional[str] = None
    score: Optional[float] = None


@dataclass
class PageInput:
    """A page thumbnail submitted for analysis."""

    id: str
    index: int
    thumbnail: str  # data URL, e.g. "data:image/png;base64,..."


@dataclass
class AnalysisResult:
    """Detections for every analyzed page of one request."""

    rooms: Dict[str, List[RoomDetection]]
    classification: str
    fallback: bool = False
    timestamp: str = ""
    model: Optional[str] = None

    @property
    def total_rooms(self) -> int:
        return sum(len(rooms) for rooms in self.rooms.values())

    def rooms_to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            page_id: [room.to_dict() for room in rooms]
            for page_id, rooms in self.rooms.items()
        }
