"""
Post-processing utilities for segmentation masks.

This module converts segmentation masks returned by the remote model into
normalized room boundaries, and renders room overlays for export.
"""

import base64
import io
import logging
from typing import Any, Iterable, List, Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageColor

from .models import RoomBoundary, RoomDetection, RoomTypeDefinition, round_confidence
from .room_types import DEFAULT_ROOM_COLOR, get_room_color, label_to_room_type

log = logging.getLogger(__name__)

MIN_EXTENT = 0.05
MIN_CONFIDENCE = 0.10
MAX_CONFIDENCE = 0.99

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def mask_to_png_bytes(mask: Any) -> Optional[bytes]:
    """
    Normalize a mask from a segmentation backend to PNG bytes.

    Args:
        mask: PNG bytes, a base64 string, a PNG data URL or a PIL image

    Returns:
        PNG-encoded bytes, or None if the mask is empty

    Raises:
        TypeError: If the mask is of an unsupported type
        ValueError: If a string mask is not valid base64
    """
    if mask is None:
        return None
    if isinstance(mask, Image.Image):
        buffer = io.BytesIO()
        mask.save(buffer, format="PNG")
        return buffer.getvalue()
    if isinstance(mask, (bytes, bytearray)):
        return bytes(mask) or None
    if isinstance(mask, str):
        if mask.startswith(PNG_DATA_URL_PREFIX):
            mask = mask[len(PNG_DATA_URL_PREFIX):]
        return base64.b64decode(mask) or None
    raise TypeError(f"Unsupported mask type: {type(mask).__name__}")


def decode_mask_alpha(mask_bytes: bytes) -> np.ndarray:
    """
    Decode a PNG mask and return its alpha plane.

    Images without an alpha channel decode as fully opaque.

    Args:
        mask_bytes: PNG-encoded image

    Returns:
        (H, W) uint8 array of alpha values
    """
    with Image.open(io.BytesIO(mask_bytes), formats=["PNG"]) as image:
        rgba = np.asarray(image.convert("RGBA"))
    return rgba[:, :, 3]


def alpha_bounding_box(alpha: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """
    Tightest box around pixels with non-zero alpha.

    Returns:
        (x_min, y_min, x_max, y_max) in pixels, inclusive, or None if empty
    """
    ys, xs = np.nonzero(alpha)
    if xs.size == 0:
        return None
    return int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())


def mask_to_boundary(
    mask_bytes: bytes,
    label: str,
    score: float,
    page_index: int,
    ordinal: int,
    custom_types: Iterable[RoomTypeDefinition] = (),
) -> Optional[RoomDetection]:
    """
    Convert a segmentation mask to a room detection.

    Args:
        mask_bytes: PNG-encoded mask; foreground is any pixel with alpha > 0
        label: Free-text label from the model
        score: Model confidence, clamped to [0.10, 0.99]
        page_index: Index of the page the mask belongs to
        ordinal: Position of the segment in the model response
        custom_types: User-defined room types for the color lookup

    Returns:
        RoomDetection, or None if the mask is empty or cannot be decoded
    """
    try:
        alpha = decode_mask_alpha(mask_bytes)
    # Pillow raises SyntaxError for some corrupt PNG chunks, and
    # DecompressionBombError when the header declares an oversized image
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        log.error("Failed to decode mask %d on page %d: %s", ordinal, page_index, e)
        return None

    bbox = alpha_bounding_box(alpha)
    if bbox is None:
        return None

    height, width = alpha.shape
    x_min, y_min, x_max, y_max = bbox

    box_width = max((x_max - x_min) / width, MIN_EXTENT)
    box_height = max((y_max - y_min) / height, MIN_EXTENT)
    # The size floor can push the box past the page edge; shift it back
    x = min(x_min / width, 1 - box_width)
    y = min(y_min / height, 1 - box_height)

    room_type = label_to_room_type(label)
    confidence = min(max(score, MIN_CONFIDENCE), MAX_CONFIDENCE)

    return RoomDetection(
        id=f"hf-room-{page_index}-{ordinal}",
        label=room_type,
        type=room_type,
        confidence=round_confidence(confidence),
        boundary=RoomBoundary(x=x, y=y, width=box_width, height=box_height),
        color=get_room_color(room_type, custom_types),
    )


def color_to_rgb(color: str) -> Tuple[int, int, int]:
    """
    Parse a CSS color string ("#RGB", "#RRGGBB", "red", "rgb(...)", ...).

    Unrecognized colors are drawn in the neutral room color.
    """
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        log.warning("Unrecognized room color %r, using %s", color, DEFAULT_ROOM_COLOR)
        rgb = ImageColor.getrgb(DEFAULT_ROOM_COLOR)
    return rgb[:3]


def boundary_to_pixels(
    boundary: RoomBoundary,
    width: int,
    height: int,
) -> Tuple[int, int, int, int]:
    """Map a normalized boundary to clipped pixel corners (x1, y1, x2, y2)."""
    x1 = int(np.clip(round(boundary.x * width), 0, width - 1))
    y1 = int(np.clip(round(boundary.y * height), 0, height - 1))
    x2 = int(np.clip(round((boundary.x + boundary.width) * width), 0, width - 1))
    y2 = int(np.clip(round((boundary.y + boundary.height) * height), 0, height - 1))
    return x1, y1, x2, y2


def render_room_overlay(
    image: np.ndarray,
    rooms: List[RoomDetection],
    alpha: float = 0.4,
    show_labels: bool = True,
) -> np.ndarray:
    """
    Draw room boundaries on a page image.

    Args:
        image: Page image (H, W, 3) in RGB
        rooms: Room detections for the page
        alpha: Transparency of the filled overlay
        show_labels: Whether to draw each room's label

    Returns:
        Image with room overlays
    """
    image = np.ascontiguousarray(image, dtype=np.uint8)
    height, width = image.shape[:2]
    overlay = image.copy()
    colors = [color_to_rgb(room.color) for room in rooms]

    for room, color in zip(rooms, colors):
        x1, y1, x2, y2 = boundary_to_pixels(room.boundary, width, height)
        cv2.rectangle(overlay, (x1, y1), (x2, y2), color, -1)

    result = cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0)

    # Outlines and labels stay opaque
    for room, color in zip(rooms, colors):
        x1, y1, x2, y2 = boundary_to_pixels(room.boundary, width, height)
        cv2.rectangle(result, (x1, y1), (x2, y2), color, 2)

        if show_labels:
            text = f"{room.label} {round(room.confidence * 100)}%"
            origin = (x1 + 4, min(y1 + 16, y2))
            cv2.putText(
                result, text, origin,
                cv2.FONT_HERSHEY_SIMPLEX, 0.45, (255, 255, 255), 2
            )
            cv2.putText(
                result, text, origin,
                cv2.FONT_HERSHEY_SIMPLEX, 0.45, (0, 0, 0), 1
            )

    return result


def save_overlay_png(image: np.ndarray, path) -> None:
    """Write an RGB overlay to a PNG file."""
    Image.fromarray(image).save(path, format="PNG")
