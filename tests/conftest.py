import base64
import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from floorplan_sandbox.models import Segment


def png_bytes(array: np.ndarray) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


def png_header_only(width, height):
    """PNG with an RGBA IHDR declaring width x height and no pixel data."""
    def chunk(tag, data):
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def rgba_mask(width, height, opaque=()):
    """Transparent RGBA mask with the given (x, y) pixels made opaque."""
    array = np.zeros((height, width, 4), dtype=np.uint8)
    for x, y in opaque:
        array[y, x] = (255, 255, 255, 255)
    return array


def data_url(content: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(content).decode("ascii")


class FakeSegmenter:
    """Returns canned segments, or raises for selected page images."""

    def __init__(self, segments=None, fail_on=()):
        self.segments = segments or []
        self.fail_on = set(fail_on)
        self.calls = []

    def segment(self, image_bytes):
        self.calls.append(image_bytes)
        if image_bytes in self.fail_on:
            raise ConnectionError("model unavailable")
        return list(self.segments)


@pytest.fixture
def page_image_bytes():
    return png_bytes(np.full((40, 60, 3), 255, dtype=np.uint8))


@pytest.fixture
def room_segment():
    array = np.zeros((100, 100, 4), dtype=np.uint8)
    array[20:40, 10:60] = (0, 0, 0, 255)
    return Segment(mask=png_bytes(array), label="Kitchen Area", score=0.876)
