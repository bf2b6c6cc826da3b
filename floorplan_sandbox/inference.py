"""
Floorplan room analysis module.

This module runs room detection over page thumbnails using a hosted
image-segmentation model, falling back to the deterministic mock detector
per page, and exports results as JSON.
"""

import base64
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from .config import AnalysisConfig
from .mock_detector import mock_analyze_rooms
from .models import (
    AnalysisResult,
    ConstructionType,
    PageInput,
    RoomDetection,
    RoomTypeDefinition,
    Segment,
)
from .postprocessing import mask_to_boundary, mask_to_png_bytes

log = logging.getLogger(__name__)

DEFAULT_SCORE = 0.5


class SegmentationBackend(Protocol):
    """Anything that can segment an encoded image into labelled masks."""

    def segment(self, image_bytes: bytes) -> List[Segment]:
        ...


class HuggingFaceSegmenter:
    """
    Segmentation backend backed by the Hugging Face Inference API.

    Usage:
        segmenter = HuggingFaceSegmenter("org/model", token="hf_...")
        segments = segmenter.segment(png_bytes)
    """

    def __init__(self, model_id: str, token: Optional[str] = None):
        self.model_id = model_id
        self.token = token
        self._client = None

    def _load_client(self):
        """Lazy load the inference client."""
        if self._client is not None:
            return

        from huggingface_hub import InferenceClient

        log.info("Using Hugging Face model %s", self.model_id)
        self._client = InferenceClient(model=self.model_id, token=self.token)

    def segment(self, image_bytes: bytes) -> List[Segment]:
        self._load_client()
        output = self._client.image_segmentation(image_bytes)
        return [
            Segment(mask=item.mask, label=item.label, score=item.score)
            for item in output or []
        ]


def decode_data_url(data_url: str) -> Optional[bytes]:
    """
    Extract the payload of a base64 data URL.

    Returns:
        Decoded bytes, or None if the URL carries no payload
    """
    _, _, payload = data_url.partition(",")
    if not payload:
        return None
    return base64.b64decode(payload)


class FloorplanAnalyzer:
    """
    High-level API for detecting rooms on floorplan pages.

    Usage:
        analyzer = FloorplanAnalyzer.from_config(AnalysisConfig.from_env())
        result = analyzer.analyze_pages(pages, "residential")
        analyzer.save_json(result, "rooms.json")
    """

    def __init__(
        self,
        segmenter: Optional[SegmentationBackend] = None,
        config: Optional[AnalysisConfig] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            segmenter: Segmentation backend; None means mock results only
            config: Analysis configuration
        """
        self.segmenter = segmenter
        self.config = config or AnalysisConfig()

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "FloorplanAnalyzer":
        """Build an analyzer, enabling the hosted model only when a token is set."""
        segmenter = None
        if config.token:
            segmenter = HuggingFaceSegmenter(config.model_id, config.token)
        return cls(segmenter=segmenter, config=config)

    def analyze_page(
        self,
        page: PageInput,
        custom_types: Iterable[RoomTypeDefinition] = (),
    ) -> List[RoomDetection]:
        """
        Run the segmentation backend on one page.

        Segments whose mask is missing, malformed or empty are dropped.

        Args:
            page: Page thumbnail to analyze
            custom_types: User-defined room types for the color lookup

        Returns:
            Detections extracted from the segments, possibly empty
        """
        if self.segmenter is None:
            return []

        image_bytes = decode_data_url(page.thumbnail)
        if not image_bytes:
            return []

        custom_types = list(custom_types)
        segments = self.segmenter.segment(image_bytes)

        detections = []
        for idx, segment in enumerate(segments or []):
            if segment.mask is None:
                continue
            try:
                mask_bytes = mask_to_png_bytes(segment.mask)
            except (TypeError, ValueError, OSError) as e:
                log.error("Failed to decode mask %d on page %d: %s", idx, page.index, e)
                continue
            if not mask_bytes:
                continue

            detection = mask_to_boundary(
                mask_bytes,
                segment.label if segment.label is not None else f"Region {idx + 1}",
                segment.score if segment.score is not None else DEFAULT_SCORE,
                page.index,
                idx,
                custom_types,
            )
            if detection is not None:
                detections.append(detection)

        return detections

    def analyze_pages(
        self,
        pages: List[PageInput],
        classification: Union[ConstructionType, str, None] = None,
        custom_types: Iterable[RoomTypeDefinition] = (),
    ) -> AnalysisResult:
        """
        Detect rooms on several pages, one page at a time.

        A page whose remote analysis fails or finds nothing gets mock results;
        other pages are unaffected.

        Args:
            pages: Page thumbnails to analyze
            classification: residential or commercial (config default if None)
            custom_types: User-defined room types

        Returns:
            AnalysisResult keyed by page id
        """
        construction = ConstructionType(classification or self.config.default_classification)
        custom_types = list(custom_types)
        rooms: Dict[str, List[RoomDetection]] = {}

        if self.segmenter is None:
            log.warning("No segmentation backend configured. Falling back to mock results.")
            for page in pages:
                rooms[page.id] = mock_analyze_rooms(page.index, construction, custom_types)
            return self._result(rooms, construction, fallback=True)

        for page in pages:
            try:
                detections = self.analyze_page(page, custom_types)
            except Exception:
                log.exception("Segmentation request failed for page %d", page.index)
                detections = []

            if not detections:
                log.info("Using mock results for page %d", page.index)
                detections = mock_analyze_rooms(page.index, construction, custom_types)
            rooms[page.id] = detections

        return self._result(rooms, construction, fallback=False)

    def _result(
        self,
        rooms: Dict[str, List[RoomDetection]],
        construction: ConstructionType,
        fallback: bool,
    ) -> AnalysisResult:
        return AnalysisResult(
            rooms=rooms,
            classification=construction.value,
            fallback=fallback,
            timestamp=datetime.now().isoformat(),
            model=None if fallback else self.config.model_id,
        )

    @staticmethod
    def save_json(
        result: AnalysisResult,
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> None:
        """
        Save analysis results to a JSON file.

        Args:
            result: Analysis result
            output_path: Path to output JSON file
            indent: JSON indentation
        """
        with open(output_path, 'w') as f:
            json.dump(_result_to_dict(result), f, indent=indent)

        log.info("Results saved to: %s", output_path)

    @staticmethod
    def load_json(json_path: Union[str, Path]) -> AnalysisResult:
        """
        Load analysis results from a JSON file.

        Args:
            json_path: Path to JSON file

        Returns:
            AnalysisResult
        """
        with open(json_path, 'r') as f:
            data = json.load(f)

        return _dict_to_result(data)


def _result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    """Convert AnalysisResult to dictionary."""
    data: Dict[str, Any] = {"rooms": result.rooms_to_dict()}
    if result.fallback:
        data["fallback"] = True
    data["metadata"] = {
        "classification": result.classification,
        "total_rooms": result.total_rooms,
        "timestamp": result.timestamp,
        "model": result.model,
    }
    return data


def _dict_to_result(data: Dict[str, Any]) -> AnalysisResult:
    """Convert dictionary to AnalysisResult."""
    metadata = data.get("metadata", {})
    rooms = {
        page_id: [RoomDetection.from_dict(room) for room in page_rooms]
        for page_id, page_rooms in data["rooms"].items()
    }

    return AnalysisResult(
        rooms=rooms,
        classification=metadata.get("classification", ConstructionType.RESIDENTIAL.value),
        fallback=data.get("fallback", False),
        timestamp=metadata.get("timestamp", ""),
        model=metadata.get("model"),
    )
