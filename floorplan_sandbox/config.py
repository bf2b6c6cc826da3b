"""Configuration defaults for the floorplan sandbox."""

import os
from dataclasses import dataclass
from typing import Optional

from .models import ConstructionType

DEFAULT_MODEL = "ozturkoktay/floor-plan-room-segmentation"


@dataclass
class AnalysisConfig:
    """Configuration for room analysis."""

    # Hosted segmentation model
    model_id: str = DEFAULT_MODEL
    token: Optional[str] = None

    default_classification: ConstructionType = ConstructionType.RESIDENTIAL

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        token = (
            os.environ.get("HF_ACCESS_TOKEN")
            or os.environ.get("HUGGING_FACE_TOKEN")
            or None
        )
        return cls(
            model_id=os.environ.get("HF_FLOORPLAN_MODEL", DEFAULT_MODEL),
            token=token,
        )
