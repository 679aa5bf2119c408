"""Detection schemas produced by the vision pipeline.

Bounding boxes are normalized to the source frame dimensions and represented as
``(x, y, width, height)`` with each value expected in the inclusive range
``[0.0, 1.0]``. Detection ids are only unique within a single vision call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Position(str, Enum):
    """Horizontal placement of a detection in the frame."""

    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True)
class BoundingBox:
    """Normalized frame region."""

    x: float
    y: float
    width: float
    height: float


# The remote service reports no geometry; detections get a centered box
# covering a fifth of the frame.
PLACEHOLDER_BBOX = BoundingBox(x=0.5, y=0.5, width=0.2, height=0.2)


@dataclass(frozen=True)
class Detection:
    """Single object detection result."""

    id: str
    label: str
    confidence: float
    bbox: BoundingBox = PLACEHOLDER_BBOX
    distance: float | None = None
    position: Position | None = None
