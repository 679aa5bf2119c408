"""Vision package exports."""

from vision.client import RateLimited, VisionClient, VisionFailure, VisionRequest, VisionResponse, VisionResult
from vision.detections import BoundingBox, Detection, Position
from vision.detector import ObjectDetector
from vision.frame_gate import FrameGate, FrameGateConfig, FrameThrottleState
from vision.images import Frame, frame_to_base64
from vision.parsing import extract_detections
from vision.prioritizer import IMPORTANT_CLASSES, Prioritizer, PrioritizerConfig, estimate_distance, summarize

__all__ = [
    "BoundingBox",
    "Detection",
    "Frame",
    "FrameGate",
    "FrameGateConfig",
    "FrameThrottleState",
    "IMPORTANT_CLASSES",
    "ObjectDetector",
    "Position",
    "Prioritizer",
    "PrioritizerConfig",
    "RateLimited",
    "VisionClient",
    "VisionFailure",
    "VisionRequest",
    "VisionResponse",
    "VisionResult",
    "estimate_distance",
    "extract_detections",
    "frame_to_base64",
    "summarize",
]
