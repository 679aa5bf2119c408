"""Object detection over the remote vision-language service."""

from __future__ import annotations

import time

from core.logging import logger
from vision.client import RateLimited, VisionClient, VisionFailure
from vision.detections import Detection
from vision.images import FrameLike, frame_to_base64
from vision.parsing import extract_detections


DETECTION_PROMPT = """You are an assistant for visually impaired users. Analyze this image and list the most important objects you see.

For each object, provide:
- label: what the object is (e.g. "person", "car", "door", "chair", "stairs")
- position: "left", "center", or "right" based on where it appears in the image
- distance: estimated distance in feet (1-30 range, best guess)

Prioritize:
1. Obstacles or hazards (stairs, curbs, poles, cars)
2. People
3. Doors, signs, furniture
4. Other notable objects

Return ONLY a valid JSON array (no markdown, no explanation) with AT MOST 3 objects. Ensure the JSON is complete and closed. Example:
[{"label":"person","position":"center","distance":8},{"label":"chair","position":"left","distance":4}]

If you see nothing notable, return: []"""


class ObjectDetector:
    """Frame in, detections out; rate limiting is passed through untouched."""

    def __init__(self, client: VisionClient, prompt: str = DETECTION_PROMPT) -> None:
        self._client = client
        self._prompt = prompt

    async def detect(self, frame: FrameLike) -> list[Detection] | RateLimited:
        image_base64 = frame_to_base64(frame)
        if not image_base64:
            return []

        call_ms = int(time.time() * 1000)
        result = await self._client.call(self._prompt, image_base64)
        if isinstance(result, RateLimited):
            return result
        if isinstance(result, VisionFailure):
            logger.info("[Vision] detection unavailable (%s)", result.reason)
            return []

        detections = extract_detections(result.text, call_ms=call_ms)
        logger.debug("[Vision] %d detection(s)", len(detections))
        return detections
