"""Tests for the object detection flow."""

from __future__ import annotations

import asyncio

from vision.client import RateLimited, VisionClient, VisionFailure, VisionResponse
from vision.detections import Position
from vision.detector import DETECTION_PROMPT, ObjectDetector


class FakeClient(VisionClient):
    def __init__(self, result) -> None:
        super().__init__(api_key="test-key")
        self._result = result
        self.calls: list[tuple[str, str | None]] = []

    async def call(self, prompt_text, image_base64=None):
        self.calls.append((prompt_text, image_base64))
        return self._result


def test_detect_parses_model_reply() -> None:
    reply = 'Sure! [{"label":"person","position":"center","distance":8}] Hope this helps.'
    client = FakeClient(VisionResponse(text=reply))

    detections = asyncio.run(ObjectDetector(client).detect(b"\xff\xd8jpeg"))

    assert [d.label for d in detections] == ["person"]
    assert detections[0].position is Position.CENTER
    assert detections[0].distance == 8.0
    assert client.calls[0][0] == DETECTION_PROMPT
    assert client.calls[0][1]


def test_detect_without_frame_skips_call() -> None:
    client = FakeClient(VisionResponse(text="[]"))

    assert asyncio.run(ObjectDetector(client).detect(None)) == []
    assert client.calls == []


def test_detect_failure_yields_no_detections() -> None:
    client = FakeClient(VisionFailure("http_500"))

    assert asyncio.run(ObjectDetector(client).detect(b"jpeg")) == []


def test_detect_passes_rate_limit_through() -> None:
    limited = RateLimited(retry_after_s=None)
    client = FakeClient(limited)

    assert asyncio.run(ObjectDetector(client).detect(b"jpeg")) is limited
