"""Tests for the scene, text, and safety assist flows."""

from __future__ import annotations

import asyncio

from services.assist import (
    OCR_PROMPT,
    SAFETY_NO_ANSWER,
    SAFETY_NO_FRAME,
    SAFETY_PROMPT,
    SCENE_NO_ANSWER,
    SCENE_NO_FRAME,
    SCENE_PROMPT,
    AssistService,
)
from vision.client import RateLimited, VisionClient, VisionFailure, VisionResponse


class FakeClient(VisionClient):
    def __init__(self, result) -> None:
        super().__init__(api_key="test-key")
        self._result = result
        self.prompts: list[str] = []

    async def call(self, prompt_text, image_base64=None):
        self.prompts.append(prompt_text)
        return self._result


def test_scene_description_is_spoken_verbatim() -> None:
    client = FakeClient(VisionResponse(text="You are in a hallway. There is a door ahead."))

    result = asyncio.run(AssistService(client).describe_scene(b"jpeg"))

    assert result == "You are in a hallway. There is a door ahead."
    assert client.prompts == [SCENE_PROMPT]


def test_missing_frame_skips_the_call() -> None:
    client = FakeClient(VisionResponse(text="unused"))
    service = AssistService(client)

    assert asyncio.run(service.describe_scene(None)) == SCENE_NO_FRAME
    assert asyncio.run(service.assess_safety(None)) == SAFETY_NO_FRAME
    assert client.prompts == []


def test_failure_becomes_fallback_phrase() -> None:
    service = AssistService(FakeClient(VisionFailure("timeout")))

    assert asyncio.run(service.describe_scene(b"jpeg")) == SCENE_NO_ANSWER
    assert asyncio.run(service.assess_safety(b"jpeg")) == SAFETY_NO_ANSWER
    assert asyncio.run(service.read_text(b"jpeg")) == ""


def test_rate_limited_is_returned_to_caller() -> None:
    limited = RateLimited(retry_after_s=4.0)
    service = AssistService(FakeClient(limited))

    assert asyncio.run(service.describe_scene(b"jpeg")) is limited
    assert asyncio.run(service.assess_safety(b"jpeg")) is limited
    assert asyncio.run(service.read_text(b"jpeg")) is limited


def test_read_text_maps_no_text_marker_to_empty() -> None:
    client = FakeClient(VisionResponse(text="NO_TEXT"))

    assert asyncio.run(AssistService(client).read_text(b"jpeg")) == ""
    assert client.prompts == [OCR_PROMPT]
    assert asyncio.run(AssistService(FakeClient(VisionResponse(text="No text"))).read_text(b"jpeg")) == ""


def test_read_text_returns_transcription() -> None:
    client = FakeClient(VisionResponse(text="EXIT. Platform 2"))

    assert asyncio.run(AssistService(client).read_text(b"jpeg")) == "EXIT. Platform 2"


def test_safety_uses_safety_prompt() -> None:
    client = FakeClient(VisionResponse(text="Path is clear. You may continue forward with caution."))

    result = asyncio.run(AssistService(client).assess_safety(b"jpeg"))

    assert result.startswith("Path is clear")
    assert client.prompts == [SAFETY_PROMPT]
