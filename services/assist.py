"""On-demand assist flows: scene description, text reading, safety check."""

from __future__ import annotations

from core.logging import logger as LOGGER
from vision.client import RateLimited, VisionClient, VisionFailure
from vision.images import FrameLike, frame_to_base64


SCENE_PROMPT = """You are a visual assistant for a blind or visually impaired person. Describe what you see in this image in 2-4 concise sentences.

Guidelines:
- Start with the general setting (indoors/outdoors, type of place).
- Mention the most important objects, people, or obstacles and their approximate positions (left, right, ahead, nearby).
- Include any safety-relevant information: stairs, curbs, moving vehicles, uneven ground, open doors.
- Mention any visible text like signs, labels, or screens if relevant.
- Use simple, clear language. Speak as if guiding someone in real time.
- Do NOT say "the image shows" or "I can see". Speak directly: "You are in a hallway. There is a door ahead on your right."
"""

OCR_PROMPT = """You are an OCR assistant for a visually impaired user. Read ALL visible text in this image.

Rules:
- Transcribe the text exactly as written (preserve spelling, capitalization).
- If there are multiple blocks of text (signs, labels, screens), separate them with a period and space.
- If text is partially obscured, include what you can read and note it's partial.
- If there is NO readable text in the image, respond with exactly: NO_TEXT
- Do NOT describe the image. Do NOT add any explanation. ONLY return the text you read."""

SAFETY_PROMPT = """You are a safety assistant for a blind or visually impaired person walking forward. Analyze this image for dangers and obstacles.

Your job:
1. Determine if it is SAFE or UNSAFE to continue walking forward.
2. If UNSAFE, list each danger briefly (e.g. "car approaching from left", "stairs ahead", "low-hanging branch").
3. If SAFE, confirm there are no immediate dangers.

Rules:
- Be concise. Max 2-3 sentences.
- Prioritize: vehicles, stairs, drops, holes, poles, people on collision path, cyclists, doors, curbs, uneven ground.
- Do NOT describe the scene generally. ONLY focus on safety.
- Speak directly as if guiding someone: "Danger: car approaching from the left. Stop."
- If safe: "Path is clear. You may continue forward with caution."

Return ONLY your safety assessment. No markdown, no JSON."""

SCENE_NO_FRAME = "Unable to capture the scene."
SCENE_NO_ANSWER = "Could not describe the scene right now."
SAFETY_NO_FRAME = "Unable to capture the scene for safety check."
SAFETY_NO_ANSWER = "Could not assess safety right now."
NO_TEXT_SPOKEN = "No text detected"
NO_TEXT_MARKERS = {"no_text", "no text"}


class AssistService:
    """Single-shot flows that speak the model's text with no ranking stage.

    Each flow returns the text to speak, or :class:`RateLimited` unchanged so
    the caller can back off. Ordinary failures become a fixed phrase.
    """

    def __init__(self, client: VisionClient) -> None:
        self._client = client

    async def describe_scene(self, frame: FrameLike) -> str | RateLimited:
        return await self._ask(SCENE_PROMPT, frame, SCENE_NO_FRAME, SCENE_NO_ANSWER, "scene")

    async def assess_safety(self, frame: FrameLike) -> str | RateLimited:
        return await self._ask(SAFETY_PROMPT, frame, SAFETY_NO_FRAME, SAFETY_NO_ANSWER, "safety")

    async def read_text(self, frame: FrameLike) -> str | RateLimited:
        """Return the transcribed text, or ``""`` when nothing is readable."""

        result = await self._ask(OCR_PROMPT, frame, "", "", "ocr")
        if isinstance(result, RateLimited):
            return result
        if result.strip().lower() in NO_TEXT_MARKERS:
            return ""
        return result

    async def _ask(
        self,
        prompt: str,
        frame: FrameLike,
        no_frame_text: str,
        no_answer_text: str,
        flow: str,
    ) -> str | RateLimited:
        image_base64 = frame_to_base64(frame)
        if not image_base64:
            LOGGER.warning("[Assist] %s: no frame to send", flow)
            return no_frame_text

        result = await self._client.call(prompt, image_base64)
        if isinstance(result, RateLimited):
            return result
        if isinstance(result, VisionFailure):
            LOGGER.info("[Assist] %s unavailable (%s)", flow, result.reason)
            return no_answer_text
        return result.text.strip()
