"""Client for the remote vision-language generateContent endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import os
from typing import Any, Union
from urllib import error, request
from urllib.parse import quote, urlparse

from core.logging import clip, logger, redact_url


DEFAULT_MODEL = "gemini-2.5-flash-lite"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT_S = 25.0
IMAGE_MIME_TYPE = "image/jpeg"
ALLOWED_OUTBOUND_HOSTS = {"generativelanguage.googleapis.com"}
ALLOWED_OUTBOUND_SCHEMES = {"https"}


@dataclass(frozen=True)
class VisionRequest:
    """Prompt plus optional inline JPEG for a single call."""

    prompt_text: str
    image_base64: str | None = None

    def to_payload(self, *, temperature: float, max_output_tokens: int) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": self.prompt_text}]
        if self.image_base64:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": IMAGE_MIME_TYPE,
                        "data": self.image_base64,
                    }
                }
            )
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }


@dataclass(frozen=True)
class VisionResponse:
    """Successful call carrying the model's trimmed text."""

    text: str


@dataclass(frozen=True)
class RateLimited:
    """The service answered HTTP 429; the caller must back off."""

    retry_after_s: float | None = None


@dataclass(frozen=True)
class VisionFailure:
    """Any other outcome that produced no usable answer."""

    reason: str


VisionResult = Union[VisionResponse, RateLimited, VisionFailure]


def _validate_outbound_endpoint(url: str, allowed_hosts: set[str]) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ALLOWED_OUTBOUND_SCHEMES:
        raise RuntimeError(
            f"Blocked outbound endpoint with non-TLS scheme: {parsed.scheme or 'missing'}"
        )
    if not parsed.hostname:
        raise RuntimeError("Blocked outbound endpoint with missing hostname.")
    if parsed.hostname not in allowed_hosts:
        raise RuntimeError(f"Blocked outbound endpoint to untrusted host: {parsed.hostname}")
    if parsed.username or parsed.password:
        raise RuntimeError("Blocked outbound endpoint with embedded credentials.")


def extract_text(payload: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or ``None``."""

    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class VisionClient:
    """Send one prompt (and optionally one frame) and classify the outcome.

    The client never retries and never raises for transport or service
    problems: callers get a :class:`VisionResponse`, a :class:`RateLimited`
    marker to back off on, or a :class:`VisionFailure` to treat as no answer.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        temperature: float = 0.3,
        max_output_tokens: int = 512,
        allowed_hosts: set[str] | None = None,
    ) -> None:
        self._api_key = (api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")).strip()
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout_s = float(timeout_s)
        self._temperature = float(temperature)
        self._max_output_tokens = int(max_output_tokens)
        self._allowed_hosts = set(allowed_hosts or ALLOWED_OUTBOUND_HOSTS)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "VisionClient":
        vision_cfg = config.get("vision") or {}
        api_key_env = str(vision_cfg.get("api_key_env", "GEMINI_API_KEY"))
        return cls(
            api_key=os.getenv(api_key_env, ""),
            model=str(vision_cfg.get("model", DEFAULT_MODEL)),
            base_url=str(vision_cfg.get("base_url", DEFAULT_BASE_URL)),
            timeout_s=float(vision_cfg.get("timeout_s", DEFAULT_TIMEOUT_S)),
            temperature=float(vision_cfg.get("temperature", 0.3)),
            max_output_tokens=int(vision_cfg.get("max_output_tokens", 512)),
        )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def endpoint_url(self) -> str:
        return f"{self._base_url}/{self._model}:generateContent?key={quote(self._api_key, safe='')}"

    def build_payload(self, vision_request: VisionRequest) -> dict[str, Any]:
        return vision_request.to_payload(
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
        )

    async def call(self, prompt_text: str, image_base64: str | None = None) -> VisionResult:
        if not self._api_key:
            logger.warning("[Vision] API key missing; skipping call.")
            return VisionFailure("missing_api_key")

        url = self.endpoint_url()
        try:
            _validate_outbound_endpoint(url, self._allowed_hosts)
        except RuntimeError as exc:
            logger.warning("[Vision] %s", exc)
            return VisionFailure("blocked_endpoint")

        vision_request = VisionRequest(prompt_text=prompt_text, image_base64=image_base64)
        data = json.dumps(self.build_payload(vision_request)).encode("utf-8")
        logger.debug(
            "[Vision] POST %s image=%s prompt=%r",
            redact_url(url),
            bool(image_base64),
            clip(prompt_text, 50),
        )

        try:
            body = await asyncio.wait_for(
                asyncio.to_thread(self._post, url, data),
                timeout=self._timeout_s,
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.warning("[Vision] call timed out after %.1fs", self._timeout_s)
            return VisionFailure("timeout")
        except error.HTTPError as exc:
            return self._classify_http_error(exc)
        except error.URLError as exc:
            logger.warning("[Vision] network error: %s", exc.reason)
            return VisionFailure("network_error")
        except OSError as exc:
            logger.warning("[Vision] transport error: %s", exc)
            return VisionFailure("network_error")

        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("[Vision] response body is not JSON")
            return VisionFailure("invalid_json")

        text = extract_text(payload)
        if text is None:
            logger.warning("[Vision] response carried no text: %s", clip(json.dumps(payload), 400))
            return VisionFailure("empty_response")

        logger.debug("[Vision] response text=%r", clip(text))
        return VisionResponse(text=text)

    def _post(self, url: str, data: bytes) -> bytes:
        http_request = request.Request(
            url,
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with request.urlopen(http_request, timeout=self._timeout_s) as response:
            return response.read()

    def _classify_http_error(self, exc: error.HTTPError) -> VisionResult:
        if exc.code == 429:
            headers = exc.headers
            retry_after = _parse_retry_after(headers.get("Retry-After") if headers else None)
            logger.warning("[Vision] rate limited (retry_after=%s)", retry_after)
            return RateLimited(retry_after_s=retry_after)
        logger.warning("[Vision] API error status=%s", exc.code)
        return VisionFailure(f"http_{exc.code}")
