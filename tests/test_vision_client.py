"""Tests for the vision client outcome classification."""

from __future__ import annotations

import asyncio
import json
import time
from urllib import error

from vision.client import (
    RateLimited,
    VisionClient,
    VisionFailure,
    VisionRequest,
    VisionResponse,
    extract_text,
)


def _body(text: str) -> bytes:
    payload = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return json.dumps(payload).encode("utf-8")


class FakeClient(VisionClient):
    def __init__(self, responder, **kwargs) -> None:
        kwargs.setdefault("api_key", "test-key")
        super().__init__(**kwargs)
        self._responder = responder
        self.posts: list[tuple[str, dict]] = []

    def _post(self, url: str, data: bytes) -> bytes:
        self.posts.append((url, json.loads(data.decode("utf-8"))))
        return self._responder()


def _raise(exc: Exception):
    def responder():
        raise exc

    return responder


def _http_error(code: int, headers: dict | None = None) -> error.HTTPError:
    return error.HTTPError(
        "https://generativelanguage.googleapis.com",
        code,
        "error",
        headers or {},
        None,
    )


def test_success_returns_trimmed_text() -> None:
    client = FakeClient(lambda: _body("  A door ahead.\n"))

    result = asyncio.run(client.call("describe", "aGVsbG8="))

    assert result == VisionResponse(text="A door ahead.")


def test_request_carries_prompt_and_inline_jpeg() -> None:
    client = FakeClient(lambda: _body("ok"), model="test-model", temperature=0.3)

    asyncio.run(client.call("find objects", "aGVsbG8="))

    url, payload = client.posts[0]
    assert url.endswith("/test-model:generateContent?key=test-key")
    parts = payload["contents"][0]["parts"]
    assert parts[0] == {"text": "find objects"}
    assert parts[1] == {"inline_data": {"mime_type": "image/jpeg", "data": "aGVsbG8="}}
    assert payload["generationConfig"]["temperature"] == 0.3


def test_text_only_payload_has_single_part() -> None:
    payload = VisionRequest(prompt_text="hello").to_payload(temperature=0.1, max_output_tokens=64)

    assert payload["contents"][0]["parts"] == [{"text": "hello"}]
    assert payload["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 64}


def test_http_429_is_rate_limited_not_failure() -> None:
    client = FakeClient(_raise(_http_error(429, {"Retry-After": "7"})))

    result = asyncio.run(client.call("describe", "aGVsbG8="))

    assert result == RateLimited(retry_after_s=7.0)


def test_http_429_without_retry_after() -> None:
    client = FakeClient(_raise(_http_error(429)))

    result = asyncio.run(client.call("describe", "aGVsbG8="))

    assert isinstance(result, RateLimited)
    assert result.retry_after_s is None


def test_other_http_status_is_failure() -> None:
    client = FakeClient(_raise(_http_error(500)))

    assert asyncio.run(client.call("describe")) == VisionFailure("http_500")


def test_network_error_is_failure() -> None:
    client = FakeClient(_raise(error.URLError("unreachable")))

    assert asyncio.run(client.call("describe")) == VisionFailure("network_error")


def test_invalid_json_is_failure() -> None:
    client = FakeClient(lambda: b"<html>oops</html>")

    assert asyncio.run(client.call("describe")) == VisionFailure("invalid_json")


def test_missing_text_is_failure() -> None:
    client = FakeClient(lambda: json.dumps({"candidates": []}).encode("utf-8"))

    assert asyncio.run(client.call("describe")) == VisionFailure("empty_response")


def test_missing_api_key_skips_request() -> None:
    client = FakeClient(lambda: _body("unused"), api_key="")

    result = asyncio.run(client.call("describe"))

    assert result == VisionFailure("missing_api_key")
    assert client.posts == []
    assert not client.enabled


def test_untrusted_host_is_blocked() -> None:
    client = FakeClient(lambda: _body("unused"), base_url="http://example.com/models")

    result = asyncio.run(client.call("describe"))

    assert result == VisionFailure("blocked_endpoint")
    assert client.posts == []


def test_slow_response_times_out() -> None:
    def slow() -> bytes:
        time.sleep(0.3)
        return _body("too late")

    client = FakeClient(slow, timeout_s=0.05)

    assert asyncio.run(client.call("describe")) == VisionFailure("timeout")


def test_extract_text_tolerates_odd_shapes() -> None:
    assert extract_text(None) is None
    assert extract_text({"candidates": [{"content": {"parts": [{"text": "   "}]}}]}) is None
    assert extract_text({"candidates": [{"content": {"parts": ["raw"]}}]}) is None
    assert extract_text({"candidates": [{"content": {"parts": [{"text": " hi "}]}}]}) == "hi"


def test_from_config_reads_key_from_named_env(monkeypatch) -> None:
    monkeypatch.setenv("SIGHTASSIST_TEST_KEY", "abc")
    config = {"vision": {"api_key_env": "SIGHTASSIST_TEST_KEY", "timeout_s": 12}}

    client = VisionClient.from_config(config)

    assert client.enabled
    assert client.timeout_s == 12.0
