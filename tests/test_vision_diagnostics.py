"""Tests for vision diagnostics."""

from __future__ import annotations

from config.controller import apply_defaults
from diagnostics.models import DiagnosticStatus
from vision.diagnostics import probe


def test_vision_probe_offline_pass() -> None:
    """Vision probe should pass with a provided API key."""

    result = probe(api_key="test-key", config=apply_defaults({}))
    assert result.status is DiagnosticStatus.PASS


def test_vision_probe_offline_missing_key(monkeypatch) -> None:
    """Vision probe should fail when no key is provided."""

    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    result = probe(api_key=None, config=apply_defaults({}))
    assert result.status is DiagnosticStatus.FAIL


def test_vision_probe_blocks_untrusted_host(monkeypatch) -> None:
    """Vision probe should fail for endpoints outside the allowlist."""

    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    config = apply_defaults({"vision": {"base_url": "https://example.com/models"}})
    result = probe(config=config)
    assert result.status is DiagnosticStatus.FAIL


def test_vision_probe_warns_on_long_timeout() -> None:
    """Vision probe should warn when the timeout is too long for live use."""

    config = apply_defaults({"vision": {"timeout_s": 120}})
    result = probe(api_key="test-key", config=config)
    assert result.status is DiagnosticStatus.WARN
