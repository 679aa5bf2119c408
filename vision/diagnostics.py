"""Diagnostics routines for the vision subsystem."""

from __future__ import annotations

import os
from typing import Any

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from vision.client import ALLOWED_OUTBOUND_HOSTS, VisionClient, _validate_outbound_endpoint


def probe(api_key: str | None = None, config: dict[str, Any] | None = None) -> DiagnosticResult:
    """Run a vision probe to validate credentials and endpoint policy.

    Args:
        api_key: Optional API key override for testing.
        config: Optional configuration; the loaded config is used otherwise.

    Returns:
        Diagnostic result indicating vision readiness.
    """

    name = "vision"
    if config is None:
        from config import ConfigController

        config = ConfigController.get_instance().get_config()

    vision_cfg = config.get("vision") or {}
    api_key_env = str(vision_cfg.get("api_key_env", "GEMINI_API_KEY"))
    resolved_key = api_key or os.getenv(api_key_env)
    if not resolved_key:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Missing {api_key_env}",
        )

    client = VisionClient.from_config(config)
    try:
        _validate_outbound_endpoint(client.endpoint_url(), ALLOWED_OUTBOUND_HOSTS)
    except RuntimeError as exc:
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=str(exc))

    if client.timeout_s > 60.0:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Vision timeout {client.timeout_s:.0f}s is long for live narration",
        )

    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Vision configuration present",
    )
