"""Diagnostics routines for the narration subsystem."""

from __future__ import annotations

from typing import Any

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from interaction.narration import NarrationConfig


def probe(config: dict[str, Any] | None = None) -> DiagnosticResult:
    """Check narration timing parameters.

    Args:
        config: Optional configuration; the loaded config is used otherwise.

    Returns:
        Diagnostic result indicating narration readiness.
    """

    name = "narration"
    if config is None:
        from config import ConfigController

        config = ConfigController.get_instance().get_config()

    narration = NarrationConfig.from_config(config)
    if narration.safety_timeout_s <= 0:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="narration.safety_timeout_s must be positive",
        )
    if not 0.1 <= narration.rate <= 2.0:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Unusual speech rate {narration.rate}",
        )
    if narration.grace_s > 0.5:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Interrupt grace of {narration.grace_s:.2f}s delays hazard callouts",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Narration ready (busy_policy={narration.busy_policy})",
    )
