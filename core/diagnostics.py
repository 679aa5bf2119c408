"""Diagnostics routines for the core subsystem."""

from __future__ import annotations

import importlib.util
from pathlib import Path

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe(log_file: Path | None = None) -> DiagnosticResult:
    """Run a core probe to validate logging readiness.

    Args:
        log_file: Optional log file whose directory must be writable.

    Returns:
        Diagnostic result indicating core readiness.
    """

    name = "core"
    from core import logging as core_logging

    if core_logging.logger is None or not core_logging.logger.handlers:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Core logger failed to initialize",
        )

    if log_file is not None:
        log_dir = log_file.expanduser().parent
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"Log directory {log_dir} not writable: {exc}",
            )

    if importlib.util.find_spec("rich") is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details="Rich logging not available (plain stream fallback)",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Rich logging enabled",
    )
