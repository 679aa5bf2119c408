"""Tests for the diagnostics runner and report."""

from __future__ import annotations

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from diagnostics.runner import exit_code, format_results, run_diagnostics


def _vision_ok() -> DiagnosticResult:
    return DiagnosticResult(name="vision", status=DiagnosticStatus.PASS, details="ready")


def _narration_slow() -> DiagnosticResult:
    return DiagnosticResult(name="narration", status=DiagnosticStatus.WARN, details="long grace")


def _config_broken() -> DiagnosticResult:
    raise OSError("config unreadable")


def test_raising_probe_is_reported_as_failure() -> None:
    """A probe that raises should not stop the remaining probes."""

    results = run_diagnostics([_config_broken, _vision_ok])

    assert [result.name for result in results] == ["_config_broken", "vision"]
    assert results[0].failed
    assert "config unreadable" in results[0].details
    assert exit_code(results) == 1


def test_report_lists_every_stage_with_counts() -> None:
    """The report should show each stage and a status tally."""

    report = format_results(run_diagnostics([_vision_ok, _narration_slow]))

    assert report.splitlines()[0] == "SightAssist readiness"
    assert "[PASS] vision" in report
    assert "[WARN] narration" in report
    assert report.endswith("1 passed, 1 warning(s), 0 failed")


def test_warnings_do_not_fail_the_run() -> None:
    """Only FAIL results should produce a non-zero exit code."""

    assert exit_code(run_diagnostics([_vision_ok, _narration_slow])) == 0
    assert exit_code([]) == 0
