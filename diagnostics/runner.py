"""Run readiness probes and render the report."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from core.logging import logger as LOGGER
from diagnostics.models import DiagnosticProbe, DiagnosticResult, DiagnosticStatus


REPORT_WIDTH = 60


def format_results(results: Sequence[DiagnosticResult]) -> str:
    """Return the report printed by ``--diagnostics``."""

    counts = Counter(result.status for result in results)
    lines = ["SightAssist readiness", "=" * REPORT_WIDTH]
    name_width = max((len(result.name) for result in results), default=0)
    for result in results:
        lines.append(f"[{result.status.value}] {result.name:<{name_width}}  {result.details}")
    lines.append("=" * REPORT_WIDTH)
    lines.append(
        f"{counts[DiagnosticStatus.PASS]} passed, "
        f"{counts[DiagnosticStatus.WARN]} warning(s), "
        f"{counts[DiagnosticStatus.FAIL]} failed"
    )
    return "\n".join(lines)


def run_diagnostics(probes: Iterable[DiagnosticProbe]) -> list[DiagnosticResult]:
    """Run each probe; a probe that raises is reported as FAIL."""

    results: list[DiagnosticResult] = []
    for probe in probes:
        try:
            result = probe()
        except Exception as exc:  # noqa: BLE001 - remaining stages must still be checked
            LOGGER.exception("[Diagnostics] probe %s raised", probe)
            result = DiagnosticResult(
                name=getattr(probe, "__name__", "unknown_probe"),
                status=DiagnosticStatus.FAIL,
                details=f"Probe raised exception: {exc}",
            )
        results.append(result)
    return results


def exit_code(results: Iterable[DiagnosticResult]) -> int:
    """Return ``1`` when any stage failed, else ``0``."""

    return 1 if any(result.failed for result in results) else 0
