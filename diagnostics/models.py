"""Result types shared by the SightAssist readiness probes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class DiagnosticStatus(str, Enum):
    """Outcome of one readiness check."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


@dataclass(frozen=True)
class DiagnosticResult:
    """Result for one pipeline stage (config, core, vision, narration)."""

    name: str
    status: DiagnosticStatus
    details: str

    @property
    def failed(self) -> bool:
        return self.status is DiagnosticStatus.FAIL


DiagnosticProbe = Callable[[], DiagnosticResult]
