"""Throttle and de-duplicate frames before they reach narration."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Callable

from core.logging import logger
from vision.client import RateLimited
from vision.detector import ObjectDetector
from vision.images import FrameLike
from vision.prioritizer import Prioritizer


@dataclass
class FrameThrottleState:
    """Last narrated summary and when its frame was admitted."""

    last_summary: str | None = None
    last_spoken_at: float | None = None


@dataclass(frozen=True)
class FrameGateConfig:
    """Configuration for frame admission."""

    min_interval_s: float = 1.5

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "FrameGateConfig":
        gate_cfg = config.get("frame_gate") or {}
        return cls(min_interval_s=int(gate_cfg.get("min_interval_ms", 1500)) / 1000.0)


class FrameGate:
    """Admit at most one new, changed summary per interval."""

    def __init__(
        self,
        detector: ObjectDetector,
        prioritizer: Prioritizer | None = None,
        *,
        config: FrameGateConfig | None = None,
        state: FrameThrottleState | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._detector = detector
        self._prioritizer = prioritizer or Prioritizer()
        self.config = config or FrameGateConfig()
        self.state = state if state is not None else FrameThrottleState()
        self._clock = clock
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def reset(self) -> None:
        self.state.last_summary = None
        self.state.last_spoken_at = None

    def seconds_until_open(self, now: float | None = None) -> float:
        if self.state.last_spoken_at is None:
            return 0.0
        if now is None:
            now = self._clock()
        elapsed = now - self.state.last_spoken_at
        return max(0.0, self.config.min_interval_s - elapsed)

    async def admit(self, frame: FrameLike) -> str | RateLimited | None:
        """Return a new summary to narrate, ``RateLimited``, or ``None``."""

        if self._in_flight:
            logger.debug("[FrameGate] dropping frame: vision call in flight")
            return None

        now = self._clock()
        if self.seconds_until_open(now) > 0.0:
            return None

        self._in_flight = True
        try:
            detections = await self._detector.detect(frame)
        finally:
            self._in_flight = False

        if isinstance(detections, RateLimited):
            return detections

        summary = self._prioritizer.summarize(detections)
        if not summary:
            return None
        if summary == self.state.last_summary:
            logger.debug("[FrameGate] unchanged scene: %s", summary)
            return None

        self.state.last_summary = summary
        self.state.last_spoken_at = now
        logger.info("[FrameGate] admitted: %s", summary)
        return summary
