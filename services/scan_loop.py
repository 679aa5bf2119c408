"""Frame-producing loop with exponential backoff on rate limiting."""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from core.logging import logger
from vision.client import RateLimited
from vision.images import FrameLike


FrameHandler = Callable[[FrameLike], Awaitable[Any]]


class FrameSource(ABC):
    """Camera collaborator that hands out the latest frame."""

    @abstractmethod
    async def next_frame(self) -> FrameLike:
        """Return the newest frame, or ``None`` when none is ready."""


@dataclass(frozen=True)
class ScanLoopConfig:
    """Timing for the scan loop."""

    period_s: float = 0.5
    backoff_initial_s: float = 2.0
    backoff_max_s: float = 30.0
    backoff_multiplier: float = 2.0

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ScanLoopConfig":
        scan_cfg = config.get("scan_loop") or {}
        return cls(
            period_s=int(scan_cfg.get("period_ms", 500)) / 1000.0,
            backoff_initial_s=float(scan_cfg.get("backoff_initial_s", 2.0)),
            backoff_max_s=float(scan_cfg.get("backoff_max_s", 30.0)),
            backoff_multiplier=float(scan_cfg.get("backoff_multiplier", 2.0)),
        )


class BackoffPolicy:
    """Exponential delay that grows per consecutive rate limit."""

    def __init__(self, initial_s: float, max_s: float, multiplier: float = 2.0) -> None:
        self._initial_s = max(0.0, float(initial_s))
        self._max_s = max(self._initial_s, float(max_s))
        self._multiplier = max(1.0, float(multiplier))
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    def next_delay(self, retry_after_s: float | None = None) -> float:
        delay = self._initial_s * (self._multiplier ** self._attempts)
        self._attempts += 1
        delay = min(delay, self._max_s)
        if retry_after_s is not None:
            delay = max(delay, min(retry_after_s, self._max_s))
        return delay

    def reset(self) -> None:
        self._attempts = 0


class ScanLoop:
    """Feed frames one at a time to ``handler`` and pause on ``RateLimited``."""

    def __init__(
        self,
        source: FrameSource,
        handler: FrameHandler,
        config: ScanLoopConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._handler = handler
        self.config = config or ScanLoopConfig()
        self._backoff = BackoffPolicy(
            self.config.backoff_initial_s,
            self.config.backoff_max_s,
            self.config.backoff_multiplier,
        )
        self._sleep = sleep
        self._stop_event = asyncio.Event()
        self.frame_index = 0

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self, max_frames: int | None = None) -> None:
        self._stop_event.clear()
        logger.info("[Scan] loop started (period=%.2fs)", self.config.period_s)
        while not self._stop_event.is_set():
            if max_frames is not None and self.frame_index >= max_frames:
                break
            delay = await self.step()
            if self._stop_event.is_set():
                break
            await self._sleep(delay)
        logger.info("[Scan] loop stopped at index: %s", self.frame_index)

    async def step(self) -> float:
        """Handle one frame and return how long to wait before the next."""

        frame = await self._source.next_frame()
        if frame is None:
            return self.config.period_s

        self.frame_index += 1
        try:
            result = await self._handler(frame)
        except Exception as exc:
            logger.exception("[Scan] Error handling frame (retrying): %s", exc)
            return self.config.period_s

        if isinstance(result, RateLimited):
            delay = self._backoff.next_delay(result.retry_after_s)
            logger.warning(
                "[Scan] rate limited; backing off %.1fs (attempt %s)",
                delay,
                self._backoff.attempts,
            )
            return delay

        self._backoff.reset()
        return self.config.period_s
