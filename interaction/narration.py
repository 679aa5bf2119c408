"""Single-flight narration with interrupt and safety-timeout handling."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any

from core.logging import clip, logger
from interaction.haptics import HapticsDriver, NullHapticsDriver
from interaction.speech import SpeechEngine, SpeechOptions, SpeechOutcome


class NarrationPhase(str, Enum):
    """Narration channel phases."""

    IDLE = "idle"
    SPEAKING = "speaking"


@dataclass
class NarrationState:
    """Shared speaking flag; at most one utterance holds it."""

    speaking: bool = False


@dataclass(frozen=True)
class NarrationConfig:
    """Timing and voice parameters for narration."""

    grace_s: float = 0.05
    safety_timeout_s: float = 10.0
    rate: float = 0.95
    pitch: float = 1.0
    busy_policy: str = "queue"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "NarrationConfig":
        narration_cfg = config.get("narration") or {}
        busy_policy = str(narration_cfg.get("busy_policy", "queue")).strip().lower()
        return cls(
            grace_s=int(narration_cfg.get("grace_ms", 50)) / 1000.0,
            safety_timeout_s=float(narration_cfg.get("safety_timeout_s", 10.0)),
            rate=float(narration_cfg.get("rate", 0.95)),
            pitch=float(narration_cfg.get("pitch", 1.0)),
            busy_policy=busy_policy if busy_policy in {"queue", "drop"} else "queue",
        )


class _Utterance:
    __slots__ = ("text", "future")

    def __init__(self, text: str, future: asyncio.Future[SpeechOutcome]) -> None:
        self.text = text
        self.future = future


class NarrationController:
    """Drive the speech engine so that only one utterance is ever active.

    ``speak(..., interrupt=True)`` stops the current utterance, waits a short
    grace period for the engine to settle, then speaks. The channel stays
    reserved during that pause: queued callers keep waiting and only the newest
    interrupt goes on to speak. A non-interrupting call made while speaking
    either waits for the channel (``queue``) or is skipped (``drop``). Every
    utterance releases the channel when it ends, whether by completion, stop,
    engine error or the safety timeout.
    """

    def __init__(
        self,
        engine: SpeechEngine,
        haptics: HapticsDriver | None = None,
        *,
        config: NarrationConfig | None = None,
        state: NarrationState | None = None,
    ) -> None:
        self._engine = engine
        self._haptics = haptics or NullHapticsDriver()
        self.config = config or NarrationConfig()
        self.state = state if state is not None else NarrationState()
        self._current: _Utterance | None = None
        self._idle_waiters: list[asyncio.Future[None]] = []
        self._reservation: object | None = None

    @property
    def phase(self) -> NarrationPhase:
        return NarrationPhase.SPEAKING if self.state.speaking else NarrationPhase.IDLE

    @property
    def speaking(self) -> bool:
        return self.state.speaking

    def stop(self) -> None:
        """Halt any utterance, cancel a pending interrupt and force the channel idle."""

        try:
            self._engine.stop()
        except Exception:
            logger.exception("[Narration] speech engine stop failed")

        current = self._current
        if current is not None:
            logger.debug("[Narration] stopped %r", clip(current.text, 40))
            self._resolve(current, SpeechOutcome.STOPPED)
        self._current = None
        self._reservation = None
        self.state.speaking = False
        self._wake_idle_waiters()

    async def speak(self, text: str, *, interrupt: bool = False) -> SpeechOutcome:
        """Speak ``text`` and return once the utterance has ended."""

        text = (text or "").strip()
        if not text:
            return SpeechOutcome.SKIPPED

        if interrupt:
            if self.state.speaking or self._reservation is not None:
                if not await self._interrupt():
                    logger.debug("[Narration] superseded %r", clip(text, 40))
                    return SpeechOutcome.SKIPPED
        else:
            while self.state.speaking or self._reservation is not None:
                if self.config.busy_policy == "drop":
                    logger.info("[Narration] busy; dropping %r", clip(text, 40))
                    return SpeechOutcome.SKIPPED
                await self._wait_until_idle()

        loop = asyncio.get_running_loop()
        utterance = _Utterance(text, loop.create_future())
        self._current = utterance
        self.state.speaking = True
        try:
            await self._pulse()
            if utterance.future.done():
                return utterance.future.result()
            return await self._run_engine(utterance, loop)
        finally:
            self._release(utterance)

    async def _interrupt(self) -> bool:
        """Stop the channel and hold it through the grace period.

        Returns ``False`` when a newer interrupt or ``stop()`` took the
        reservation while this one was waiting.
        """

        self.stop()
        reservation = object()
        self._reservation = reservation
        try:
            await asyncio.sleep(self.config.grace_s)
        except asyncio.CancelledError:
            if self._reservation is reservation:
                self._reservation = None
                self._wake_idle_waiters()
            raise
        if self._reservation is not reservation:
            return False
        self._reservation = None
        return True

    async def _pulse(self) -> None:
        try:
            await self._haptics.pulse()
        except Exception:
            logger.warning("[Narration] haptic pulse failed", exc_info=True)

    async def _run_engine(
        self,
        utterance: _Utterance,
        loop: asyncio.AbstractEventLoop,
    ) -> SpeechOutcome:
        def on_finished(outcome: SpeechOutcome) -> None:
            try:
                loop.call_soon_threadsafe(self._resolve, utterance, outcome)
            except RuntimeError:
                logger.debug("[Narration] completion arrived after loop shutdown")

        options = SpeechOptions(rate=self.config.rate, pitch=self.config.pitch)
        try:
            self._engine.start(utterance.text, options, on_finished)
        except Exception:
            logger.exception("[Narration] speech engine failed")
            self._resolve(utterance, SpeechOutcome.ERROR)

        try:
            return await asyncio.wait_for(
                asyncio.shield(utterance.future),
                timeout=self.config.safety_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "[Narration] no completion after %.1fs; releasing channel",
                self.config.safety_timeout_s,
            )
            try:
                self._engine.stop()
            except Exception:
                logger.exception("[Narration] speech engine stop failed")
            self._resolve(utterance, SpeechOutcome.TIMEOUT)
            return SpeechOutcome.TIMEOUT

    def _resolve(self, utterance: _Utterance, outcome: SpeechOutcome) -> None:
        if not utterance.future.done():
            utterance.future.set_result(outcome)

    def _release(self, utterance: _Utterance) -> None:
        self._resolve(utterance, SpeechOutcome.STOPPED)
        if self._current is not utterance:
            return
        self._current = None
        self.state.speaking = False
        self._wake_idle_waiters()

    async def _wait_until_idle(self) -> None:
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._idle_waiters.append(waiter)
        try:
            await waiter
        finally:
            if waiter in self._idle_waiters:
                self._idle_waiters.remove(waiter)

    def _wake_idle_waiters(self) -> None:
        waiters, self._idle_waiters = self._idle_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)


def build_narration_controller(
    config: dict[str, Any],
    engine: SpeechEngine,
    haptics: HapticsDriver | None = None,
) -> NarrationController:
    """Construct a controller from the ``narration`` config section."""

    return NarrationController(engine, haptics, config=NarrationConfig.from_config(config))
