"""Live detection: gate each frame, narrate what changed, log to history."""

from __future__ import annotations

from core.logging import logger as LOGGER
from interaction.narration import NarrationController
from services.history import HistorySink, NullHistorySink, ScanRecord, ScanType
from vision.client import RateLimited
from vision.frame_gate import FrameGate
from vision.images import FrameLike


class LiveDetectionSession:
    """Connect a :class:`FrameGate` to a :class:`NarrationController`."""

    def __init__(
        self,
        gate: FrameGate,
        narrator: NarrationController,
        history: HistorySink | None = None,
    ) -> None:
        self._gate = gate
        self._narrator = narrator
        self._history = history or NullHistorySink()
        self.last_spoken_summary: str | None = None

    async def handle_frame(self, frame: FrameLike) -> str | RateLimited | None:
        """Process one frame; returns the spoken summary, ``RateLimited`` or ``None``."""

        result = await self._gate.admit(frame)
        if result is None or isinstance(result, RateLimited):
            return result

        self.last_spoken_summary = result
        try:
            self._history.save(ScanRecord(type=ScanType.OBJECTS, content=result))
        except Exception:
            LOGGER.warning("[Live] history sink failed", exc_info=True)
        await self._narrator.speak(result, interrupt=True)
        return result
