"""Speech engine collaborator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from core.logging import log_spoken, logger


class SpeechOutcome(str, Enum):
    """How an utterance ended."""

    DONE = "done"
    STOPPED = "stopped"
    ERROR = "error"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SpeechOptions:
    """Voice parameters handed to the engine."""

    rate: float = 0.95
    pitch: float = 1.0


FinishedCallback = Callable[[SpeechOutcome], None]


class SpeechEngine(ABC):
    """Text-to-speech backend driven by the narration controller.

    ``start`` must return promptly and report the end of the utterance through
    ``on_finished`` exactly once, possibly from another thread. ``stop`` halts
    whatever is playing and should lead to a ``STOPPED`` report.
    """

    @abstractmethod
    def start(self, text: str, options: SpeechOptions, on_finished: FinishedCallback) -> None:
        """Begin speaking ``text``."""

    @abstractmethod
    def stop(self) -> None:
        """Halt any utterance in progress."""


class ConsoleSpeechEngine(SpeechEngine):
    """Engine that writes utterances to the log and finishes immediately."""

    def __init__(self) -> None:
        self.spoken: list[str] = []

    def start(self, text: str, options: SpeechOptions, on_finished: FinishedCallback) -> None:
        self.spoken.append(text)
        log_spoken(text)
        on_finished(SpeechOutcome.DONE)

    def stop(self) -> None:
        logger.debug("[Speech] stop requested")
