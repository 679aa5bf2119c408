"""Scan history records and the sink interface that stores them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import time

from core.logging import logger as LOGGER


class ScanType(str, Enum):
    """Which assist flow produced the record."""

    TEXT = "text"
    OBJECTS = "objects"
    SCENE = "scene"
    SAFETY = "safety"


@dataclass(frozen=True)
class ScanRecord:
    """One spoken result handed to the history store."""

    type: ScanType
    content: str
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_payload(self) -> dict[str, object]:
        return {"type": self.type.value, "content": self.content, "createdAt": self.created_at}


class HistorySink(ABC):
    """Interface for history persistence providers."""

    @abstractmethod
    def save(self, record: ScanRecord) -> None:
        """Store one record. Implementations must not raise for storage errors."""


class NullHistorySink(HistorySink):
    """Default sink that keeps nothing."""

    def save(self, record: ScanRecord) -> None:
        LOGGER.debug("[History] discarding %s record", record.type.value)
