"""Haptic feedback collaborator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class HapticsDriver(ABC):
    """Device vibration used to mark each spoken action."""

    @abstractmethod
    async def pulse(self) -> None:
        """Emit one short, light pulse."""


class NullHapticsDriver(HapticsDriver):
    """Driver for hosts without a vibration motor."""

    async def pulse(self) -> None:
        return None
