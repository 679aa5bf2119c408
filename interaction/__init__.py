"""Interaction package utilities."""

from interaction.haptics import HapticsDriver, NullHapticsDriver
from interaction.narration import (
    NarrationConfig,
    NarrationController,
    NarrationPhase,
    NarrationState,
    build_narration_controller,
)
from interaction.speech import ConsoleSpeechEngine, SpeechEngine, SpeechOptions, SpeechOutcome

__all__ = [
    "ConsoleSpeechEngine",
    "HapticsDriver",
    "NarrationConfig",
    "NarrationController",
    "NarrationPhase",
    "NarrationState",
    "NullHapticsDriver",
    "SpeechEngine",
    "SpeechOptions",
    "SpeechOutcome",
    "build_narration_controller",
]
