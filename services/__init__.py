"""Assist flows and the loops that drive the perception pipeline."""

from services.assist import AssistService
from services.history import HistorySink, NullHistorySink, ScanRecord, ScanType
from services.live_detection import LiveDetectionSession
from services.scan_loop import BackoffPolicy, FrameSource, ScanLoop, ScanLoopConfig

__all__ = [
    "AssistService",
    "BackoffPolicy",
    "FrameSource",
    "HistorySink",
    "LiveDetectionSession",
    "NullHistorySink",
    "ScanLoop",
    "ScanLoopConfig",
    "ScanRecord",
    "ScanType",
]
