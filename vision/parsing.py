"""Recover detection records from free-form model output.

The model is asked for a bare JSON array but regularly wraps it in prose or
markdown, or runs out of tokens halfway through. Recovery is an ordered chain
of tiers; each returns a list of records or ``None`` and the first list wins.
"""

from __future__ import annotations

import json
import math
import re
import time
from typing import Any, Callable

from core.logging import clip, logger
from vision.detections import PLACEHOLDER_BBOX, Detection, Position


ARRAY_SPAN_PATTERN = re.compile(r"\[[\s\S]*\]")
OBJECT_LITERAL_PATTERN = re.compile(r"\{[^{}]*\}")

DEFAULT_LABEL = "object"
FIXED_CONFIDENCE = 0.9

ParseTier = Callable[[str], "list[Any] | None"]


def _loads_list(text: str) -> list[Any] | None:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, list) else None


def parse_direct(text: str) -> list[Any] | None:
    """Parse the whole text as a JSON array."""

    return _loads_list(text.strip())


def parse_bracketed(text: str) -> list[Any] | None:
    """Parse the outermost ``[...]`` span, ignoring surrounding prose."""

    match = ARRAY_SPAN_PATTERN.search(text)
    if match is None:
        return None
    return _loads_list(match.group(0))


def parse_salvaged(text: str) -> list[Any] | None:
    """Collect every flat ``{...}`` literal that parses on its own."""

    records: list[Any] = []
    for literal in OBJECT_LITERAL_PATTERN.findall(text):
        try:
            records.append(json.loads(literal))
        except ValueError:
            continue
    return records or None


PARSE_TIERS: tuple[tuple[str, ParseTier], ...] = (
    ("direct", parse_direct),
    ("bracketed", parse_bracketed),
    ("salvaged", parse_salvaged),
)


def extract_records(raw_text: str | None) -> list[dict[str, Any]]:
    """Return raw detection records in model order, or ``[]``."""

    if not raw_text:
        return []
    for name, tier in PARSE_TIERS:
        records = tier(raw_text)
        if records is None:
            continue
        logger.debug("[Parser] tier=%s recovered %d record(s)", name, len(records))
        return [record for record in records if isinstance(record, dict)]
    logger.info("[Parser] no detections recoverable from %r", clip(raw_text, 80))
    return []


def _normalize_label(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_LABEL


def _normalize_position(value: Any) -> Position:
    if isinstance(value, str):
        try:
            return Position(value.strip().lower())
        except ValueError:
            pass
    return Position.CENTER


def _normalize_distance(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def to_detection(record: dict[str, Any], index: int, call_ms: int) -> Detection:
    return Detection(
        id=f"det_{call_ms}_{index}",
        label=_normalize_label(record.get("label")),
        confidence=FIXED_CONFIDENCE,
        bbox=PLACEHOLDER_BBOX,
        distance=_normalize_distance(record.get("distance")),
        position=_normalize_position(record.get("position")),
    )


def extract_detections(raw_text: str | None, *, call_ms: int | None = None) -> list[Detection]:
    """Map model output to detections; unrecoverable text yields ``[]``."""

    if call_ms is None:
        call_ms = int(time.time() * 1000)
    records = extract_records(raw_text)
    return [to_detection(record, index, call_ms) for index, record in enumerate(records)]
