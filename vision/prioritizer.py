"""Rank detections and phrase the top few for narration."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Iterable, Sequence

from vision.detections import Detection


IMPORTANT_CLASSES: tuple[str, ...] = ("car", "stairs", "person", "crosswalk", "obstacles", "door")


@dataclass(frozen=True)
class PrioritizerConfig:
    """Ranking and phrasing parameters."""

    important_labels: tuple[str, ...] = IMPORTANT_CLASSES
    max_phrases: int = 3
    reference_height_ft: float = 6.0
    min_feet: float = 1.0
    max_feet: float = 30.0

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "PrioritizerConfig":
        prioritizer_cfg = config.get("prioritizer") or {}
        labels_value = prioritizer_cfg.get("important_classes", list(IMPORTANT_CLASSES))
        if isinstance(labels_value, list):
            labels = tuple(str(item) for item in labels_value)
        else:
            labels = IMPORTANT_CLASSES
        return cls(
            important_labels=labels,
            max_phrases=int(prioritizer_cfg.get("max_phrases", 3)),
            reference_height_ft=float(prioritizer_cfg.get("reference_height_ft", 6.0)),
            min_feet=float(prioritizer_cfg.get("min_feet", 1.0)),
            max_feet=float(prioritizer_cfg.get("max_feet", 30.0)),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class Prioritizer:
    """Importance-first, nearest-first selection of what to say."""

    def __init__(self, config: PrioritizerConfig | None = None) -> None:
        self.config = config or PrioritizerConfig()
        self._important = {label.strip().lower() for label in self.config.important_labels}

    def is_important(self, detection: Detection) -> bool:
        return detection.label.strip().lower() in self._important

    def estimate_distance(self, detection: Detection) -> float | None:
        """Return feet to the detection, or ``None`` when nothing supports a guess.

        A positive explicit distance wins; zero or negative means unknown.
        Without one, a person-sized object filling the frame height is assumed
        to be ``reference_height_ft`` away, clamped to ``[min_feet, max_feet]``.
        """

        if detection.distance is not None:
            return detection.distance if detection.distance > 0 else None

        bbox = detection.bbox
        height = bbox.height if bbox is not None else 0.0
        if height <= 0:
            return None

        approx_feet = self.config.reference_height_ft / height
        return min(max(approx_feet, self.config.min_feet), self.config.max_feet)

    def rank(self, detections: Iterable[Detection]) -> list[Detection]:
        """Stable sort: important labels first, then nearest first."""

        def sort_key(detection: Detection) -> tuple[int, float]:
            distance = self.estimate_distance(detection)
            return (
                0 if self.is_important(detection) else 1,
                math.inf if distance is None else distance,
            )

        return sorted(detections, key=sort_key)

    def phrase(self, detection: Detection) -> str:
        distance = self.estimate_distance(detection)
        dist_phrase = "ahead" if distance is None else f"{_round_half_up(distance)} feet"
        words = [detection.label, dist_phrase]
        if detection.position is not None:
            words.append(detection.position.value)
        return " ".join(words)

    def summarize(self, detections: Sequence[Detection]) -> str | None:
        if not detections:
            return None
        top = self.rank(detections)[: max(1, self.config.max_phrases)]
        return ". ".join(self.phrase(detection) for detection in top)


_DEFAULT_PRIORITIZER = Prioritizer()


def estimate_distance(detection: Detection) -> float | None:
    return _DEFAULT_PRIORITIZER.estimate_distance(detection)


def summarize(detections: Sequence[Detection]) -> str | None:
    return _DEFAULT_PRIORITIZER.summarize(detections)
