"""Tests for detection ranking, distance estimation, and phrasing."""

from __future__ import annotations

from vision.detections import BoundingBox, Detection, Position
from vision.prioritizer import Prioritizer, PrioritizerConfig, estimate_distance, summarize


def _det(
    label: str,
    distance: float | None = None,
    position: Position | None = Position.CENTER,
    height: float = 0.2,
) -> Detection:
    return Detection(
        id=f"det_0_{label}",
        label=label,
        confidence=0.9,
        bbox=BoundingBox(x=0.5, y=0.5, width=0.2, height=height),
        distance=distance,
        position=position,
    )


def test_summarize_empty_returns_none() -> None:
    assert summarize([]) is None


def test_summarize_caps_at_three_phrases() -> None:
    detections = [_det(f"thing{i}", distance=float(i + 1)) for i in range(6)]

    summary = summarize(detections)

    assert summary is not None
    assert len(summary.split(". ")) == 3


def test_important_labels_precede_others_regardless_of_distance() -> None:
    detections = [
        _det("chair", distance=1),
        _det("bench", distance=2),
        _det("car", distance=25),
        _det("person", distance=12),
    ]

    summary = summarize(detections)

    assert summary == "person 12 feet center. car 25 feet center. chair 1 feet center"


def test_same_tier_sorted_by_distance_with_unknown_last() -> None:
    prioritizer = Prioritizer()
    detections = [
        _det("door", distance=None, height=0.0),
        _det("stairs", distance=9),
        _det("car", distance=3),
    ]

    ranked = prioritizer.rank(detections)

    assert [d.label for d in ranked] == ["car", "stairs", "door"]
    assert prioritizer.summarize(detections) == (
        "car 3 feet center. stairs 9 feet center. door ahead center"
    )


def test_ties_preserve_input_order() -> None:
    detections = [_det("cup", distance=4), _det("mug", distance=4), _det("pen", distance=4)]

    assert summarize(detections) == "cup 4 feet center. mug 4 feet center. pen 4 feet center"


def test_missing_distance_uses_bbox_estimate_for_sorting() -> None:
    near_by_box = _det("person", distance=None, height=0.5)
    far_explicit = _det("car", distance=20)

    assert summarize([far_explicit, near_by_box]) == "person 12 feet center. car 20 feet center"


def test_position_omitted_when_absent() -> None:
    assert summarize([_det("sign", distance=7, position=None)]) == "sign 7 feet"
    assert summarize([_det("sign", position=None, height=0.0)]) == "sign ahead"


def test_distance_rounds_half_up() -> None:
    assert summarize([_det("pole", distance=2.5)]) == "pole 3 feet center"
    assert summarize([_det("pole", distance=3.49)]) == "pole 3 feet center"


def test_estimate_distance_from_bbox_height_is_clamped() -> None:
    assert estimate_distance(_det("x", height=6)) == 1
    assert estimate_distance(_det("x", height=0.1)) == 30
    assert estimate_distance(_det("x", height=0.5)) == 12
    assert estimate_distance(_det("x", height=10)) == 1
    for height in (0.01, 0.05, 0.2, 0.33, 0.9, 1.0, 3.0):
        value = estimate_distance(_det("x", height=height))
        assert value is not None
        assert 1 <= value <= 30


def test_estimate_distance_undefined_without_geometry() -> None:
    assert estimate_distance(_det("x", height=0)) is None
    assert estimate_distance(_det("x", height=-0.3)) is None


def test_explicit_distance_wins_over_bbox() -> None:
    assert estimate_distance(_det("x", distance=42, height=0.5)) == 42


def test_importance_match_ignores_case_and_config_overrides() -> None:
    assert summarize([_det("chair", distance=1), _det("Person", distance=9)]).startswith("Person")

    prioritizer = Prioritizer(PrioritizerConfig(important_labels=("chair",), max_phrases=1))
    assert prioritizer.summarize([_det("person", distance=1), _det("chair", distance=9)]) == (
        "chair 9 feet center"
    )


def test_prioritizer_config_from_config_section() -> None:
    config = {"prioritizer": {"important_classes": ["bike"], "max_phrases": 2, "max_feet": 20}}

    parsed = PrioritizerConfig.from_config(config)

    assert parsed.important_labels == ("bike",)
    assert parsed.max_phrases == 2
    assert parsed.max_feet == 20.0
    assert parsed.min_feet == 1.0


def test_non_positive_distance_is_spoken_as_ahead() -> None:
    assert estimate_distance(_det("x", distance=0)) is None
    assert estimate_distance(_det("x", distance=-5)) is None
    assert summarize([_det("pole", distance=0)]) == "pole ahead center"
    assert summarize([_det("cone", distance=-5), _det("bin", distance=4)]) == (
        "bin 4 feet center. cone ahead center"
    )
