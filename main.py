"""Command-line entry point for the SightAssist narration runtime."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
import sys

from config import ConfigController
from core.logging import enable_file_logging, logger, set_level
from interaction import ConsoleSpeechEngine, build_narration_controller
from services import AssistService, FrameSource, LiveDetectionSession, ScanLoop, ScanLoopConfig
from services.assist import NO_TEXT_SPOKEN
from vision import (
    FrameGate,
    FrameGateConfig,
    ObjectDetector,
    Prioritizer,
    PrioritizerConfig,
    RateLimited,
    VisionClient,
)


RATE_LIMITED_SPOKEN = "The vision service is busy. Please try again shortly."
NOTHING_DETECTED_SPOKEN = "Nothing notable detected."
IMAGE_SUFFIXES = {".jpg", ".jpeg"}


class ImageFolderSource(FrameSource):
    """Replay JPEG files from a directory as camera frames."""

    def __init__(self, folder: Path) -> None:
        self._paths = sorted(
            path for path in folder.iterdir() if path.suffix.lower() in IMAGE_SUFFIXES
        )
        self._index = 0

    def __len__(self) -> int:
        return len(self._paths)

    async def next_frame(self) -> Path | None:
        if self._index >= len(self._paths):
            return None
        path = self._paths[self._index]
        self._index += 1
        return path


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Raw command-line arguments.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description="Describe camera frames aloud for a visually impaired user."
    )
    parser.add_argument(
        "--mode",
        choices=("detect", "scene", "ocr", "safety", "live"),
        default="detect",
        help="Which pipeline to run.",
    )
    parser.add_argument("--image", type=Path, help="JPEG frame for single-shot modes.")
    parser.add_argument(
        "--frames",
        type=Path,
        help="Directory of JPEG frames replayed in live mode.",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Run diagnostics probes and exit.",
    )
    return parser.parse_args(argv)


async def run_single(mode: str, image: Path, config: dict) -> int:
    client = VisionClient.from_config(config)
    narrator = build_narration_controller(config, ConsoleSpeechEngine())

    if mode == "detect":
        detections = await ObjectDetector(client).detect(image)
        if isinstance(detections, RateLimited):
            result: str | RateLimited = detections
        else:
            prioritizer = Prioritizer(PrioritizerConfig.from_config(config))
            result = prioritizer.summarize(detections) or NOTHING_DETECTED_SPOKEN
    else:
        assist = AssistService(client)
        if mode == "scene":
            result = await assist.describe_scene(image)
        elif mode == "safety":
            result = await assist.assess_safety(image)
        else:
            result = await assist.read_text(image)
            if isinstance(result, str) and not result:
                result = NO_TEXT_SPOKEN

    if isinstance(result, RateLimited):
        await narrator.speak(RATE_LIMITED_SPOKEN, interrupt=True)
        return 2
    await narrator.speak(result, interrupt=True)
    return 0


async def run_live(frames: Path, config: dict) -> int:
    source = ImageFolderSource(frames)
    client = VisionClient.from_config(config)
    gate = FrameGate(
        ObjectDetector(client),
        Prioritizer(PrioritizerConfig.from_config(config)),
        config=FrameGateConfig.from_config(config),
    )
    narrator = build_narration_controller(config, ConsoleSpeechEngine())
    session = LiveDetectionSession(gate, narrator)
    loop = ScanLoop(source, session.handle_frame, ScanLoopConfig.from_config(config))
    await loop.run(max_frames=len(source))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Application entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Process exit code.
    """

    if argv is None:
        argv = sys.argv[1:]

    config = ConfigController.get_instance().get_config()
    set_level(config.get("logging_level", "INFO"))
    args = parse_args(argv)

    if args.diagnostics:
        from diagnostics.run import default_probes
        from diagnostics.runner import exit_code, format_results, run_diagnostics

        results = run_diagnostics(default_probes())
        print(format_results(results))
        return exit_code(results)

    if config.get("file_logging_enabled"):
        log_file_path = Path(config["log_file"])
        enable_file_logging(log_file_path)
        logger.info("Writing logs to %s", log_file_path)

    try:
        if args.mode == "live":
            if args.frames is None or not args.frames.is_dir():
                logger.error("--frames must point at a directory in live mode")
                return 1
            return asyncio.run(run_live(args.frames, config))

        if args.image is None:
            logger.error("--image is required for mode %s", args.mode)
            return 1
        return asyncio.run(run_single(args.mode, args.image, config))
    except KeyboardInterrupt:
        logger.info("Program terminated by user")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
