"""Command-line entry point for running diagnostics."""

from __future__ import annotations

import argparse
from pathlib import Path
import tempfile

from config.controller import ConfigController, apply_defaults
from config.diagnostics import probe as config_probe
from core.diagnostics import probe as core_probe
from diagnostics.models import DiagnosticProbe
from diagnostics.runner import exit_code, format_results, run_diagnostics
from interaction.diagnostics import probe as narration_probe
from vision.diagnostics import probe as vision_probe


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Run diagnostics probes.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run probes against a temporary offline directory.",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Optional base directory for offline diagnostics.",
    )
    return parser.parse_args(argv)


def default_probes(base_dir: Path | None = None) -> list[DiagnosticProbe]:
    """Return the live probe set."""

    def config_probe_with_base():
        return config_probe(base_dir=base_dir)

    def vision_probe_live():
        return vision_probe()

    def narration_probe_live():
        return narration_probe()

    def core_probe_live():
        config = ConfigController.get_instance().get_config()
        log_file = Path(config["log_file"]) if config.get("file_logging_enabled") else None
        return core_probe(log_file=log_file)

    return [config_probe_with_base, core_probe_live, vision_probe_live, narration_probe_live]


def main(argv: list[str] | None = None) -> int:
    """Run diagnostics and return an exit code."""

    args = parse_args(argv)
    base_dir = args.base_dir

    if args.offline and base_dir is None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            tmp_base = Path(tmp_dir)

            config_dir = tmp_base / "config"
            config_dir.mkdir(parents=True, exist_ok=True)
            (config_dir / "default.yaml").write_text("{}", encoding="utf-8")
            offline_config = apply_defaults({})

            def config_probe_offline():
                return config_probe(base_dir=tmp_base)

            def core_probe_offline():
                return core_probe(log_file=tmp_base / "var" / "log" / "sightassist.log")

            def vision_probe_offline():
                return vision_probe(api_key="offline-test", config=offline_config)

            def narration_probe_offline():
                return narration_probe(config=offline_config)

            results = run_diagnostics(
                [
                    config_probe_offline,
                    core_probe_offline,
                    vision_probe_offline,
                    narration_probe_offline,
                ]
            )
    else:
        results = run_diagnostics(default_probes(base_dir))

    print(format_results(results))

    return exit_code(results)


if __name__ == "__main__":
    raise SystemExit(main())
