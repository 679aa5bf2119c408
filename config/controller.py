"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_IMPORTANT_CLASSES = ["car", "stairs", "person", "crosswalk", "obstacles", "door"]


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


class ConfigController:
    """Singleton controller for loading and updating configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_file: str = "default.yaml", config_dir: Path | None = None) -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = config_dir if config_dir is not None else Path("config")
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        config: dict[str, Any] = {}
        if self.paths.config_file.exists():
            with self.paths.config_file.open("r", encoding="utf-8") as file:
                config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = apply_defaults(config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Persist configuration to override.yaml, archiving previous overrides."""

        if self.paths.override_file.exists():
            archive_index = 1
            archive_file = self._archive_path(archive_index)
            while archive_file.exists():
                archive_index += 1
                archive_file = self._archive_path(archive_index)
            self.paths.override_file.rename(archive_file)

        self.paths.config_dir.mkdir(parents=True, exist_ok=True)
        with self.paths.override_file.open("w", encoding="utf-8") as file:
            yaml.safe_dump(config, file)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def set_config(self, config: dict[str, Any]) -> None:
        """Set and persist configuration values."""

        self.config = apply_defaults(dict(config))
        self.save_config(self.config)

    def _archive_path(self, index: int) -> Path:
        """Return the archive path for a given override index."""

        filename = f"override_{index:04d}.yaml"
        return self.paths.config_dir / filename

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged


def apply_defaults(config: dict[str, Any]) -> dict[str, Any]:
    """Fill every pipeline section with typed defaults."""

    normalized = dict(config)
    normalized["logging_level"] = str(normalized.get("logging_level", "INFO"))
    normalized["file_logging_enabled"] = bool(normalized.get("file_logging_enabled", False))
    normalized["log_file"] = str(normalized.get("log_file", "./var/log/sightassist.log"))

    vision_cfg = dict(normalized.get("vision") or {})
    vision_cfg["model"] = str(vision_cfg.get("model", "gemini-2.5-flash-lite"))
    vision_cfg["base_url"] = str(
        vision_cfg.get("base_url", "https://generativelanguage.googleapis.com/v1beta/models")
    )
    vision_cfg["api_key_env"] = str(vision_cfg.get("api_key_env", "GEMINI_API_KEY"))
    vision_cfg["timeout_s"] = float(vision_cfg.get("timeout_s", 25.0))
    vision_cfg["temperature"] = float(vision_cfg.get("temperature", 0.3))
    vision_cfg["max_output_tokens"] = int(vision_cfg.get("max_output_tokens", 512))
    normalized["vision"] = vision_cfg

    prioritizer_cfg = dict(normalized.get("prioritizer") or {})
    classes_value = prioritizer_cfg.get("important_classes", DEFAULT_IMPORTANT_CLASSES)
    if not isinstance(classes_value, list):
        classes_value = DEFAULT_IMPORTANT_CLASSES
    prioritizer_cfg["important_classes"] = [str(item) for item in classes_value]
    prioritizer_cfg["max_phrases"] = int(prioritizer_cfg.get("max_phrases", 3))
    prioritizer_cfg["reference_height_ft"] = float(prioritizer_cfg.get("reference_height_ft", 6.0))
    prioritizer_cfg["min_feet"] = float(prioritizer_cfg.get("min_feet", 1.0))
    prioritizer_cfg["max_feet"] = float(prioritizer_cfg.get("max_feet", 30.0))
    normalized["prioritizer"] = prioritizer_cfg

    gate_cfg = dict(normalized.get("frame_gate") or {})
    gate_cfg["min_interval_ms"] = int(gate_cfg.get("min_interval_ms", 1500))
    normalized["frame_gate"] = gate_cfg

    narration_cfg = dict(normalized.get("narration") or {})
    narration_cfg["grace_ms"] = int(narration_cfg.get("grace_ms", 50))
    narration_cfg["safety_timeout_s"] = float(narration_cfg.get("safety_timeout_s", 10.0))
    narration_cfg["rate"] = float(narration_cfg.get("rate", 0.95))
    narration_cfg["pitch"] = float(narration_cfg.get("pitch", 1.0))
    busy_policy = str(narration_cfg.get("busy_policy", "queue")).strip().lower()
    narration_cfg["busy_policy"] = busy_policy if busy_policy in {"queue", "drop"} else "queue"
    normalized["narration"] = narration_cfg

    scan_cfg = dict(normalized.get("scan_loop") or {})
    scan_cfg["period_ms"] = int(scan_cfg.get("period_ms", 500))
    scan_cfg["backoff_initial_s"] = float(scan_cfg.get("backoff_initial_s", 2.0))
    scan_cfg["backoff_max_s"] = float(scan_cfg.get("backoff_max_s", 30.0))
    scan_cfg["backoff_multiplier"] = float(scan_cfg.get("backoff_multiplier", 2.0))
    normalized["scan_loop"] = scan_cfg

    return normalized
