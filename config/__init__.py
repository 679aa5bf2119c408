"""Configuration package utilities."""

__all__ = ["ConfigController", "apply_defaults"]


def __getattr__(name: str):
    if name == "ConfigController":
        from config.controller import ConfigController

        return ConfigController
    if name == "apply_defaults":
        from config.controller import apply_defaults

        return apply_defaults
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
