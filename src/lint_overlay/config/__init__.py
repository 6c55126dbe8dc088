"""Configuration loading for lint-overlay."""

from lint_overlay.config.loader import (
    OptionsLoadError,
    OverlayConfig,
    default_config,
    load_config,
)

__all__ = ["OptionsLoadError", "OverlayConfig", "default_config", "load_config"]
