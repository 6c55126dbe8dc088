"""Public observability primitives: structured logging."""

from lint_overlay.observability.logging import (
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = ["LoggingConfig", "get_logger", "setup_logging", "shutdown_logging"]
