"""Structured logging setup: structlog events routed through stdlib handlers."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Final

import structlog

_DEFAULT_LOGGER_NAME: Final[str] = "lint_overlay"
_VALID_LEVELS: Final[frozenset[str]] = frozenset(
    {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for structured logging."""

    level: int | str = "INFO"
    json_output: bool = False
    log_file: Path | str | None = None
    logger_name: str = _DEFAULT_LOGGER_NAME


def setup_logging(
    config: LoggingConfig | None = None,
    *,
    stream: IO[str] | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog + stdlib logging and return the package logger.

    Events are rendered as JSON lines when ``json_output`` is set and as
    aligned console lines otherwise. Calling this again replaces the handlers
    installed by the previous call.
    """

    cfg = config if config is not None else LoggingConfig()
    level = _parse_log_level(cfg.level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if cfg.json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if cfg.log_file is not None:
        log_path = Path(cfg.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logger = logging.getLogger(cfg.logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger(cfg.logger_name)


def get_logger(name: str = _DEFAULT_LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def shutdown_logging(logger_name: str = _DEFAULT_LOGGER_NAME) -> None:
    """Close handlers installed by ``setup_logging`` and restore structlog defaults."""

    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    structlog.reset_defaults()


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid log level: {value!r}")
    if isinstance(value, int):
        return value
    normalized = value.strip().upper()
    if normalized not in _VALID_LEVELS:
        allowed = ", ".join(sorted(_VALID_LEVELS))
        raise ValueError(f"invalid log level {value!r}; expected one of: {allowed}")
    return int(logging.getLevelName(normalized))


__all__ = ["LoggingConfig", "get_logger", "setup_logging", "shutdown_logging"]
