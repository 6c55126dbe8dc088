"""Shared utilities."""

from lint_overlay.utils.concurrency import WorkerPool

__all__ = ["WorkerPool"]
