"""
The type-check overlay: target selection, action construction and report allocation.

Nothing here executes a process. Actions are described and submitted to an
``ActionSink``; see ``lint_overlay.execution`` for the host side.
"""

from lint_overlay.overlay.actions import mypy_action, mypy_arguments
from lint_overlay.overlay.eligibility import filter_srcs, is_checkable, should_visit
from lint_overlay.overlay.outputs import ReportPaths, noop_lint_action, output_files
from lint_overlay.overlay.visitor import (
    MypyVisitor,
    OverlayVisitor,
    VisitContext,
    VisitorConfigError,
    lint_mypy_visitor,
    resolve_config,
    resolve_executable,
)

__all__ = [
    "MypyVisitor",
    "OverlayVisitor",
    "ReportPaths",
    "VisitContext",
    "VisitorConfigError",
    "filter_srcs",
    "is_checkable",
    "lint_mypy_visitor",
    "mypy_action",
    "mypy_arguments",
    "noop_lint_action",
    "output_files",
    "resolve_config",
    "resolve_executable",
    "should_visit",
]
