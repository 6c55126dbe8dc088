"""Value types for targets, options, actions and reports."""

from lint_overlay.domain.models import (
    Action,
    Capture,
    ExecutionMode,
    FailFast,
    JSONScalar,
    JSONValue,
    LintOptions,
    LintReport,
    ReportGroup,
    ReportMode,
    ReportPolicy,
    SourceFile,
    TargetNode,
    ToolAction,
    VisitState,
    WriteEmptyAction,
)

__all__ = [
    "Action",
    "Capture",
    "ExecutionMode",
    "FailFast",
    "JSONScalar",
    "JSONValue",
    "LintOptions",
    "LintReport",
    "ReportGroup",
    "ReportMode",
    "ReportPolicy",
    "SourceFile",
    "TargetNode",
    "ToolAction",
    "VisitState",
    "WriteEmptyAction",
]
