"""Host-side collaborators: action registry, execution policy and scheduler."""

from lint_overlay.execution.commands import (
    Invocation,
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
)
from lint_overlay.execution.host import ActionGraph, ActionSink, OutputConflictError
from lint_overlay.execution.policy import (
    ActionFailedError,
    ActionOutcome,
    OutcomeStatus,
    execute_action,
)
from lint_overlay.execution.scheduler import DEFAULT_MAX_CONCURRENCY, ScheduleResult, run_actions

__all__ = [
    "ActionFailedError",
    "ActionGraph",
    "ActionOutcome",
    "ActionSink",
    "DEFAULT_MAX_CONCURRENCY",
    "Invocation",
    "OutcomeStatus",
    "OutputConflictError",
    "ProcessResult",
    "ProcessRunner",
    "ScheduleResult",
    "SubprocessRunner",
    "execute_action",
    "run_actions",
]
