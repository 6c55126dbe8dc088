"""
Dual-mode execution policy for described actions.

Capture mode
- Run the tool, write its stdout to the stdout file and its exit status to
  the exit-code file. The action succeeds whatever the tool returned: a lint
  failure is data when an exit-code artifact was requested.

Fail-fast mode
- Run the tool. A non-zero exit fails the action and the stdout file is not
  written. On success the stdout file is written, so an empty file exists even
  when the tool printed nothing.

A tool that cannot be spawned or that times out has no exit status; the action
fails in either mode and none of its outputs are written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from lint_overlay.domain.models import (
    Action,
    Capture,
    JSONValue,
    ToolAction,
    WriteEmptyAction,
)
from lint_overlay.execution.commands import Invocation, ProcessResult, ProcessRunner

if TYPE_CHECKING:
    from collections.abc import Mapping

_DIAGNOSTIC_EXCERPT_CHARS = 4000

_logger = structlog.get_logger(__name__)


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


class ActionFailedError(RuntimeError):
    """A fail-fast action exited non-zero, or any action could not run."""

    def __init__(self, outcome: ActionOutcome) -> None:
        self.outcome = outcome
        super().__init__(outcome.describe())


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    """Result of executing one described action."""

    action: Action
    status: OutcomeStatus
    exit_code: int | None = None
    message: str = ""
    written: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def describe(self) -> str:
        suffix = f": {self.message}" if self.message else ""
        return f"{self.action.progress_message} {self.status.value}{suffix}"

    def raise_for_status(self) -> None:
        if not self.succeeded:
            raise ActionFailedError(self)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "action": self.action.to_dict(),
            "status": self.status.value,
            "exit_code": self.exit_code,
            "message": self.message,
            "written": list(self.written),
        }


async def execute_action(
    action: Action,
    runner: ProcessRunner,
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout_seconds: float | None = None,
    logger: Any | None = None,
) -> ActionOutcome:
    """Execute ``action`` and apply the capture or fail-fast policy to the result."""

    log = logger if logger is not None else _logger

    if isinstance(action, WriteEmptyAction):
        for path in action.outputs:
            _write_text(path, "")
        log.debug("action_noop_outputs_written", outputs=list(action.outputs))
        return ActionOutcome(
            action=action,
            status=OutcomeStatus.SUCCESS,
            written=action.outputs,
        )

    result = await runner.run(
        Invocation(
            argv=action.argv,
            cwd=cwd,
            env=dict(env or {}),
            timeout_seconds=timeout_seconds,
        )
    )

    if not result.completed:
        message = result.error or "tool did not report an exit status"
        log.error(
            "action_tool_unavailable",
            progress=action.progress_message,
            argv=list(action.argv),
            error=message,
            timed_out=result.timed_out,
        )
        return ActionOutcome(action=action, status=OutcomeStatus.FAILED, message=message)

    if isinstance(action.mode, Capture):
        return _apply_capture(action, action.mode, result, log)
    return _apply_fail_fast(action, result, log)


def _apply_capture(
    action: ToolAction,
    mode: Capture,
    result: ProcessResult,
    log: Any,
) -> ActionOutcome:
    _write_text(action.stdout, result.stdout)
    _write_text(mode.exit_code_path, f"{result.exit_code}\n")
    log.info(
        "action_captured",
        progress=action.progress_message,
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
    )
    return ActionOutcome(
        action=action,
        status=OutcomeStatus.SUCCESS,
        exit_code=result.exit_code,
        written=(action.stdout, mode.exit_code_path),
    )


def _apply_fail_fast(action: ToolAction, result: ProcessResult, log: Any) -> ActionOutcome:
    if result.exit_code != 0:
        diagnostics = f"{result.stdout}{result.stderr}".strip()
        log.error(
            "action_failed",
            progress=action.progress_message,
            exit_code=result.exit_code,
            diagnostics=diagnostics[:_DIAGNOSTIC_EXCERPT_CHARS],
        )
        return ActionOutcome(
            action=action,
            status=OutcomeStatus.FAILED,
            exit_code=result.exit_code,
            message=f"tool exited with status {result.exit_code}",
        )

    _write_text(action.stdout, result.stdout)
    log.info(
        "action_passed",
        progress=action.progress_message,
        duration_ms=result.duration_ms,
    )
    return ActionOutcome(
        action=action,
        status=OutcomeStatus.SUCCESS,
        exit_code=0,
        written=(action.stdout,),
    )


def _write_text(path: str, text: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")


__all__ = [
    "ActionFailedError",
    "ActionOutcome",
    "OutcomeStatus",
    "execute_action",
]
