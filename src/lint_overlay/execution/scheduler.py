"""Run every described action with bounded parallelism."""

from __future__ import annotations

import functools
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from lint_overlay.domain.models import Action, JSONValue
from lint_overlay.execution.commands import ProcessRunner
from lint_overlay.execution.policy import ActionFailedError, ActionOutcome, execute_action
from lint_overlay.utils.concurrency import WorkerPool

DEFAULT_MAX_CONCURRENCY = 4

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ScheduleResult:
    """Outcomes in submission order."""

    outcomes: tuple[ActionOutcome, ...]

    @property
    def succeeded(self) -> bool:
        return all(outcome.succeeded for outcome in self.outcomes)

    @property
    def failures(self) -> tuple[ActionOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.succeeded)

    def raise_for_status(self) -> None:
        failures = self.failures
        if failures:
            raise ActionFailedError(failures[0])

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "succeeded": self.succeeded,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


async def run_actions(
    actions: Iterable[Action],
    runner: ProcessRunner,
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout_seconds: float | None = None,
    logger: Any | None = None,
) -> ScheduleResult:
    """Execute ``actions`` concurrently; a failed action does not stop the others."""

    log = logger if logger is not None else _logger
    ordered = tuple(actions)
    pool: WorkerPool[ActionOutcome] = WorkerPool(max_concurrency)
    outcomes = await pool.map(
        functools.partial(
            execute_action,
            action,
            runner,
            cwd=cwd,
            env=env,
            timeout_seconds=timeout_seconds,
            logger=log,
        )
        for action in ordered
    )

    result = ScheduleResult(outcomes=tuple(outcomes))
    log.info(
        "schedule_finished",
        actions=len(ordered),
        failures=len(result.failures),
        peak_concurrency=pool.peak,
    )
    return result


__all__ = ["DEFAULT_MAX_CONCURRENCY", "ScheduleResult", "run_actions"]
