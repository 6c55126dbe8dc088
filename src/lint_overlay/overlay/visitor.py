"""
mypy overlay visitor.

Each call to ``MypyVisitor.visit`` handles one target and ends in one of
three states:

- ``skipped``: the target kind is not in the allow-set. Nothing is submitted
  and ``None`` is returned.
- ``noop``: the target has no checkable sources. One placeholder action
  creates all four report files empty.
- ``checked``: two mypy actions are submitted, one per report group, each in
  the execution mode the report policy assigns to that group.

Typical usage::

    visitor = lint_mypy_visitor(binary="mypy", config=".mypy")
    report = visitor.visit(node, VisitContext(sink=ActionGraph()))
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from lint_overlay.constants import (
    COLOR_OPTION,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_RULE_KINDS,
    MYPY_MNEMONIC,
)
from lint_overlay.domain.models import (
    Capture,
    ExecutionMode,
    FailFast,
    LintOptions,
    LintReport,
    ReportMode,
    ReportPolicy,
    TargetNode,
    VisitState,
)
from lint_overlay.execution.host import ActionSink
from lint_overlay.overlay.actions import mypy_action
from lint_overlay.overlay.eligibility import filter_srcs, should_visit
from lint_overlay.overlay.outputs import noop_lint_action, output_files


class VisitorConfigError(ValueError):
    """Raised at construction time when the tool or config reference is unusable."""


@dataclass(frozen=True, slots=True)
class VisitContext:
    """Per-traversal collaborators handed to every visit."""

    sink: ActionSink
    options: LintOptions = field(default_factory=LintOptions)
    output_root: str = str(DEFAULT_OUTPUT_ROOT)


@runtime_checkable
class OverlayVisitor(Protocol):
    """Capability registered with a traversal and called once per target."""

    def visit(self, node: TargetNode, context: VisitContext) -> LintReport | None: ...


class MypyVisitor(OverlayVisitor):
    """Runs mypy over the Python sources of eligible targets."""

    def __init__(
        self,
        *,
        executable: str,
        config: str,
        rule_kinds: Iterable[str] = DEFAULT_RULE_KINDS,
        policy: ReportPolicy | None = None,
        logger: Any | None = None,
    ) -> None:
        self._executable = _require_reference(executable, "executable")
        self._config = _require_reference(config, "config")
        kinds: list[str] = []
        for index, kind in enumerate(_as_kinds(rule_kinds)):
            kinds.append(_require_reference(kind, f"rule_kinds[{index}]"))
        self._rule_kinds = frozenset(kinds)
        self._policy = policy if policy is not None else ReportPolicy()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def executable(self) -> str:
        return self._executable

    @property
    def config(self) -> str:
        return self._config

    @property
    def rule_kinds(self) -> frozenset[str]:
        return self._rule_kinds

    @property
    def policy(self) -> ReportPolicy:
        return self._policy

    def classify(self, node: TargetNode) -> VisitState:
        if not should_visit(node.kind, self._rule_kinds):
            return VisitState.SKIPPED
        if not filter_srcs(node.srcs):
            return VisitState.NOOP
        return VisitState.CHECKED

    def visit(self, node: TargetNode, context: VisitContext) -> LintReport | None:
        state = self.classify(node)
        if state is VisitState.SKIPPED:
            self._logger.debug("overlay_visit", label=node.label, kind=node.kind, state=state.value)
            return None

        paths = output_files(MYPY_MNEMONIC, node, context.output_root)
        if state is VisitState.NOOP:
            self._logger.info("overlay_visit", label=node.label, state=state.value)
            return noop_lint_action(context.sink, paths)

        files_to_lint = filter_srcs(node.srcs)
        policy = self._policy.resolve(context.options)
        color_options = (COLOR_OPTION,) if context.options.color else ()

        mypy_action(
            context.sink,
            executable=self._executable,
            srcs=files_to_lint,
            config=self._config,
            stdout=paths.human_out,
            mode=_execution_mode(policy.human, paths.human_exit_code),
            options=color_options,
            label=node.label,
        )
        mypy_action(
            context.sink,
            executable=self._executable,
            srcs=files_to_lint,
            config=self._config,
            stdout=paths.machine_out,
            mode=_execution_mode(policy.machine, paths.machine_exit_code),
            label=node.label,
        )
        self._logger.info(
            "overlay_visit",
            label=node.label,
            state=state.value,
            sources=len(files_to_lint),
            human_mode=policy.human.value,
            machine_mode=policy.machine.value,
        )
        return paths.report(policy)


def lint_mypy_visitor(
    binary: str,
    config: str | Path,
    rule_kinds: Iterable[str] = DEFAULT_RULE_KINDS,
    *,
    policy: ReportPolicy | None = None,
    search_path: str | None = None,
    logger: Any | None = None,
) -> MypyVisitor:
    """Create a mypy visitor after resolving the tool and config references.

    Args:
        binary: mypy executable, either a path or a name looked up on PATH
        config: the mypy config file (``setup.cfg``, ``mypy.ini`` or ``.mypy``)
        rule_kinds: target kinds to visit
        policy: execution mode per report group
        search_path: PATH override used to look up ``binary``

    Raises:
        VisitorConfigError: when the binary or config file cannot be resolved.
    """

    return MypyVisitor(
        executable=resolve_executable(binary, search_path=search_path),
        config=resolve_config(config),
        rule_kinds=rule_kinds,
        policy=policy,
        logger=logger,
    )


def resolve_executable(binary: str, *, search_path: str | None = None) -> str:
    reference = _require_reference(binary, "binary")
    candidate = Path(reference)
    if os.sep in reference or (os.altsep and os.altsep in reference):
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate.resolve())
        raise VisitorConfigError(f"binary: {reference!r} is not an executable file")

    found = shutil.which(reference, path=search_path)
    if found is None:
        raise VisitorConfigError(f"binary: {reference!r} was not found on PATH")
    return found


def resolve_config(config: str | Path) -> str:
    reference = _require_reference(str(config), "config")
    candidate = Path(reference)
    if not candidate.is_file():
        raise VisitorConfigError(f"config: {reference!r} is not a file")
    return str(candidate.resolve())


def _execution_mode(mode: ReportMode, exit_code_path: str) -> ExecutionMode:
    if mode is ReportMode.CAPTURE:
        return Capture(exit_code_path)
    return FailFast()


def _as_kinds(rule_kinds: Iterable[str]) -> tuple[object, ...]:
    if isinstance(rule_kinds, str):
        raise VisitorConfigError("rule_kinds: expected a collection of kinds, got a string")
    return tuple(rule_kinds)


def _require_reference(value: object, path: str) -> str:
    if not isinstance(value, str):
        raise VisitorConfigError(f"{path}: expected string, got {type(value).__name__}")
    parsed = value.strip()
    if not parsed:
        raise VisitorConfigError(f"{path}: must not be empty")
    return parsed


__all__ = [
    "MypyVisitor",
    "OverlayVisitor",
    "VisitContext",
    "VisitorConfigError",
    "lint_mypy_visitor",
    "resolve_config",
    "resolve_executable",
]
