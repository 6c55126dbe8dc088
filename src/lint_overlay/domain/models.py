"""Frozen value types shared by the visitor, the host and the CLI."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePosixPath
from typing import NoReturn

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_MAX_PATH_LENGTH = 4096


class ReportMode(StrEnum):
    """How a report group treats the tool's exit status."""

    CAPTURE = "capture"
    FAIL_FAST = "fail_fast"


class VisitState(StrEnum):
    SKIPPED = "skipped"
    NOOP = "noop"
    CHECKED = "checked"


@dataclass(frozen=True, slots=True)
class SourceFile:
    """One declared source reference of a target."""

    path: str
    is_source: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", _as_path(self.path, "SourceFile.path"))
        if not isinstance(self.is_source, bool):
            _fail("SourceFile.is_source", f"expected boolean, got {type(self.is_source).__name__}")

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix


@dataclass(frozen=True, slots=True)
class TargetNode:
    """A unit of the build dependency graph, read-only for one visit."""

    label: str
    kind: str
    srcs: tuple[SourceFile, ...] = ()
    deps: tuple[str, ...] = ()
    attrs: Mapping[str, JSONValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "label", _as_label(self.label, "TargetNode.label"))
        object.__setattr__(self, "kind", _as_str(self.kind, "TargetNode.kind"))
        srcs: list[SourceFile] = []
        for index, item in enumerate(self.srcs):
            if isinstance(item, str):
                item = SourceFile(item)
            if not isinstance(item, SourceFile):
                kind = type(item).__name__
                _fail(f"TargetNode.srcs[{index}]", f"expected SourceFile, got {kind}")
            srcs.append(item)
        object.__setattr__(self, "srcs", tuple(srcs))
        object.__setattr__(
            self,
            "deps",
            tuple(
                _as_label(dep, f"TargetNode.deps[{index}]")
                for index, dep in enumerate(self.deps)
            ),
        )
        object.__setattr__(self, "attrs", dict(self.attrs))

    @property
    def repository(self) -> str:
        """External repository name, empty for the main workspace."""

        return _split_label(self.label)[0]

    @property
    def package(self) -> str:
        return _split_label(self.label)[1]

    @property
    def name(self) -> str:
        return _split_label(self.label)[2]


@dataclass(frozen=True, slots=True)
class LintOptions:
    """Options resolved once per invocation and shared by every action."""

    color: bool = False
    fail_on_violation: bool = False

    def __post_init__(self) -> None:
        for name in ("color", "fail_on_violation"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                _fail(f"LintOptions.{name}", f"expected boolean, got {type(value).__name__}")

    def to_dict(self) -> dict[str, JSONValue]:
        return {"color": self.color, "fail_on_violation": self.fail_on_violation}


@dataclass(frozen=True, slots=True)
class ReportPolicy:
    """Execution mode chosen independently for each report group."""

    human: ReportMode = ReportMode.CAPTURE
    machine: ReportMode = ReportMode.FAIL_FAST

    def __post_init__(self) -> None:
        object.__setattr__(self, "human", ReportMode(self.human))
        object.__setattr__(self, "machine", ReportMode(self.machine))

    def resolve(self, options: LintOptions) -> ReportPolicy:
        if options.fail_on_violation:
            return ReportPolicy(human=ReportMode.FAIL_FAST, machine=ReportMode.FAIL_FAST)
        return self


@dataclass(frozen=True, slots=True)
class FailFast:
    """A non-zero exit status fails the action and therefore the build."""


@dataclass(frozen=True, slots=True)
class Capture:
    """Exit status is written to ``exit_code_path``; the action always succeeds."""

    exit_code_path: str

    def __post_init__(self) -> None:
        exit_code_path = _as_path(self.exit_code_path, "Capture.exit_code_path")
        object.__setattr__(self, "exit_code_path", exit_code_path)


ExecutionMode = FailFast | Capture


@dataclass(frozen=True, slots=True)
class ToolAction:
    """Description of one type-checker invocation handed to the host."""

    mnemonic: str
    tool: str
    arguments: tuple[str, ...]
    inputs: tuple[str, ...]
    stdout: str
    mode: ExecutionMode
    progress_message: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "tool", _as_path(self.tool, "ToolAction.tool"))
        object.__setattr__(self, "stdout", _as_path(self.stdout, "ToolAction.stdout"))
        object.__setattr__(self, "arguments", tuple(self.arguments))
        object.__setattr__(self, "inputs", tuple(self.inputs))
        if not isinstance(self.mode, (FailFast, Capture)):
            kind = type(self.mode).__name__
            _fail("ToolAction.mode", f"expected FailFast or Capture, got {kind}")

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.tool, *self.arguments)

    @property
    def outputs(self) -> tuple[str, ...]:
        if isinstance(self.mode, Capture):
            return (self.stdout, self.mode.exit_code_path)
        return (self.stdout,)

    @property
    def exit_code(self) -> str | None:
        return self.mode.exit_code_path if isinstance(self.mode, Capture) else None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": "tool",
            "mnemonic": self.mnemonic,
            "argv": list(self.argv),
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "mode": "capture" if isinstance(self.mode, Capture) else "fail_fast",
            "progress_message": self.progress_message,
        }


@dataclass(frozen=True, slots=True)
class WriteEmptyAction:
    """Placeholder action that materializes declared outputs as empty files."""

    mnemonic: str
    outputs: tuple[str, ...]
    progress_message: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "outputs",
            tuple(
                _as_path(item, f"WriteEmptyAction.outputs[{index}]")
                for index, item in enumerate(self.outputs)
            ),
        )

    @property
    def inputs(self) -> tuple[str, ...]:
        return ()

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": "write_empty",
            "mnemonic": self.mnemonic,
            "inputs": [],
            "outputs": list(self.outputs),
            "progress_message": self.progress_message,
        }


Action = ToolAction | WriteEmptyAction


@dataclass(frozen=True, slots=True)
class ReportGroup:
    out: str
    exit_code: str | None = None

    def files(self) -> tuple[str, ...]:
        return (self.out,) if self.exit_code is None else (self.out, self.exit_code)


@dataclass(frozen=True, slots=True)
class LintReport:
    """Per-target result handed to downstream consumers of the traversal."""

    label: str
    human: ReportGroup
    machine: ReportGroup

    def outputs(self) -> tuple[str, ...]:
        return (*self.human.files(), *self.machine.files())

    def output_groups(self) -> dict[str, tuple[str, ...]]:
        return {
            "lint_human": self.human.files(),
            "lint_machine": self.machine.files(),
        }

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "label": self.label,
            "human": {"out": self.human.out, "exit_code": self.human.exit_code},
            "machine": {"out": self.machine.out, "exit_code": self.machine.exit_code},
        }


def _split_label(label: str) -> tuple[str, str, str]:
    head, _, body = label.partition("//")
    package, _, name = body.partition(":")
    return head.lstrip("@"), package, name


def _as_label(value: object, path: str) -> str:
    """Validate a ``[@repo]//package[:name]`` label and return its canonical form.

    ``//pkg`` becomes ``//pkg:pkg`` and ``@//pkg:lib`` becomes ``//pkg:lib``. Each
    part ends up in a report path, so empty, ``.`` and ``..`` segments are
    rejected.
    """

    parsed = _as_str(value, path)
    head, sep, body = parsed.partition("//")
    if not sep or (head and not head.startswith("@")):
        _fail(path, f"label {parsed!r} must look like [@repo]//package:name")
    repository = head.lstrip("@")
    package, colon, name = body.partition(":")
    if not colon:
        name = package.rsplit("/", 1)[-1]
    if not name:
        _fail(path, f"label {parsed!r} has no target name")
    if "/" in repository:
        _fail(path, f"label {parsed!r} has an invalid repository {repository!r}")
    for part, value_name in ((repository, "repository"), (package, "package"), (name, "name")):
        if part and any(segment in ("", ".", "..") for segment in part.split("/")):
            _fail(path, f"label {parsed!r} has an invalid {value_name} {part!r}")

    prefix = f"@{repository}" if repository else ""
    return f"{prefix}//{package}:{name}"


def _as_path(value: object, path: str) -> str:
    return _as_str(value, path, max_len=_MAX_PATH_LENGTH)


def _as_str(value: object, path: str, *, max_len: int = 256) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    parsed = value.strip()
    if not parsed:
        _fail(path, "must not be empty")
    if len(parsed) > max_len:
        _fail(path, f"must be <= {max_len} characters")
    return parsed


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


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
