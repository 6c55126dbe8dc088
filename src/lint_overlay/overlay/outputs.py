"""Report path allocation and the no-op placeholder for targets with nothing to check."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import PurePosixPath

from lint_overlay.constants import (
    EXTERNAL_DIR,
    HUMAN_EXIT_CODE_SUFFIX,
    HUMAN_OUT_SUFFIX,
    MACHINE_EXIT_CODE_SUFFIX,
    MACHINE_OUT_SUFFIX,
    NOOP_MNEMONIC,
    OUTFILE_FORMAT,
)
from lint_overlay.domain.models import (
    LintReport,
    ReportGroup,
    ReportMode,
    ReportPolicy,
    TargetNode,
    WriteEmptyAction,
)
from lint_overlay.execution.host import ActionSink


@dataclass(frozen=True, slots=True)
class ReportPaths:
    """The four artifact paths allocated for one target."""

    label: str
    human_out: str
    human_exit_code: str
    machine_out: str
    machine_exit_code: str

    def all(self) -> tuple[str, ...]:
        return (self.human_out, self.human_exit_code, self.machine_out, self.machine_exit_code)

    def report(self, policy: ReportPolicy) -> LintReport:
        """Report for checked targets: exit-code files only for capture-mode groups."""

        return LintReport(
            label=self.label,
            human=ReportGroup(
                out=self.human_out,
                exit_code=self.human_exit_code if policy.human is ReportMode.CAPTURE else None,
            ),
            machine=ReportGroup(
                out=self.machine_out,
                exit_code=self.machine_exit_code if policy.machine is ReportMode.CAPTURE else None,
            ),
        )

    def full_report(self) -> LintReport:
        return LintReport(
            label=self.label,
            human=ReportGroup(out=self.human_out, exit_code=self.human_exit_code),
            machine=ReportGroup(out=self.machine_out, exit_code=self.machine_exit_code),
        )


def output_files(
    mnemonic: str,
    node: TargetNode,
    output_root: str | PurePosixPath,
) -> ReportPaths:
    """Allocate ``<root>/<package>/<name>.<mnemonic>.<suffix>`` for each report file.

    Targets of an external repository go under ``<root>/external/<repo>/``.

    Raises:
        ValueError: when a path would resolve outside ``output_root``.
    """

    root = PurePosixPath(posixpath.normpath(str(output_root)))
    base = root
    if node.repository:
        base = base / EXTERNAL_DIR / node.repository
    if node.package:
        base = base / node.package

    def declare(suffix: str) -> str:
        filename = OUTFILE_FORMAT.format(name=node.name, mnemonic=mnemonic, suffix=suffix)
        return _confined(root, base / filename, node.label)

    return ReportPaths(
        label=node.label,
        human_out=declare(HUMAN_OUT_SUFFIX),
        human_exit_code=declare(HUMAN_EXIT_CODE_SUFFIX),
        machine_out=declare(MACHINE_OUT_SUFFIX),
        machine_exit_code=declare(MACHINE_EXIT_CODE_SUFFIX),
    )


def _confined(root: PurePosixPath, candidate: PurePosixPath, label: str) -> str:
    normalized = PurePosixPath(posixpath.normpath(str(candidate)))
    try:
        relative = normalized.relative_to(root)
    except ValueError:
        relative = None
    if relative is None or ".." in relative.parts:
        raise ValueError(f"report path {normalized} for {label} is outside {root}")
    return str(normalized)


def noop_lint_action(sink: ActionSink, paths: ReportPaths) -> LintReport:
    """Submit one action creating every report file empty, and return the report."""

    sink.submit(
        WriteEmptyAction(
            mnemonic=NOOP_MNEMONIC,
            outputs=paths.all(),
            progress_message=f"Writing empty lint reports for {paths.label}",
        )
    )
    return paths.full_report()


__all__ = ["ReportPaths", "noop_lint_action", "output_files"]
