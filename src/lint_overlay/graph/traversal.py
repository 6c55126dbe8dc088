"""Dependency-ordered traversal that applies an overlay visitor to every target."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from lint_overlay.domain.models import JSONValue, LintReport
from lint_overlay.graph.build_graph import BuildGraph
from lint_overlay.overlay.visitor import OverlayVisitor, VisitContext

_logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TraversalResult:
    """Reports keyed by label for visited targets, plus skipped labels."""

    order: tuple[str, ...]
    reports: dict[str, LintReport] = field(default_factory=dict)
    skipped: tuple[str, ...] = ()

    def report_for(self, label: str) -> LintReport | None:
        return self.reports.get(label)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "order": list(self.order),
            "reports": {label: self.reports[label].to_dict() for label in sorted(self.reports)},
            "skipped": list(self.skipped),
        }


def traverse(
    graph: BuildGraph,
    visitor: OverlayVisitor,
    context: VisitContext,
    *,
    logger: Any | None = None,
) -> TraversalResult:
    """Visit each target exactly once, dependencies first."""

    log = logger if logger is not None else _logger
    order = graph.topological_sort()
    reports: dict[str, LintReport] = {}
    skipped: list[str] = []

    for label in order:
        report = visitor.visit(graph.get(label), context)
        if report is None:
            skipped.append(label)
        else:
            reports[label] = report

    log.info(
        "traversal_finished",
        targets=len(order),
        reports=len(reports),
        skipped=len(skipped),
    )
    return TraversalResult(order=order, reports=reports, skipped=tuple(skipped))


__all__ = ["TraversalResult", "traverse"]
