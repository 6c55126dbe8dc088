"""Target and source selection for the type-check overlay."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from lint_overlay.constants import PYTHON_SOURCE_EXTENSIONS
from lint_overlay.domain.models import SourceFile


def should_visit(kind: str, rule_kinds: Collection[str]) -> bool:
    """Return True when targets of ``kind`` are in the configured allow-set."""

    return kind in rule_kinds


def is_checkable(src: SourceFile) -> bool:
    return src.is_source and src.extension in PYTHON_SOURCE_EXTENSIONS


def filter_srcs(srcs: Iterable[SourceFile]) -> tuple[str, ...]:
    """Return the paths of checkable sources in declaration order."""

    return tuple(src.path for src in srcs if is_checkable(src))


__all__ = ["filter_srcs", "is_checkable", "should_visit"]
