"""Target graph with deterministic dependency-first ordering and a YAML manifest loader."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from heapq import heapify, heappop, heappush
from pathlib import Path

import yaml

from lint_overlay.domain.models import SourceFile, TargetNode


class CycleError(ValueError):
    """Raised when some targets can never be ordered after their dependencies.

    ``blocked`` holds every target the ordering could not reach, which includes
    targets that merely depend on a cycle. ``cycle`` is one dependency loop among
    them, closed on its first label.
    """

    def __init__(self, blocked: Iterable[str], cycle: Iterable[str]) -> None:
        self.blocked = tuple(sorted(blocked))
        self.cycle = tuple(cycle)
        super().__init__(
            f"dependency cycle: {' -> '.join(self.cycle)} "
            f"({len(self.blocked)} target(s) blocked)"
        )


class ManifestError(ValueError):
    """Raised when a target manifest cannot be parsed."""


class BuildGraph:
    """Targets keyed by label with ``dep -> dependent`` edges."""

    __slots__ = ("_targets",)

    def __init__(self, targets: Iterable[TargetNode] = ()) -> None:
        self._targets: dict[str, TargetNode] = {}
        for target in targets:
            self.add_target(target)

    def add_target(self, target: TargetNode) -> None:
        if target.label in self._targets:
            raise ValueError(f"duplicate target label: {target.label}")
        self._targets[target.label] = target

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(sorted(self._targets))

    def get(self, label: str) -> TargetNode:
        try:
            return self._targets[label]
        except KeyError:
            raise KeyError(f"unknown target: {label}") from None

    def __contains__(self, label: object) -> bool:
        return label in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def validate(self) -> None:
        """Raise ``ValueError`` for undeclared deps and ``CycleError`` for cycles."""

        missing = sorted(
            (target.label, dep)
            for target in self._targets.values()
            for dep in target.deps
            if dep not in self._targets
        )
        if missing:
            preview = ", ".join(f"{label} -> {dep}" for label, dep in missing[:5])
            raise ValueError(f"targets depend on undeclared labels: {preview}")
        self.topological_sort()

    def topological_sort(self) -> tuple[str, ...]:
        """Return labels with every dependency before its dependents, or raise ``CycleError``."""

        order, blocked = self._kahn()
        if blocked:
            raise CycleError(blocked, self._walk_cycle(blocked))
        return order

    def find_cycle(self) -> tuple[str, ...]:
        """Return one dependency loop such as ``("//a:x", "//b:y", "//a:x")``, or ``()``."""

        _, blocked = self._kahn()
        return self._walk_cycle(blocked) if blocked else ()

    def _kahn(self) -> tuple[tuple[str, ...], frozenset[str]]:
        children = self._children()
        indegree: dict[str, int] = {
            label: sum(1 for dep in set(target.deps) if dep in self._targets)
            for label, target in self._targets.items()
        }
        ready: list[str] = [label for label, degree in indegree.items() if degree == 0]
        heapify(ready)

        order: list[str] = []
        while ready:
            label = heappop(ready)
            order.append(label)
            for child in sorted(children[label]):
                indegree[child] -= 1
                if indegree[child] == 0:
                    heappush(ready, child)

        return tuple(order), frozenset(self._targets).difference(order)

    def _walk_cycle(self, blocked: frozenset[str]) -> tuple[str, ...]:
        # Every blocked target has a blocked dependency, so following the
        # smallest one from any blocked target must revisit a label.
        seen: dict[str, int] = {}
        path: list[str] = []
        label = min(blocked)
        while label not in seen:
            seen[label] = len(path)
            path.append(label)
            label = min(dep for dep in self._targets[label].deps if dep in blocked)
        loop = path[seen[label] :]
        start = loop.index(min(loop))
        loop = loop[start:] + loop[:start]
        return (*loop, loop[0])

    def _children(self) -> dict[str, set[str]]:
        children: dict[str, set[str]] = {label: set() for label in self._targets}
        for label, target in self._targets.items():
            for dep in target.deps:
                if dep in children:
                    children[dep].add(label)
        return children


def load_build_graph(path: str | Path) -> BuildGraph:
    """Load a YAML target manifest.

    Expected shape::

        targets:
          - label: //pkg:lib
            kind: py_library
            srcs: [pkg/a.py, {path: pkg/gen.py, generated: true}]
            deps: [//other:lib]
    """

    manifest_path = Path(path)
    try:
        raw = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(f"cannot read manifest {manifest_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ManifestError(f"invalid YAML in {manifest_path}: {exc}") from exc

    return parse_build_graph(raw, source=str(manifest_path))


def parse_build_graph(raw: object, *, source: str = "<manifest>") -> BuildGraph:
    if raw is None:
        return BuildGraph()
    if not isinstance(raw, Mapping):
        raise ManifestError(f"{source}: expected mapping at top level")
    entries = raw.get("targets", [])
    if not isinstance(entries, list):
        raise ManifestError(f"{source}: 'targets' must be a list")

    graph = BuildGraph()
    for index, entry in enumerate(entries):
        try:
            graph.add_target(_parse_target(entry))
        except (TypeError, ValueError) as exc:
            raise ManifestError(f"{source}: targets[{index}]: {exc}") from exc
    try:
        graph.validate()
    except ValueError as exc:
        raise ManifestError(f"{source}: {exc}") from exc
    return graph


def _parse_target(entry: object) -> TargetNode:
    if not isinstance(entry, Mapping):
        raise TypeError("expected mapping")
    unknown = sorted(set(entry) - {"label", "kind", "srcs", "deps", "attrs"})
    if unknown:
        raise ValueError(f"unexpected fields: {unknown}")

    srcs: list[SourceFile] = []
    for item in _as_list(entry.get("srcs", []), "srcs"):
        if isinstance(item, str):
            srcs.append(SourceFile(item))
        elif isinstance(item, Mapping):
            srcs.append(
                SourceFile(
                    path=item.get("path"),  # type: ignore[arg-type]
                    is_source=not bool(item.get("generated", False)),
                )
            )
        else:
            raise TypeError(f"srcs entries must be strings or mappings, got {type(item).__name__}")

    attrs = entry.get("attrs", {})
    if not isinstance(attrs, Mapping):
        raise TypeError("attrs must be a mapping")

    return TargetNode(
        label=entry.get("label"),  # type: ignore[arg-type]
        kind=entry.get("kind"),  # type: ignore[arg-type]
        srcs=tuple(srcs),
        deps=tuple(_as_list(entry.get("deps", []), "deps")),
        attrs=dict(attrs),
    )


def _as_list(value: object, name: str) -> list[object]:
    if not isinstance(value, list):
        raise TypeError(f"{name} must be a list")
    return value


__all__ = ["BuildGraph", "CycleError", "ManifestError", "load_build_graph", "parse_build_graph"]
