"""Unit tests for the target graph and manifest loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lint_overlay.domain.models import TargetNode
from lint_overlay.graph.build_graph import (
    BuildGraph,
    CycleError,
    ManifestError,
    load_build_graph,
    parse_build_graph,
)


def _node(label: str, *deps: str, kind: str = "py_library") -> TargetNode:
    return TargetNode(label=label, kind=kind, deps=deps)


@pytest.mark.unit
def test_topological_sort_places_dependencies_first_with_stable_tie_breaks() -> None:
    graph = BuildGraph(
        [
            _node("//app:bin", "//lib:b", "//lib:a"),
            _node("//lib:b", "//lib:a"),
            _node("//lib:a"),
            _node("//docs:site"),
        ]
    )

    assert graph.topological_sort() == ("//docs:site", "//lib:a", "//lib:b", "//app:bin")
    assert graph.find_cycle() == ()
    graph.validate()


@pytest.mark.unit
def test_cycle_error_names_one_loop_and_every_blocked_target() -> None:
    graph = BuildGraph(
        [
            _node("//a:x", "//b:y"),
            _node("//b:y", "//a:x"),
            _node("//c:z", "//c:z"),
            _node("//0:dependent", "//b:y"),
            _node("//ok:leaf"),
        ]
    )

    # The walk enters the loop at //b:y but reports it from its smallest label.
    assert graph.find_cycle() == ("//a:x", "//b:y", "//a:x")
    with pytest.raises(CycleError) as excinfo:
        graph.topological_sort()
    assert excinfo.value.cycle == ("//a:x", "//b:y", "//a:x")
    assert excinfo.value.blocked == ("//0:dependent", "//a:x", "//b:y", "//c:z")
    assert str(excinfo.value) == (
        "dependency cycle: //a:x -> //b:y -> //a:x (4 target(s) blocked)"
    )


@pytest.mark.unit
def test_self_dependency_is_a_one_target_cycle() -> None:
    graph = BuildGraph([_node("//c:z", "//c:z"), _node("//d:w", "//c:z")])

    assert graph.find_cycle() == ("//c:z", "//c:z")
    with pytest.raises(CycleError, match=r"2 target\(s\) blocked"):
        graph.validate()


@pytest.mark.unit
def test_duplicate_and_undeclared_labels_are_rejected() -> None:
    graph = BuildGraph([_node("//a:x", "//missing:dep")])

    with pytest.raises(ValueError, match="duplicate target label"):
        graph.add_target(_node("//a:x"))
    graph.add_target(_node("//pkg"))
    with pytest.raises(ValueError, match="duplicate target label: //pkg:pkg"):
        graph.add_target(_node("//pkg:pkg"))
    with pytest.raises(ValueError, match="undeclared labels: //a:x -> //missing:dep"):
        graph.validate()
    with pytest.raises(KeyError, match="unknown target"):
        graph.get("//nope:nope")


@pytest.mark.unit
def test_manifest_is_loaded_from_yaml(tmp_path: Path) -> None:
    manifest = tmp_path / "build.yaml"
    manifest.write_text(
        "\n".join(
            [
                "targets:",
                "  - label: //pkg:lib",
                "    kind: py_library",
                "    srcs:",
                "      - pkg/a.py",
                "      - {path: pkg/gen.py, generated: true}",
                "    deps: [//base:core]",
                "    attrs: {visibility: public}",
                "  - label: //base:core",
                "    kind: py_library",
                "    srcs: [base/core.py]",
            ]
        ),
        encoding="utf-8",
    )

    graph = load_build_graph(manifest)

    assert graph.labels == ("//base:core", "//pkg:lib")
    lib = graph.get("//pkg:lib")
    assert [src.path for src in lib.srcs] == ["pkg/a.py", "pkg/gen.py"]
    assert [src.is_source for src in lib.srcs] == [True, False]
    assert lib.deps == ("//base:core",)
    assert lib.attrs == {"visibility": "public"}
    assert graph.topological_sort() == ("//base:core", "//pkg:lib")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "message"),
    [
        (["not", "a", "mapping"], "expected mapping at top level"),
        ({"targets": {"label": "//a:b"}}, "'targets' must be a list"),
        ({"targets": [{"label": "//a:b", "kind": "py_library", "tags": []}]}, "unexpected"),
        ({"targets": [{"label": "//a:b", "kind": "py_library", "srcs": [3]}]}, "srcs entries"),
        ({"targets": [{"label": "//a:", "kind": "py_library"}]}, "no target name"),
        ({"targets": [{"label": "//../x:y", "kind": "py_library"}]}, "invalid package"),
        (
            {"targets": [{"label": "//a:b", "kind": "py_library", "deps": ["//a:b"]}]},
            "cycle",
        ),
    ],
)
def test_invalid_manifests_raise_manifest_error(raw: object, message: str) -> None:
    with pytest.raises(ManifestError, match=message):
        parse_build_graph(raw, source="build.yaml")


@pytest.mark.unit
def test_unreadable_or_invalid_yaml_raises_manifest_error(tmp_path: Path) -> None:
    with pytest.raises(ManifestError, match="cannot read manifest"):
        load_build_graph(tmp_path / "missing.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("targets: [\n", encoding="utf-8")
    with pytest.raises(ManifestError, match="invalid YAML"):
        load_build_graph(broken)


@pytest.mark.unit
def test_empty_manifest_is_an_empty_graph() -> None:
    assert len(parse_build_graph(None)) == 0


@given(st.integers(min_value=1, max_value=12), st.data())
def test_random_dags_sort_dependencies_first(size: int, data: st.DataObject) -> None:
    labels = [f"//pkg:t{index:02d}" for index in range(size)]
    nodes = []
    for index, label in enumerate(labels):
        deps = data.draw(st.lists(st.sampled_from(labels[:index]), unique=True)) if index else []
        nodes.append(_node(label, *deps))

    order = BuildGraph(reversed(nodes)).topological_sort()
    position = {label: index for index, label in enumerate(order)}

    assert sorted(order) == sorted(labels)
    for node in nodes:
        assert all(position[dep] < position[node.label] for dep in node.deps)
