"""Unit tests for shared value types."""

from __future__ import annotations

import pytest

from lint_overlay.domain.models import (
    Capture,
    FailFast,
    LintOptions,
    LintReport,
    ReportGroup,
    ReportMode,
    ReportPolicy,
    SourceFile,
    TargetNode,
    ToolAction,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("label", "canonical", "repository", "package", "name"),
    [
        ("//pkg/sub:lib", "//pkg/sub:lib", "", "pkg/sub", "lib"),
        ("//:tool", "//:tool", "", "", "tool"),
        ("//pkg/sub", "//pkg/sub:sub", "", "pkg/sub", "sub"),
        ("@repo//pkg:lib", "@repo//pkg:lib", "repo", "pkg", "lib"),
        ("@//pkg:lib", "//pkg:lib", "", "pkg", "lib"),
    ],
)
def test_label_parts(
    label: str, canonical: str, repository: str, package: str, name: str
) -> None:
    node = TargetNode(label=label, kind="py_library", deps=(label,))

    assert node.label == canonical
    assert node.deps == (canonical,)
    assert node.repository == repository
    assert node.package == package
    assert node.name == name


@pytest.mark.unit
@pytest.mark.parametrize(
    ("label", "message"),
    [
        ("//pkg:../../escape", "invalid name"),
        ("//pkg:sub/..", "invalid name"),
        ("///etc:lib", "invalid package"),
        ("//pkg/./x:lib", "invalid package"),
        ("//..:lib", "invalid package"),
        ("//pkg//sub:lib", "invalid package"),
        ("@..//pkg:lib", "invalid repository"),
        ("@a/b//pkg:lib", "invalid repository"),
        ("pkg:lib", "must look like"),
        ("repo//pkg:lib", "must look like"),
    ],
)
def test_labels_that_would_leave_the_output_root_are_rejected(label: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        TargetNode(label=label, kind="py_library")


@pytest.mark.unit
def test_target_node_normalizes_string_sources_and_is_hashable() -> None:
    node = TargetNode(
        label="//pkg:lib",
        kind="py_library",
        srcs=("pkg/a.py", SourceFile("pkg/gen.py", is_source=False)),  # type: ignore[arg-type]
        attrs={"visibility": "public"},
    )

    assert node.srcs == (SourceFile("pkg/a.py"), SourceFile("pkg/gen.py", is_source=False))
    assert node.srcs[0].extension == ".py"
    assert hash(node) == hash(TargetNode(label="//pkg:lib", kind="py_library", srcs=node.srcs))


@pytest.mark.unit
@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"label": "", "kind": "py_library"}, "TargetNode.label: must not be empty"),
        ({"label": "//pkg:lib", "kind": 3}, "TargetNode.kind: expected string"),
        ({"label": "//pkg:lib", "kind": "x", "srcs": (1,)}, r"TargetNode.srcs\[0\]"),
        ({"label": "//pkg:lib", "kind": "x", "deps": ("//a:",)}, "no target name"),
    ],
)
def test_target_node_validation(kwargs: dict[str, object], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        TargetNode(**kwargs)  # type: ignore[arg-type]


@pytest.mark.unit
def test_report_policy_accepts_strings_and_yields_to_fail_on_violation() -> None:
    policy = ReportPolicy(human="fail_fast", machine="capture")  # type: ignore[arg-type]

    assert policy.human is ReportMode.FAIL_FAST
    assert policy.resolve(LintOptions()) is policy
    forced = policy.resolve(LintOptions(fail_on_violation=True))
    assert forced == ReportPolicy(human=ReportMode.FAIL_FAST, machine=ReportMode.FAIL_FAST)
    with pytest.raises(ValueError):
        ReportPolicy(human="sometimes")  # type: ignore[arg-type]


@pytest.mark.unit
def test_lint_options_reject_non_booleans() -> None:
    with pytest.raises(ValueError, match="LintOptions.color"):
        LintOptions(color="yes")  # type: ignore[arg-type]


@pytest.mark.unit
def test_tool_action_rejects_unknown_modes() -> None:
    with pytest.raises(ValueError, match="ToolAction.mode"):
        ToolAction(
            mnemonic="m",
            tool="mypy",
            arguments=(),
            inputs=(),
            stdout="x.out",
            mode="capture",  # type: ignore[arg-type]
            progress_message="p",
        )
    assert FailFast() == FailFast()
    assert Capture(" x.exit_code ").exit_code_path == "x.exit_code"


@pytest.mark.unit
def test_lint_report_groups() -> None:
    report = LintReport(
        label="//pkg:lib",
        human=ReportGroup(out="h.out", exit_code="h.exit_code"),
        machine=ReportGroup(out="m.report"),
    )

    assert report.outputs() == ("h.out", "h.exit_code", "m.report")
    assert report.output_groups() == {
        "lint_human": ("h.out", "h.exit_code"),
        "lint_machine": ("m.report",),
    }
    assert report.to_dict()["machine"] == {"out": "m.report", "exit_code": None}
