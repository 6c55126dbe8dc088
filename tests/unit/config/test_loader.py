"""Unit tests for runtime config loading and precedence."""

from __future__ import annotations

from pathlib import Path

import pytest

from lint_overlay.config.loader import OptionsLoadError, load_config
from lint_overlay.constants import DEFAULT_RULE_KINDS
from lint_overlay.domain.models import ReportMode


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "lint_overlay.toml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.unit
def test_defaults_apply_when_no_file_is_present(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config.options.color is False
    assert config.options.fail_on_violation is False
    assert config.binary == "mypy"
    assert config.config is None
    assert config.rule_kinds == DEFAULT_RULE_KINDS
    assert config.policy.human is ReportMode.CAPTURE
    assert config.policy.machine is ReportMode.FAIL_FAST
    assert config.max_concurrency == 4
    assert config.timeout_seconds is None
    assert config.output_root == (tmp_path / "lint-out").as_posix()
    assert config.log_file is None


@pytest.mark.unit
def test_file_paths_are_anchored_to_the_config_directory(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[lint]
color = true

[mypy]
binary = "tools/mypy"
config = ".mypy"
rule_kinds = ["py_library"]

[run]
output_root = "out"
timeout_seconds = 30
log_file = "logs/overlay.jsonl"
""",
    )

    config = load_config(path, environ={})

    assert config.options.color is True
    assert config.binary == (tmp_path / "tools" / "mypy").as_posix()
    assert config.config == (tmp_path / ".mypy").as_posix()
    assert config.rule_kinds == ("py_library",)
    assert config.output_root == (tmp_path / "out").as_posix()
    assert config.timeout_seconds == 30.0
    assert config.log_file == (tmp_path / "logs" / "overlay.jsonl").as_posix()
    assert config.to_dict()["run"]["log_file"] == config.log_file  # type: ignore[index]


@pytest.mark.unit
def test_cli_beats_env_beats_file(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "[lint]\ncolor = true\nfail_on_violation = false\n[run]\nmax_concurrency = 2\n",
    )
    environ = {
        "LINT_OVERLAY_LINT_COLOR": "off",
        "LINT_OVERLAY_LINT_FAIL_ON_VIOLATION": "yes",
        "LINT_OVERLAY_RUN_MAX_CONCURRENCY": "6",
        "LINT_OVERLAY_MYPY_RULE_KINDS": "py_library, py_test",
    }

    config = load_config(
        path,
        environ=environ,
        cli_overrides={"run.max_concurrency": 8, "lint.color": None},
    )

    assert config.options.color is False
    assert config.options.fail_on_violation is True
    assert config.max_concurrency == 8
    assert config.rule_kinds == ("py_library", "py_test")


@pytest.mark.unit
def test_log_file_can_come_from_the_environment(tmp_path: Path) -> None:
    path = _write(tmp_path, '[run]\nlog_file = "from-file.jsonl"\n')

    config = load_config(path, environ={"LINT_OVERLAY_RUN_LOG_FILE": "/var/log/overlay.jsonl"})

    assert config.log_file == "/var/log/overlay.jsonl"


@pytest.mark.unit
def test_bare_binary_names_are_left_for_path_lookup(tmp_path: Path) -> None:
    path = _write(tmp_path, '[mypy]\nbinary = "dmypy"\n')

    assert load_config(path, environ={}).binary == "dmypy"


@pytest.mark.unit
def test_to_dict_round_trips_the_effective_values(tmp_path: Path) -> None:
    path = _write(tmp_path, '[mypy]\nhuman_mode = "fail_fast"\nmachine_mode = "capture"\n')

    payload = load_config(path, environ={}).to_dict()

    assert payload["mypy"]["human_mode"] == "fail_fast"  # type: ignore[index]
    assert payload["mypy"]["machine_mode"] == "capture"  # type: ignore[index]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("[lint]\ncolor = 'yes'\n", "lint.color must be of type bool"),
        ("[lint]\nverbose = true\n", "unknown option lint.verbose"),
        ("lint = 3\n", r"\[lint\] must be a table"),
        ("[run]\nmax_concurrency = 0\n", "max_concurrency must be > 0"),
        ("[run]\ntimeout_seconds = -1\n", "timeout_seconds must be > 0"),
        ("[mypy]\nhuman_mode = 'sometimes'\n", "must be one of"),
        ("[lint\n", "invalid TOML"),
    ],
)
def test_invalid_files_raise(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(OptionsLoadError, match=message):
        load_config(_write(tmp_path, text), environ={})


@pytest.mark.unit
def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(OptionsLoadError, match="config file not found"):
        load_config(tmp_path / "nope.toml", environ={})


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("LINT_OVERLAY_LINT_COLOR", "maybe", "must be a boolean"),
        ("LINT_OVERLAY_RUN_MAX_CONCURRENCY", "many", "must be an integer"),
        ("LINT_OVERLAY_RUN_TIMEOUT_SECONDS", "soon", "must be a number"),
    ],
)
def test_invalid_env_values_raise(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
    message: str,
) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(OptionsLoadError, match=message):
        load_config(environ={name: value})


@pytest.mark.unit
def test_malformed_cli_override_key_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(OptionsLoadError, match="invalid CLI override key"):
        load_config(_write(tmp_path, ""), environ={}, cli_overrides={"color": True})
