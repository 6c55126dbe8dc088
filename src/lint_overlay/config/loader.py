"""
lint-overlay runtime config loader.

Precedence: CLI > env (``LINT_OVERLAY_``) > file > defaults. The file is TOML
(``lint_overlay.toml`` by default) loaded with ``tomllib``. Each scalar key maps
to an environment variable built from its table path, e.g. ``[lint] color`` is
``LINT_OVERLAY_LINT_COLOR``. Relative paths are resolved against the directory
of the config file.

Example::

    [lint]
    color = true
    fail_on_violation = false

    [mypy]
    binary = "mypy"
    config = ".mypy"
    rule_kinds = ["py_binary", "py_library"]
    human_mode = "capture"
    machine_mode = "fail_fast"

    [run]
    output_root = "lint-out"
    max_concurrency = 4
    log_file = "logs/lint-overlay.jsonl"
"""

from __future__ import annotations

import copy
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from lint_overlay.constants import (
    DEFAULT_OPTIONS_FILE,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_RULE_KINDS,
    ENV_PREFIX,
)
from lint_overlay.domain.models import JSONValue, LintOptions, ReportMode, ReportPolicy

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueType = Literal["str", "int", "float", "bool", "list"]

_SCHEMA: Final[dict[tuple[str, str], _ValueType]] = {
    ("lint", "color"): "bool",
    ("lint", "fail_on_violation"): "bool",
    ("mypy", "binary"): "str",
    ("mypy", "config"): "str",
    ("mypy", "rule_kinds"): "list",
    ("mypy", "human_mode"): "str",
    ("mypy", "machine_mode"): "str",
    ("run", "output_root"): "str",
    ("run", "max_concurrency"): "int",
    ("run", "timeout_seconds"): "float",
    ("run", "log_level"): "str",
    ("run", "log_json"): "bool",
    ("run", "log_file"): "str",
}

_PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("mypy", "config"),
    ("run", "output_root"),
    ("run", "log_file"),
)


class OptionsLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


@dataclass(frozen=True, slots=True)
class OverlayConfig:
    """Effective configuration for one invocation."""

    options: LintOptions
    policy: ReportPolicy
    binary: str
    config: str | None
    rule_kinds: tuple[str, ...]
    output_root: str
    max_concurrency: int
    timeout_seconds: float | None
    log_level: str
    log_json: bool
    log_file: str | None = None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "lint": self.options.to_dict(),
            "mypy": {
                "binary": self.binary,
                "config": self.config,
                "rule_kinds": list(self.rule_kinds),
                "human_mode": self.policy.human.value,
                "machine_mode": self.policy.machine.value,
            },
            "run": {
                "output_root": self.output_root,
                "max_concurrency": self.max_concurrency,
                "timeout_seconds": self.timeout_seconds,
                "log_level": self.log_level,
                "log_json": self.log_json,
                "log_file": self.log_file,
            },
        }


def default_config() -> dict[str, Any]:
    return {
        "lint": {"color": False, "fail_on_violation": False},
        "mypy": {
            "binary": "mypy",
            "rule_kinds": list(DEFAULT_RULE_KINDS),
            "human_mode": ReportMode.CAPTURE.value,
            "machine_mode": ReportMode.FAIL_FAST.value,
        },
        "run": {
            "output_root": str(DEFAULT_OUTPUT_ROOT),
            "max_concurrency": 4,
            "log_level": "INFO",
            "log_json": False,
        },
    }


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> OverlayConfig:
    """Load effective config with precedence CLI > env > file > defaults.

    ``cli_overrides`` keys are dotted paths such as ``"lint.color"``; ``None``
    values are ignored so argparse defaults can be passed through unchanged.
    """

    explicit_path = config_path is not None
    resolved_path = _resolve_config_path(config_path)
    env_map = dict(os.environ if environ is None else environ)

    merged = default_config()
    file_payload = _load_toml_file(resolved_path, required=explicit_path)
    _merge_validated(merged, file_payload, origin=str(resolved_path))
    _normalize_paths(merged, base_dir=resolved_path.parent)

    _merge_validated(merged, _collect_env_overrides(env_map), origin="environment")
    _merge_validated(merged, _materialize_cli_overrides(cli_overrides or {}), origin="cli")

    return _build(merged)


def _build(payload: Mapping[str, Any]) -> OverlayConfig:
    lint = payload["lint"]
    mypy = payload["mypy"]
    run = payload["run"]

    try:
        policy = ReportPolicy(human=mypy["human_mode"], machine=mypy["machine_mode"])
    except ValueError as exc:
        allowed = ", ".join(mode.value for mode in ReportMode)
        raise OptionsLoadError(f"mypy.human_mode/machine_mode must be one of: {allowed}") from exc

    max_concurrency = run["max_concurrency"]
    if max_concurrency <= 0:
        raise OptionsLoadError("run.max_concurrency must be > 0")
    timeout_seconds = run.get("timeout_seconds")
    if timeout_seconds is not None and timeout_seconds <= 0:
        raise OptionsLoadError("run.timeout_seconds must be > 0")

    return OverlayConfig(
        options=LintOptions(color=lint["color"], fail_on_violation=lint["fail_on_violation"]),
        policy=policy,
        binary=mypy["binary"],
        config=mypy.get("config"),
        rule_kinds=tuple(mypy["rule_kinds"]),
        output_root=run["output_root"],
        max_concurrency=max_concurrency,
        timeout_seconds=float(timeout_seconds) if timeout_seconds is not None else None,
        log_level=run["log_level"],
        log_json=run["log_json"],
        log_file=run.get("log_file"),
    )


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_OPTIONS_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise OptionsLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise OptionsLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise OptionsLoadError(f"unable to read config file {path}: {exc}") from exc


def _merge_validated(target: dict[str, Any], source: Mapping[str, object], *, origin: str) -> None:
    for section in sorted(source):
        values = source[section]
        if not isinstance(values, Mapping):
            raise OptionsLoadError(f"{origin}: [{section}] must be a table")
        for key in sorted(values):
            value_type = _SCHEMA.get((section, key))
            if value_type is None:
                raise OptionsLoadError(f"{origin}: unknown option {section}.{key}")
            target[section][key] = _check_type(values[key], value_type, f"{section}.{key}", origin)


def _check_type(value: object, value_type: _ValueType, name: str, origin: str) -> object:
    if value_type == "bool":
        ok = isinstance(value, bool)
    elif value_type == "int":
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif value_type == "float":
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif value_type == "list":
        ok = isinstance(value, list) and all(isinstance(item, str) for item in value)
    else:
        ok = isinstance(value, str)
    if not ok:
        raise OptionsLoadError(f"{origin}: {name} must be of type {value_type}")
    return copy.deepcopy(value)


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for (section, key), value_type in sorted(_SCHEMA.items()):
        env_name = _env_name_for_path((section, key))
        raw = environ.get(env_name)
        if raw is None:
            continue
        overrides.setdefault(section, {})[key] = _coerce_env(raw, value_type, env_name)
    return overrides


def _coerce_env(raw: str, value_type: _ValueType, env_name: str) -> object:
    value = raw.strip()
    if value_type == "str":
        return value
    if value_type == "list":
        return [item.strip() for item in value.split(",") if item.strip()]
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise OptionsLoadError(f"{env_name} must be an integer") from exc
    if value_type == "float":
        try:
            return float(value)
        except ValueError as exc:
            raise OptionsLoadError(f"{env_name} must be a number") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise OptionsLoadError(f"{env_name} must be a boolean (true/false/1/0/yes/no/on/off)")


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key in sorted(cli_overrides):
        value = cli_overrides[key]
        if value is None:
            continue
        section, _, name = key.partition(".")
        if not section or not name:
            raise OptionsLoadError(f"invalid CLI override key {key!r}")
        payload.setdefault(section, {})[name] = value
    return payload


def _normalize_paths(config: dict[str, Any], *, base_dir: Path) -> None:
    for section, key in _PATH_FIELDS:
        value = config[section].get(key)
        if isinstance(value, str):
            config[section][key] = _normalize_one_path(value, base_dir)

    binary = config["mypy"].get("binary")
    # Bare names are looked up on PATH later; only path-like binaries are anchored.
    if isinstance(binary, str) and "/" in binary:
        config["mypy"]["binary"] = _normalize_one_path(binary, base_dir)


def _normalize_one_path(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(str(candidate))).as_posix()


def _env_name_for_path(path: tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(part.upper() for part in path)


__all__ = [
    "OptionsLoadError",
    "OverlayConfig",
    "default_config",
    "load_config",
]
