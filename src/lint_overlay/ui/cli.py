"""Command-line interface router for lint-overlay."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from lint_overlay.config import OptionsLoadError, OverlayConfig, load_config
from lint_overlay.execution import ActionGraph, SubprocessRunner, run_actions
from lint_overlay.graph import BuildGraph, ManifestError, load_build_graph, traverse
from lint_overlay.observability import LoggingConfig, setup_logging
from lint_overlay.overlay import (
    MypyVisitor,
    VisitContext,
    VisitorConfigError,
    lint_mypy_visitor,
)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="lint-overlay",
        description=(
            "lint-overlay: type-check build targets with mypy.\n\n"
            "Common workflows:\n"
            "  lint-overlay plan build.yaml    Describe the mypy actions as JSON\n"
            "  lint-overlay check build.yaml   Describe and run them\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("manifest", help="YAML target manifest.")
    common.add_argument(
        "--options",
        dest="options_path",
        default=None,
        help="Path to lint_overlay.toml (default: ./lint_overlay.toml if present).",
    )
    common.add_argument("--mypy", dest="binary", default=None, help="mypy executable.")
    common.add_argument("--mypy-config", dest="mypy_config", default=None, help="mypy config.")
    common.add_argument(
        "--rule-kind",
        dest="rule_kinds",
        action="append",
        default=None,
        help="Target kind to visit; repeat for several (default: py_binary, py_library).",
    )
    common.add_argument(
        "--color",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Ask mypy for ANSI colors in the human report.",
    )
    common.add_argument(
        "--fail-on-violation",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fail the run on any type error instead of recording exit codes.",
    )
    common.add_argument("--output-root", default=None, help="Directory receiving reports.")
    common.add_argument("--verbose", "-v", action="store_true", default=False)

    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        parents=[common],
        help="Describe the actions for every target without running them",
    )
    plan_parser.set_defaults(handler=_cmd_plan)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Describe and execute the actions",
    )
    check_parser.add_argument("--jobs", "-j", dest="jobs", type=int, default=None)
    check_parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        default=False,
        help="Emit the run summary as JSON.",
    )
    check_parser.set_defaults(handler=_cmd_check)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_plan(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _setup_logging(config)
    graph = _load_graph(args)
    if config.config is None:
        raise CLIError("a mypy config file is required (--mypy-config or [mypy] config)")

    try:
        visitor = MypyVisitor(
            executable=config.binary,
            config=config.config,
            rule_kinds=config.rule_kinds,
            policy=config.policy,
        )
    except VisitorConfigError as exc:
        raise CLIError(str(exc)) from exc

    sink = ActionGraph()
    result = traverse(
        graph,
        visitor,
        VisitContext(sink=sink, options=config.options, output_root=config.output_root),
    )
    _emit_json(
        {
            "command": "plan",
            "traversal": result.to_dict(),
            "actions": [action.to_dict() for action in sink.actions],
        }
    )
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _setup_logging(config)
    graph = _load_graph(args)
    if config.config is None:
        raise CLIError("a mypy config file is required (--mypy-config or [mypy] config)")

    try:
        visitor = lint_mypy_visitor(
            config.binary,
            config.config,
            config.rule_kinds,
            policy=config.policy,
        )
    except VisitorConfigError as exc:
        raise CLIError(str(exc)) from exc

    sink = ActionGraph()
    traversal = traverse(
        graph,
        visitor,
        VisitContext(sink=sink, options=config.options, output_root=config.output_root),
    )
    schedule = asyncio.run(
        run_actions(
            sink.actions,
            SubprocessRunner(timeout_seconds=config.timeout_seconds),
            max_concurrency=config.max_concurrency,
        )
    )

    if getattr(args, "json_output", False):
        _emit_json(
            {
                "command": "check",
                "succeeded": schedule.succeeded,
                "traversal": traversal.to_dict(),
                "schedule": schedule.to_dict(),
            }
        )
    else:
        for label in sorted(traversal.reports):
            report = traversal.reports[label]
            print(f"{label}: {report.human.out}")
        for failure in schedule.failures:
            print(f"FAILED {failure.describe()}", file=sys.stderr)
        print(
            f"{len(traversal.reports)} target(s) reported, "
            f"{len(traversal.skipped)} skipped, "
            f"{len(schedule.failures)} failed action(s)"
        )
    return 0 if schedule.succeeded else 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> OverlayConfig:
    overrides: dict[str, object] = {
        "lint.color": args.color,
        "lint.fail_on_violation": args.fail_on_violation,
        "mypy.binary": args.binary,
        "mypy.config": args.mypy_config,
        "mypy.rule_kinds": args.rule_kinds,
        "run.output_root": args.output_root,
        "run.max_concurrency": getattr(args, "jobs", None),
    }
    if args.verbose:
        overrides["run.log_level"] = "DEBUG"
    try:
        return load_config(args.options_path, cli_overrides=overrides)
    except OptionsLoadError as exc:
        raise CLIError(str(exc)) from exc


def _load_graph(args: argparse.Namespace) -> BuildGraph:
    try:
        return load_build_graph(Path(args.manifest))
    except ManifestError as exc:
        raise CLIError(str(exc)) from exc


def _setup_logging(config: OverlayConfig) -> None:
    setup_logging(
        LoggingConfig(
            level=config.log_level,
            json_output=config.log_json,
            log_file=config.log_file,
        )
    )


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


__all__ = ["CLIError", "build_parser", "run_cli"]
