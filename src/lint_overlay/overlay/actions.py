"""
Construction of mypy actions.

Command line contract, see https://mypy.readthedocs.io/en/stable/command_line.html::

    <mypy> [options...] <src>... --config=<config>

The action is only described and submitted; the host decides when it runs.
"""

from __future__ import annotations

from collections.abc import Sequence

from lint_overlay.constants import CONFIG_OPTION_FORMAT, MYPY_MNEMONIC
from lint_overlay.domain.models import ExecutionMode, FailFast, ToolAction
from lint_overlay.execution.host import ActionSink


def mypy_arguments(
    srcs: Sequence[str],
    config: str,
    options: Sequence[str] = (),
) -> tuple[str, ...]:
    """Return ``options... srcs... --config=<config>``."""

    return (*options, *srcs, CONFIG_OPTION_FORMAT.format(path=config))


def mypy_action(
    sink: ActionSink,
    *,
    executable: str,
    srcs: Sequence[str],
    config: str,
    stdout: str,
    mode: ExecutionMode | None = None,
    options: Sequence[str] = (),
    label: str,
) -> ToolAction:
    """Describe one mypy run and submit it to ``sink``.

    Args:
        sink: host registry receiving the action
        executable: path of the mypy program
        srcs: python files to be checked, in declaration order
        config: mypy config file (setup.cfg, mypy.ini or .mypy)
        stdout: output file receiving mypy's stdout
        mode: ``Capture(exit_code_path)`` to record the exit status, or
            ``FailFast()`` (the default) to fail when mypy exits non-zero
        options: extra command-line options placed before the sources
        label: target label used in the progress message
    """

    if not srcs:
        raise ValueError("mypy_action: srcs must not be empty")

    action = ToolAction(
        mnemonic=MYPY_MNEMONIC,
        tool=executable,
        arguments=mypy_arguments(srcs, config, options),
        inputs=(*srcs, config),
        stdout=stdout,
        mode=mode if mode is not None else FailFast(),
        progress_message=f"Linting {label} with mypy",
    )
    sink.submit(action)
    return action


__all__ = ["mypy_action", "mypy_arguments"]
