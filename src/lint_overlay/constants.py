"""Stable constants shared by the overlay, the host and the CLI."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Action mnemonic; also the infix of every report file name.
MYPY_MNEMONIC: Final[str] = "AspectRulesLintMypy"
NOOP_MNEMONIC: Final[str] = "AspectRulesLintNoop"

# Target kinds visited when the caller does not configure an allow-set.
DEFAULT_RULE_KINDS: Final[tuple[str, ...]] = ("py_binary", "py_library")

# File extensions the type checker accepts.
PYTHON_SOURCE_EXTENSIONS: Final[frozenset[str]] = frozenset({".py", ".pyi"})

COLOR_OPTION: Final[str] = "--color=always"
CONFIG_OPTION_FORMAT: Final[str] = "--config={path}"

# Report file name suffixes: human out/exit code, machine out/exit code.
HUMAN_OUT_SUFFIX: Final[str] = "out"
HUMAN_EXIT_CODE_SUFFIX: Final[str] = "exit_code"
MACHINE_OUT_SUFFIX: Final[str] = "report"
MACHINE_EXIT_CODE_SUFFIX: Final[str] = "report.exit_code"
OUTFILE_FORMAT: Final[str] = "{name}.{mnemonic}.{suffix}"
# Reports of external-repository targets live under <root>/external/<repo>/.
EXTERNAL_DIR: Final[str] = "external"

DEFAULT_OUTPUT_ROOT: Final[PurePosixPath] = PurePosixPath("lint-out")
DEFAULT_OPTIONS_FILE: Final[str] = "lint_overlay.toml"
ENV_PREFIX: Final[str] = "LINT_OVERLAY_"

__all__ = [
    "COLOR_OPTION",
    "CONFIG_OPTION_FORMAT",
    "DEFAULT_OPTIONS_FILE",
    "DEFAULT_OUTPUT_ROOT",
    "DEFAULT_RULE_KINDS",
    "ENV_PREFIX",
    "EXTERNAL_DIR",
    "HUMAN_EXIT_CODE_SUFFIX",
    "HUMAN_OUT_SUFFIX",
    "MACHINE_EXIT_CODE_SUFFIX",
    "MACHINE_OUT_SUFFIX",
    "MYPY_MNEMONIC",
    "NOOP_MNEMONIC",
    "OUTFILE_FORMAT",
    "PYTHON_SOURCE_EXTENSIONS",
]
