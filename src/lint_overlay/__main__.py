"""Module entrypoint for ``python -m lint_overlay``."""

from __future__ import annotations

from lint_overlay.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
