"""
Process execution seam used by the host to run tool actions.

``Invocation`` describes what to spawn and ``ProcessResult`` what came back.
``ProcessRunner`` is the protocol between them: unit tests plug in a fake
runner, the CLI uses ``SubprocessRunner``.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from lint_overlay.domain.models import JSONValue


@dataclass(frozen=True, slots=True)
class Invocation:
    """One process to spawn."""

    argv: tuple[str, ...]
    cwd: str | None = None
    env: Mapping[str, str] = field(default_factory=dict, hash=False)
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        argv = tuple(self.argv)
        if not argv or not all(isinstance(item, str) and item for item in argv):
            raise ValueError("Invocation.argv: expected non-empty strings")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError("Invocation.timeout_seconds: must be > 0")
        object.__setattr__(self, "argv", argv)
        object.__setattr__(self, "env", dict(sorted(self.env.items())))

    def environment(self) -> dict[str, str] | None:
        """Environment for the child, or None to inherit the parent's unchanged."""

        if not self.env:
            return None
        return {**os.environ, **self.env}


@dataclass(frozen=True, slots=True)
class ProcessResult:
    argv: tuple[str, ...]
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    timed_out: bool = False
    error: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "argv", tuple(self.argv))
        if self.timed_out and self.exit_code is not None:
            raise ValueError("ProcessResult.exit_code: a timed out process has no exit status")

    @property
    def completed(self) -> bool:
        """True when the process ran to the end and reported an exit status."""

        return self.exit_code is not None and not self.timed_out and self.error is None

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "argv": list(self.argv),
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
            "timed_out": self.timed_out,
            "error": self.error,
        }


@runtime_checkable
class ProcessRunner(Protocol):
    async def run(self, invocation: Invocation) -> ProcessResult: ...


class SubprocessRunner(ProcessRunner):
    """Spawns local processes with ``asyncio`` and captures both output streams."""

    def __init__(self, *, timeout_seconds: float | None = None) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("SubprocessRunner.timeout_seconds: must be > 0")
        self._timeout_seconds = timeout_seconds

    async def run(self, invocation: Invocation) -> ProcessResult:
        timeout = invocation.timeout_seconds
        if timeout is None:
            timeout = self._timeout_seconds
        started = time.perf_counter()

        try:
            process = await asyncio.create_subprocess_exec(
                *invocation.argv,
                cwd=invocation.cwd,
                env=invocation.environment(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            return ProcessResult(
                argv=invocation.argv,
                exit_code=None,
                duration_ms=_since(started),
                error=str(exc),
            )

        try:
            async with asyncio.timeout(timeout):
                stdout, stderr = await process.communicate()
        except TimeoutError:
            stdout, stderr = await _kill(process)
            return ProcessResult(
                argv=invocation.argv,
                exit_code=None,
                stdout=_decode(stdout),
                stderr=_decode(stderr),
                duration_ms=_since(started),
                timed_out=True,
                error=f"timed out after {timeout:g}s",
            )
        except asyncio.CancelledError:
            await _kill(process)
            raise

        return ProcessResult(
            argv=invocation.argv,
            exit_code=process.returncode,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            duration_ms=_since(started),
        )


async def _kill(process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
    with suppress(ProcessLookupError):
        process.kill()
    return await process.communicate()


def _since(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


__all__ = ["Invocation", "ProcessResult", "ProcessRunner", "SubprocessRunner"]
