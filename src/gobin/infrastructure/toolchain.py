"""Subprocess execution for go commands.

:class:`ToolchainInvoker` is the only component that spawns toolchain
subprocesses. The actual spawning goes through a :class:`CommandExecutor`
so tests can substitute a scripted fake without patching ``subprocess``.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gobin.errors import ToolchainError

logger = logging.getLogger(__name__)

# Environment variables shown in debug traces.
_TRACE_ENV_PREFIX = "GO"


@dataclass
class CommandResult:
    """Outcome of one subprocess (decoupled from ``subprocess``)."""

    returncode: int
    stdout: str
    stderr: str
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    """Runs one command to completion and captures its output."""

    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> CommandResult:
        """Run *args* in *cwd* with exactly *env*."""
        ...


class LocalExecutor:
    """Runs commands as local subprocesses (no timeout).

    Output is decoded as UTF-8; undecodable bytes (a cgo compiler quoting a
    Latin-1 file name) are kept as ``\\xNN`` escapes.
    """

    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> CommandResult:
        r = subprocess.run(
            list(args),
            capture_output=True,
            encoding="utf-8",
            errors="backslashreplace",
            cwd=cwd,
            env=dict(env),
            check=False,
        )
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=r.stderr)


_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """Return the process-wide default executor."""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """Replace the process-wide default executor."""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


def trace_env(env: Mapping[str, str]) -> dict[str, str]:
    """The ``GO*`` subset of *env*, for debug output."""
    return {k: v for k, v in sorted(env.items()) if k.startswith(_TRACE_ENV_PREFIX)}


class ToolchainInvoker:
    """Run go commands, failing loudly with captured diagnostics.

    Args:
        executor: Executor to spawn with (default: the process-wide one).
        debug: Log command line, ``GO*`` environment and timing on success.
    """

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        *,
        debug: bool = False,
    ) -> None:
        self._executor = executor or get_executor()
        self._debug = debug

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> CommandResult:
        """Run *args*; raise :class:`ToolchainError` on non-zero exit.

        The error message embeds the full command line, the exit status and
        everything the command wrote to stderr.
        """
        start = time.perf_counter()
        try:
            result = self._executor.execute(args, cwd=cwd, env=env)
        except OSError as exc:
            raise ToolchainError(args, str(exc)) from exc
        result.duration_ms = (time.perf_counter() - start) * 1000

        if not result.success:
            raise ToolchainError(
                args,
                f"exit status {result.returncode}",
                result.stderr,
                returncode=result.returncode,
            )

        if self._debug:
            logger.debug(
                "+ cd %s; %s %s # took %.1fms\n%s",
                cwd,
                " ".join(f"{k}={v}" for k, v in trace_env(env).items()),
                " ".join(args),
                result.duration_ms,
                result.stderr,
            )
        return result
