"""Exception hierarchy for gobin.

Every user-facing failure derives from :class:`GobinError`. The service
layer converts these into a failed ``ServiceResult``; the CLI prints the
message to stderr and exits 1.

:class:`InvariantError` is deliberately *not* a ``GobinError``: it marks a
defect in the resolution phase gating and must never be turned into an
ordinary error result.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gobin.domain.types import ResolutionFailure


class GobinError(Exception):
    """Base class for errors reported to the user."""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(GobinError):
    """Invalid flag combination or undiscoverable directory."""

    code = "CONFIG_ERROR"


class ToolchainError(GobinError):
    """A go command exited non-zero or could not be started."""

    code = "TOOLCHAIN_FAILED"

    def __init__(
        self,
        args: Sequence[str],
        reason: str,
        stderr: str = "",
        *,
        returncode: int | None = None,
    ) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        message = f"failed to run {' '.join(self.command)}: {reason}"
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)


class ToolchainOutputError(ToolchainError):
    """A go command succeeded but its structured output was unusable."""

    code = "TOOLCHAIN_OUTPUT"


class EncodingError(GobinError):
    """A module path, import path or version cannot be cache-encoded."""

    code = "ENCODING_ERROR"


class ResolutionError(GobinError):
    """One or more specs resolved to something other than a main package."""

    code = "NOT_MAIN_PACKAGE"

    def __init__(self, failures: Sequence[ResolutionFailure]) -> None:
        self.failures = list(failures)
        suffix = "s" if len(self.failures) > 1 else ""
        details = "; ".join(f.describe() for f in self.failures)
        super().__init__(f"failed to resolve module-based main package{suffix}: {details}")


class FilesystemError(GobinError):
    """Creating, removing or copying a file or directory failed."""

    code = "FILESYSTEM_ERROR"


class ExecError(GobinError):
    """The built binary could not be executed in run mode."""

    code = "EXEC_FAILED"


class InvariantError(RuntimeError):
    """Internal consistency check failed; indicates a bug in gobin."""
