"""AppContext: runtime wiring for one gobin invocation.

Created once by the CLI after settings have been validated. Configures
logging, builds the go toolchain lazily, and centralizes result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, NoReturn

import click

from gobin.output.formatters import format_result

if TYPE_CHECKING:
    from gobin.config.settings import GobinSettings
    from gobin.errors import GobinError
    from gobin.infrastructure.go import GoToolchain
    from gobin.infrastructure.toolchain import CommandExecutor
    from gobin.services.result import ServiceResult


def fail(exc: GobinError) -> NoReturn:
    """Report an error that occurred before an AppContext exists."""
    click.echo(str(exc), err=True)
    raise SystemExit(1)


class AppContext:
    """Shared runtime state for the gobin command.

    The toolchain is created on first use so flag errors and ``--help``
    never construct subprocess machinery.
    """

    def __init__(
        self,
        settings: GobinSettings,
        *,
        environ: Mapping[str, str] | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.settings = settings
        self.environ = dict(os.environ if environ is None else environ)
        self._executor = executor
        self._toolchain: GoToolchain | None = None

        from gobin.config.logging import configure_logging

        configure_logging(debug=settings.debug, log_json=settings.log_json)

        if settings.debug:
            from gobin.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def toolchain(self) -> GoToolchain:
        """The go toolchain (created lazily on first access)."""
        if self._toolchain is None:
            from gobin.infrastructure.environment import EnvironmentBuilder
            from gobin.infrastructure.go import GoToolchain
            from gobin.infrastructure.toolchain import ToolchainInvoker

            env = EnvironmentBuilder(
                self.environ,
                download_cache=self.settings.layout.download_cache,
                goflags=self.settings.go.goflags,
                mod=self.settings.mod,
            )
            invoker = ToolchainInvoker(self._executor, debug=self.settings.debug)
            self._toolchain = GoToolchain(invoker, env)
        return self._toolchain

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            if output:
                click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
