"""GobinService: one invocation end to end.

Pipeline: SPECS → RESOLVE → CHECK → BUILD/DISPATCH → (EXEC)

Nothing is built until every spec has resolved; specs that name something
other than a main package are reported together. In run mode the process is
handed over only after all sandboxes have been removed.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from gobin.domain.spec import PackageSpec
from gobin.domain.types import ExecutionMode, ResolutionFailure, ResolvedPackages
from gobin.errors import ConfigError, GobinError, ResolutionError
from gobin.infrastructure.process import replace_process
from gobin.infrastructure.sandbox import Sandbox
from gobin.services.base import BaseService
from gobin.services.install import InstallOutcome, InstallService
from gobin.services.resolve import ResolveService
from gobin.services.result import ServiceResult
from gobin.services.telemetry import traced

if TYPE_CHECKING:
    from gobin.config.settings import GobinSettings
    from gobin.infrastructure.go import GoToolchain


def split_run_args(
    args: Sequence[str], mode: ExecutionMode
) -> tuple[list[str], list[str]]:
    """Separate package patterns from run arguments.

    In run mode only the first argument names a package; the rest are passed
    to the binary.
    """
    if mode is ExecutionMode.RUN and len(args) > 1:
        return [args[0]], list(args[1:])
    return list(args), []


class GobinService(BaseService):
    """Resolve, build, and dispatch a list of package patterns."""

    def __init__(
        self,
        settings: GobinSettings,
        toolchain: GoToolchain,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(settings, toolchain)
        self._environ = dict(os.environ if environ is None else environ)

    @traced
    def execute(self, args: Sequence[str]) -> ServiceResult:
        """Run the full pipeline for the command-line *args*."""
        op = str(self._settings.mode)
        patterns, run_args = split_run_args(args, self._settings.mode)

        try:
            if not patterns:
                raise ConfigError("need to provide at least one main package")
            with Sandbox() as sandbox:
                outcomes = self._resolve_and_install(patterns, run_args, sandbox)
            for outcome in outcomes:
                if outcome.exec_argv is not None:
                    replace_process(outcome.exec_argv, self._environ)
        except ResolutionError as exc:
            failures = [f.describe() for f in exc.failures]
            return ServiceResult.failure(op, exc, failures=failures)
        except GobinError as exc:
            return ServiceResult.failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"packages": [self._describe(o) for o in outcomes]},
            lines=[o.line for o in outcomes if o.line is not None],
        )

    def specs_for(self, patterns: Sequence[str], sandbox: Sandbox) -> list[PackageSpec]:
        """One spec per pattern, each with its resolution working directory."""
        specs: list[PackageSpec] = []
        for pattern in patterns:
            root = self._settings.layout.main_module_root
            wd = root if self._settings.main_module and root is not None else sandbox.create()
            specs.append(PackageSpec.parse(pattern, wd))
        return specs

    def _resolve_and_install(
        self,
        patterns: Sequence[str],
        run_args: Sequence[str],
        sandbox: Sandbox,
    ) -> list[InstallOutcome]:
        specs = self.specs_for(patterns, sandbox)
        resolutions = ResolveService(self._settings, self._toolchain).resolve_all(specs)

        failures = [r for r in resolutions if isinstance(r, ResolutionFailure)]
        if failures:
            raise ResolutionError(failures)

        installer = InstallService(self._settings, self._toolchain)
        outcomes: list[InstallOutcome] = []
        for resolution in resolutions:
            assert isinstance(resolution, ResolvedPackages)
            for package in resolution.packages:
                outcomes.append(installer.install(resolution.spec, package, run_args))
        return outcomes

    @staticmethod
    def _describe(outcome: InstallOutcome) -> dict[str, Any]:
        info: dict[str, Any] = {
            "import_path": outcome.package.import_path,
            "module": outcome.package.module.path,
            "version": outcome.package.module.version,
            "cache_path": str(outcome.target.binary_path),
        }
        if outcome.installed_to is not None:
            info["installed_to"] = str(outcome.installed_to)
        return info
