"""InstallService: build main packages into the cache and act on them.

Pipeline per package: TARGET → BUILD → DISPATCH

* TARGET: cache directory from the module coordinate and import path.
* BUILD: ``go install`` with ``GOBIN`` set to the target directory and the
  local file proxy (dependencies are already fetched by resolution).
* DISPATCH by execution mode: nothing (download), print the cache path,
  print the module version, hand over to the binary (run), or copy it to
  the install directory (install).

Building gobin itself first removes the cached binary so a stale copy of
the tool is never linked or executed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel

from gobin.domain.encoding import binary_name, cache_target
from gobin.domain.spec import PackageSpec
from gobin.domain.types import CacheTarget, ExecutionMode, ResolvedMainPackage
from gobin.infrastructure import filesystem
from gobin.services.base import BaseService
from gobin.services.telemetry import trace_span

logger = logging.getLogger(__name__)


class InstallOutcome(BaseModel):
    """What happened to one main package.

    Attributes:
        package: The package that was built.
        target: Its location in the artifact cache.
        line: Output line for the user, if any.
        installed_to: Published binary path (install mode).
        exec_argv: Command to hand the process over to (run mode).
    """

    model_config = {"frozen": True}

    package: ResolvedMainPackage
    target: CacheTarget
    line: str | None = None
    installed_to: Path | None = None
    exec_argv: tuple[str, ...] | None = None


class InstallService(BaseService):
    """Builds resolved main packages and dispatches on the execution mode."""

    def is_self(self, package: ResolvedMainPackage) -> bool:
        return package.import_path == self._settings.self_import_path

    def target_for(self, package: ResolvedMainPackage) -> CacheTarget:
        return cache_target(self._settings.layout.artifact_cache, package)

    def build(self, spec: PackageSpec, package: ResolvedMainPackage) -> CacheTarget:
        """Build *package* into its cache target, resolving from *spec*'s sandbox."""
        target = self.target_for(package)
        if self.is_self(package):
            filesystem.remove_stale(target.binary_path)
        self._toolchain.install(
            package.import_path,
            cwd=spec.working_dir,
            target_dir=target.directory,
        )
        return target

    def install(
        self,
        spec: PackageSpec,
        package: ResolvedMainPackage,
        run_args: Sequence[str] = (),
    ) -> InstallOutcome:
        """Build *package* and perform the configured mode's action."""
        with trace_span(f"install {package.import_path}"):
            target = self.build(spec, package)

        mode = self._settings.mode
        if mode is ExecutionMode.DOWNLOAD:
            return InstallOutcome(package=package, target=target)
        if mode is ExecutionMode.PRINT:
            return InstallOutcome(package=package, target=target, line=str(target.binary_path))
        if mode is ExecutionMode.VERSION:
            line = f"{package.module.path} {package.module.version}"
            return InstallOutcome(package=package, target=target, line=line)
        if mode is ExecutionMode.RUN:
            argv = (str(target.binary_path), *run_args)
            return InstallOutcome(package=package, target=target, exec_argv=argv)

        dest = self.publish(package, target)
        line = f"Installed {package.import_path}@{package.module.version} to {dest}"
        return InstallOutcome(package=package, target=target, line=line, installed_to=dest)

    def publish(self, package: ResolvedMainPackage, target: CacheTarget) -> Path:
        """Copy the cached binary into the install directory."""
        install_dir = filesystem.ensure_dir(self._settings.layout.install_dir)
        dest = install_dir / binary_name(package.import_path)

        exclusive = self.is_self(package)
        if exclusive:
            # The destination may be the running gobin; never write through it.
            filesystem.remove_stale(dest)

        filesystem.publish_binary(target.binary_path, dest, exclusive=exclusive)
        logger.debug("Published %s to %s", target.binary_path, dest)
        return dest
