"""ResolveService: two-phase resolution of package specs.

Pipeline per invocation: LOCAL (every spec) → NETWORK (deferred specs).

LOCAL runs ``go get -d`` and ``go list -json`` with GOPROXY pointing at the
module download cache, so it succeeds only for versions already on disk.
A spec that fails there is deferred to NETWORK, unless ``-nonet`` is set,
in which case the failure is final. ``-u`` defers every spec.

NETWORK repeats the same steps with the caller's GOPROXY. Any failure there
is final.

A spec trusts its current version (skips ``go get``) when resolving through
the main module without an explicit version.

INVARIANT: no spec reaches NETWORK while ``-nonet`` is set.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from gobin.domain.spec import PackageSpec
from gobin.domain.types import (
    Resolution,
    ResolutionFailure,
    ResolvedMainPackage,
    ResolvedPackages,
)
from gobin.errors import InvariantError, ToolchainError, ToolchainOutputError
from gobin.infrastructure.environment import ProxyMode
from gobin.infrastructure.go import GO_COMMAND
from gobin.services.base import BaseService
from gobin.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class ResolveService(BaseService):
    """Resolves specs to main packages, local cache first."""

    @traced
    def resolve_all(self, specs: Sequence[PackageSpec]) -> list[Resolution]:
        """Resolve *specs* in order, returning one Resolution per spec.

        Raises:
            ToolchainError: A go command failed where no fallback applies.
            InvariantError: A spec was deferred to the network under -nonet.
        """
        resolved: dict[int, Resolution] = {}
        deferred: list[int] = []

        if self._settings.upgrade:
            deferred = list(range(len(specs)))
        else:
            with trace_span("resolve.local") as span:
                # TODO: local resolution of independent specs could run concurrently
                for i, spec in enumerate(specs):
                    outcome = self._resolve_local(spec)
                    if outcome is None:
                        deferred.append(i)
                    else:
                        resolved[i] = outcome
                if span:
                    span.annotate("deferred", len(deferred))

        if self._settings.nonet and deferred:
            msg = "network resolution requested with -nonet set"
            raise InvariantError(msg)

        with trace_span("resolve.network") as span:
            for i in deferred:
                resolved[i] = self._resolve(specs[i], ProxyMode.NETWORK)
            if span:
                span.annotate("specs", len(deferred))

        return [resolved[i] for i in range(len(specs))]

    def _resolve_local(self, spec: PackageSpec) -> Resolution | None:
        """Resolve from the download cache; None defers *spec* to the network."""
        try:
            return self._resolve(spec, ProxyMode.LOCAL)
        except ToolchainError as exc:
            if self._settings.nonet:
                raise
            logger.debug(
                "Local resolution of %s failed, deferring to network: %s",
                spec.raw_pattern,
                exc,
            )
            return None

    def _resolve(self, spec: PackageSpec, proxy: ProxyMode) -> Resolution:
        if not spec.trusts_current_version(main_module=self._settings.main_module):
            self._toolchain.fetch(spec.raw_pattern, cwd=spec.working_dir, proxy=proxy)
        return self._query(spec, proxy)

    def _query(self, spec: PackageSpec, proxy: ProxyMode) -> Resolution:
        """List *spec*'s packages; any non-main package fails the whole spec."""
        listed = self._toolchain.query(spec.package_pattern, cwd=spec.working_dir, proxy=proxy)

        version = spec.version_constraint
        packages: list[ResolvedMainPackage] = []
        for pkg in listed:
            version = pkg.module.version
            if not pkg.is_main:
                return ResolutionFailure(spec=spec, version=version)
            packages.append(ResolvedMainPackage.from_listed(pkg))

        if not packages:
            raise ToolchainOutputError(
                [GO_COMMAND, "list", "-json", spec.package_pattern],
                "no packages matched",
            )
        return ResolvedPackages(spec=spec, packages=tuple(packages), version=version)
