"""Subprocess environments for go commands.

Every go invocation runs in module mode (``GO111MODULE=on``) with the user's
``GOFLAGS``, extended by ``-mod=<value>`` when ``-mod`` was given in
main-module mode. The proxy depends on the resolution phase:

* ``LOCAL``: ``GOPROXY=file://<module download cache>``, so nothing outside
  the on-disk cache can be fetched.
* ``NETWORK``: ``GOPROXY`` is left as inherited from the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path

from gobin.config.models import ModMode


class ProxyMode(StrEnum):
    """Where go may fetch modules from."""

    LOCAL = "local"
    NETWORK = "network"


def local_proxy_url(download_cache: Path) -> str:
    """``file://`` GOPROXY URL for the module download cache."""
    return download_cache.absolute().as_uri()


def merge_goflags(goflags: str, mod: ModMode | None) -> str:
    """Append ``-mod=<mod>`` to the user's GOFLAGS."""
    flags = goflags.split()
    if mod is not None:
        flags.append(f"-mod={mod}")
    return " ".join(flags)


class EnvironmentBuilder:
    """Build go command environments from a snapshot of the caller's env.

    Args:
        base: Environment inherited by every go command.
        download_cache: Module download cache used as the local proxy.
        goflags: The caller's ``GOFLAGS``.
        mod: ``-mod`` value; only honoured in main-module mode.
    """

    def __init__(
        self,
        base: Mapping[str, str],
        *,
        download_cache: Path,
        goflags: str = "",
        mod: ModMode | None = None,
    ) -> None:
        self._base = dict(base)
        self._local_proxy = local_proxy_url(download_cache)
        self._goflags = merge_goflags(goflags, mod)

    @property
    def local_proxy(self) -> str:
        return self._local_proxy

    def build(self, proxy: ProxyMode, **extra: str) -> dict[str, str]:
        """Environment for one go command under *proxy*, plus *extra* vars."""
        env = dict(self._base)
        env["GO111MODULE"] = "on"
        if proxy is ProxyMode.LOCAL:
            env["GOPROXY"] = self._local_proxy
        env["GOFLAGS"] = self._goflags
        env.update(extra)
        return env
