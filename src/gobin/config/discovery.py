"""Directory discovery: main module root, GOPATH, and the caches.

Walk-up finder locates ``go.mod``, similar to how git finds ``.git/``.
Home and cache directories follow the Go toolchain's own rules so gobin
shares the module download cache with ``go``.

Functions take an explicit *environ* mapping; only
:meth:`gobin.config.settings.GobinSettings.from_cli` passes the real
process environment.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from gobin.config.models import (
    MAIN_MODULE_CACHE_DIRNAME,
    MODULE_FILENAME,
    USER_CACHE_DIRNAME,
)
from gobin.errors import ConfigError


def find_main_module(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``go.mod``.

    Returns the directory containing it, or None if not found.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / MODULE_FILENAME).is_file():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def user_home_dir(environ: Mapping[str, str]) -> Path | None:
    """Home directory as the go command determines it."""
    if sys.platform == "win32":
        home = environ.get("USERPROFILE", "")
    elif sys.platform == "plan9":
        home = environ.get("home", "")
    else:
        home = environ.get("HOME", "")
    return Path(home) if home else None


def user_cache_dir(environ: Mapping[str, str]) -> Path:
    """Per-user cache root (``XDG_CACHE_HOME``, ``~/Library/Caches``, ...)."""
    if sys.platform == "win32":
        local = environ.get("LocalAppData", "")
        if not local:
            raise ConfigError("failed to determine user cache dir: %LocalAppData% is not defined")
        return Path(local)

    if sys.platform == "darwin":
        home = user_home_dir(environ)
        if home is None:
            raise ConfigError("failed to determine user cache dir: $HOME is not defined")
        return home / "Library" / "Caches"

    xdg = environ.get("XDG_CACHE_HOME", "")
    if xdg:
        return Path(xdg)
    home = user_home_dir(environ)
    if home is None:
        raise ConfigError(
            "failed to determine user cache dir: neither $XDG_CACHE_HOME nor $HOME are defined"
        )
    return home / ".cache"


def effective_gopath(gopath: str, environ: Mapping[str, str]) -> Path:
    """First element of ``GOPATH``, else ``~/go``."""
    if gopath:
        first = gopath.split(os.pathsep)[0]
        if first:
            return Path(first)
    home = user_home_dir(environ)
    if home is None:
        raise ConfigError("failed to determine user home directory")
    return home / "go"


def module_cache(gopath: Path) -> Path:
    """Root of the extracted module cache (``$GOPATH/pkg/mod``)."""
    return gopath / "pkg" / "mod"


def download_cache(gopath: Path) -> Path:
    """Module download cache, usable as a ``file://`` GOPROXY."""
    return module_cache(gopath) / "cache" / "download"


def artifact_cache(
    *,
    main_module_root: Path | None,
    environ: Mapping[str, str],
) -> Path:
    """Where built binaries are cached.

    Inside the main module when resolving through it, otherwise in the
    per-user cache directory.
    """
    if main_module_root is not None:
        return main_module_root / MAIN_MODULE_CACHE_DIRNAME
    return user_cache_dir(environ) / USER_CACHE_DIRNAME


def install_dir(gobin: str, gopath: Path) -> Path:
    """Install destination: ``GOBIN`` if set, else ``$GOPATH/bin``."""
    if gobin:
        return Path(gobin)
    return gopath / "bin"
