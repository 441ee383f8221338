"""Unified settings: CLI flags, Go environment, and discovered directories.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``GOBIN_*`` prefix for gobin's own options,
     ``GOPATH``/``GOFLAGS``/``GOBIN`` for the
     Go environment (:class:`GoEnv`)
  3. Code defaults

:meth:`GobinSettings.from_cli` validates flag combinations and performs all
directory discovery up front, so configuration errors surface before any
resolution work begins. The result is frozen and passed explicitly to every
component; nothing downstream reads flags or the environment on its own.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from gobin.config import discovery
from gobin.config.models import SELF_IMPORT_PATH, ModMode
from gobin.domain.types import ExecutionMode
from gobin.errors import ConfigError


class GoEnv(BaseSettings):
    """Go toolchain variables gobin reads from the process environment.

    ``GOPROXY`` is not among them: the network phase passes the caller's
    value through untouched.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    gopath: str = ""
    goflags: str = ""
    gobin: str = ""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> GoEnv:
        """Read the variables from *environ* only, never ``os.environ``."""
        return cls(**{name: environ.get(name.upper(), "") for name in cls.model_fields})


class CacheLayout(BaseModel):
    """Directories resolved once at startup."""

    model_config = {"frozen": True}

    gopath: Path
    download_cache: Path
    artifact_cache: Path
    install_dir: Path
    main_module_root: Path | None = None


def select_mode(
    *,
    run: bool = False,
    print_path: bool = False,
    print_version: bool = False,
    download_only: bool = False,
) -> ExecutionMode:
    """Map the mutually exclusive mode flags to an :class:`ExecutionMode`."""
    chosen = [
        mode
        for mode, flag in (
            (ExecutionMode.RUN, run),
            (ExecutionMode.PRINT, print_path),
            (ExecutionMode.VERSION, print_version),
            (ExecutionMode.DOWNLOAD, download_only),
        )
        if flag
    ]
    if len(chosen) > 1:
        raise ConfigError("the -run, -p, -v and -d flags are mutually exclusive")
    return chosen[0] if chosen else ExecutionMode.INSTALL


def parse_mod(value: str | None) -> ModMode | None:
    """Validate a ``-mod`` value; empty means not given."""
    if not value:
        return None
    try:
        return ModMode(value)
    except ValueError:
        msg = f"-mod has invalid value {value!r}"
        raise ConfigError(msg) from None


class GobinSettings(BaseSettings):
    """Immutable configuration for one gobin invocation.

    Attributes:
        cwd: Directory gobin was invoked from.
        mode: What to do with each built main package.
        main_module: Resolve through the enclosing main module (``-m``).
        mod: ``-mod`` value forwarded to the go command (implies -m).
        upgrade: Resolve via the network only (``-u``).
        nonet: Never fall back to the network (``-nonet``).
        debug: Trace every go invocation to stderr (``-debug``).
        go: Go environment variables.
        layout: Discovered directories.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "GOBIN_",
        "extra": "ignore",
    }

    cwd: Path = Field(default_factory=Path.cwd)

    # --- CLI flags ---
    mode: ExecutionMode = ExecutionMode.INSTALL
    main_module: bool = False
    mod: ModMode | None = None
    upgrade: bool = False
    nonet: bool = False
    debug: bool = False
    json_output: bool = False
    log_json: bool = False

    # --- Identity and environment ---
    self_import_path: str = SELF_IMPORT_PATH
    go: GoEnv = Field(default_factory=GoEnv)
    layout: CacheLayout

    @classmethod
    def from_cli(
        cls,
        *,
        run: bool = False,
        print_path: bool = False,
        print_version: bool = False,
        download_only: bool = False,
        mod: str | None = None,
        main_module: bool = False,
        upgrade: bool = False,
        nonet: bool = False,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
        **cli_flags: Any,
    ) -> GobinSettings:
        """Validate flags, discover directories, and build frozen settings.

        Raises:
            ConfigError: On an invalid flag combination or when a required
                directory (main module, home, user cache) cannot be found.
        """
        mode = select_mode(
            run=run,
            print_path=print_path,
            print_version=print_version,
            download_only=download_only,
        )
        mod_mode = parse_mod(mod)
        if mod_mode is not None:
            main_module = True
        if upgrade and nonet:
            raise ConfigError("the -u and -nonet flags are mutually exclusive")

        environ = os.environ if environ is None else environ
        if cwd is None:
            try:
                cwd = Path.cwd()
            except OSError as exc:
                msg = f"failed to get working directory: {exc}"
                raise ConfigError(msg) from exc
        cwd = cwd.resolve()

        go = GoEnv.from_environ(environ)

        gopath = discovery.effective_gopath(go.gopath, environ)

        main_root: Path | None = None
        if main_module:
            main_root = discovery.find_main_module(cwd)
            if main_root is None:
                raise ConfigError("could not find main module")

        layout = CacheLayout(
            gopath=gopath,
            download_cache=discovery.download_cache(gopath),
            artifact_cache=discovery.artifact_cache(
                main_module_root=main_root, environ=environ
            ),
            install_dir=discovery.install_dir(go.gobin, gopath),
            main_module_root=main_root,
        )

        try:
            return cls(
                cwd=cwd,
                mode=mode,
                main_module=main_module,
                mod=mod_mode,
                upgrade=upgrade,
                nonet=nonet,
                go=go,
                layout=layout,
                **cli_flags,
            )
        except ValidationError as exc:
            msg = f"invalid settings: {exc}"
            raise ConfigError(msg) from exc
