"""The three go operations gobin relies on.

* fetch: ``go get -d <pattern>`` adds or updates the requirement.
* query: ``go list -json <package>`` describes matching packages.
* install: ``go install <import path>`` builds into ``GOBIN``.

All of them run through :class:`~gobin.infrastructure.toolchain.ToolchainInvoker`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gobin.domain.types import ListedPackage
from gobin.errors import ToolchainOutputError
from gobin.infrastructure.environment import EnvironmentBuilder, ProxyMode
from gobin.infrastructure.toolchain import ToolchainInvoker

GO_COMMAND = "go"


def decode_json_stream(text: str) -> list[dict[str, Any]]:
    """Decode a sequence of concatenated JSON objects (``go list -json``).

    Raises:
        ValueError: If the stream is malformed or holds a non-object value.
    """
    decoder = json.JSONDecoder()
    records: list[dict[str, Any]] = []
    idx = 0
    end = len(text)
    while True:
        while idx < end and text[idx].isspace():
            idx += 1
        if idx >= end:
            return records
        obj, idx = decoder.raw_decode(text, idx)
        if not isinstance(obj, dict):
            msg = f"expected JSON object, got {type(obj).__name__}"
            raise ValueError(msg)
        records.append(obj)


class GoToolchain:
    """Builds go command lines and interprets their results."""

    def __init__(self, invoker: ToolchainInvoker, env: EnvironmentBuilder) -> None:
        self._invoker = invoker
        self._env = env

    def fetch(self, pattern: str, *, cwd: Path, proxy: ProxyMode) -> None:
        """Resolve *pattern* (``pkg[@version]``) into the go.mod in *cwd*."""
        self._invoker.run(
            [GO_COMMAND, "get", "-d", pattern],
            cwd=cwd,
            env=self._env.build(proxy),
        )

    def query(self, package: str, *, cwd: Path, proxy: ProxyMode) -> list[ListedPackage]:
        """List the packages matching *package* as seen from *cwd*."""
        args = [GO_COMMAND, "list", "-json", package]
        result = self._invoker.run(args, cwd=cwd, env=self._env.build(proxy))
        try:
            records = decode_json_stream(result.stdout)
            return [ListedPackage.model_validate(r) for r in records]
        except (ValueError, ValidationError) as exc:
            raise ToolchainOutputError(args, f"failed to decode output: {exc}") from exc

    def install(self, import_path: str, *, cwd: Path, target_dir: Path) -> None:
        """Build *import_path* into *target_dir* using only the local cache."""
        self._invoker.run(
            [GO_COMMAND, "install", import_path],
            cwd=cwd,
            env=self._env.build(ProxyMode.LOCAL, GOBIN=str(target_dir)),
        )
