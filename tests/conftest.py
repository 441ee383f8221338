"""Shared pytest fixtures and test helpers for gobin tests."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Generator, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from gobin.config.settings import GobinSettings
from gobin.infrastructure import toolchain
from gobin.infrastructure.environment import EnvironmentBuilder
from gobin.infrastructure.go import GoToolchain
from gobin.infrastructure.toolchain import CommandResult, ToolchainInvoker
from gobin.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root and gobin logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    gobin = logging.getLogger("gobin")
    gobin_level = gobin.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    gobin.setLevel(gobin_level)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """-debug enables telemetry for the rest of the context; undo it."""
    yield
    disable_telemetry()


# ---------------------------------------------------------------------------
# Isolated Go environment
# ---------------------------------------------------------------------------


@dataclass
class GoPaths:
    """Directories of the isolated environment created by ``go_env``."""

    root: Path
    home: Path
    gopath: Path
    cache: Path
    work: Path

    @property
    def bin(self) -> Path:
        return self.gopath / "bin"


@pytest.fixture
def go_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GoPaths:
    """Point HOME, GOPATH and the user cache into *tmp_path* and chdir there.

    Go variables that would change gobin's behaviour are removed so the
    developer's own environment never leaks into a test.
    """
    paths = GoPaths(
        root=tmp_path,
        home=tmp_path / "home",
        gopath=tmp_path / "gopath",
        cache=tmp_path / "cache",
        work=tmp_path / "work",
    )
    paths.home.mkdir()
    paths.work.mkdir()
    monkeypatch.setenv("HOME", str(paths.home))
    monkeypatch.setenv("GOPATH", str(paths.gopath))
    monkeypatch.setenv("XDG_CACHE_HOME", str(paths.cache))
    for var in ("GOBIN", "GOFLAGS", "GOPROXY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(paths.work)
    return paths


@pytest.fixture
def main_module(go_env: GoPaths) -> Path:
    """A main module (``go.mod``) rooted at the work directory."""
    (go_env.work / "go.mod").write_text("module example.com/project\n")
    return go_env.work.resolve()


# ---------------------------------------------------------------------------
# Scripted go command
# ---------------------------------------------------------------------------


@dataclass
class FakeModule:
    """A module the fake go command can resolve.

    Attributes:
        path: Module path.
        version: Version ``go get`` selects for it.
        packages: Import path -> package name for every package it provides.
    """

    path: str
    version: str
    packages: dict[str, str] = field(default_factory=dict)


def main_module_of(path: str, version: str) -> FakeModule:
    """Module whose root package is a main package."""
    return FakeModule(path, version, {path: "main"})


@dataclass
class GoCall:
    """One recorded go invocation."""

    args: list[str]
    cwd: Path
    env: dict[str, str]

    @property
    def verb(self) -> str:
        return self.args[1]

    @property
    def local(self) -> bool:
        return self.env.get("GOPROXY", "").startswith("file://")


def json_stream(*records: Mapping[str, Any]) -> str:
    """Render records the way ``go list -json`` does (concatenated objects)."""
    return "".join(json.dumps(r, indent="\t") + "\n" for r in records)


class FakeGo:
    """CommandExecutor that simulates ``go get -d``, ``go list`` and ``go install``.

    Modules in *local* are in the download cache; *network* modules are
    only reachable when GOPROXY is not the local ``file://`` proxy.
    ``go get`` records the selected module per working directory, and
    ``go list`` answers from that selection. ``listings`` overrides the
    ``go list`` output for a package pattern.
    """

    def __init__(
        self,
        *,
        local: Iterable[FakeModule] = (),
        network: Iterable[FakeModule] = (),
    ) -> None:
        self.local = list(local)
        self.network = list(network)
        self.listings: dict[str, str] = {}
        self.selected: dict[tuple[Path, str], FakeModule] = {}
        self.calls: list[GoCall] = []
        self.fail_install = False

    def require(self, cwd: Path, module: FakeModule) -> None:
        """Record *module* as already required by the go.mod in *cwd*."""
        self.selected[(Path(cwd), module.path)] = module

    def calls_for(self, verb: str) -> list[GoCall]:
        return [c for c in self.calls if c.verb == verb]

    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> CommandResult:
        call = GoCall(list(args), Path(cwd), dict(env))
        self.calls.append(call)
        handler = {"get": self._get, "list": self._list, "install": self._install}
        return handler[call.verb](call)

    def _reachable(self, call: GoCall) -> list[FakeModule]:
        if call.local:
            return list(self.local)
        return self.local + self.network

    def _get(self, call: GoCall) -> CommandResult:
        pkg, _, version = call.args[3].partition("@")
        candidates = [m for m in self._reachable(call) if pkg in m.packages]
        if version and version != "latest":
            candidates = [m for m in candidates if m.version == version]
        if not candidates:
            return CommandResult(1, "", f"go: cannot find module providing package {pkg}\n")
        module = candidates[-1]
        self.selected[(call.cwd, module.path)] = module
        return CommandResult(0, "", "")

    def _list(self, call: GoCall) -> CommandResult:
        pkg = call.args[3]
        if pkg in self.listings:
            return CommandResult(0, self.listings[pkg], "")
        for (cwd, _), module in self.selected.items():
            if cwd != call.cwd or pkg not in module.packages:
                continue
            if module not in self._reachable(call):
                return CommandResult(1, "", f"go: {module.path}@{module.version}: not in cache\n")
            record = {
                "ImportPath": pkg,
                "Name": module.packages[pkg],
                "Dir": f"/fake/{pkg}",
                "Module": {"Path": module.path, "Version": module.version},
            }
            return CommandResult(0, json_stream(record), "")
        return CommandResult(1, "", f"cannot find package {pkg!r}\n")

    def _install(self, call: GoCall) -> CommandResult:
        if self.fail_install:
            return CommandResult(2, "", "build failed\n")
        import_path = call.args[2]
        target_dir = Path(call.env["GOBIN"])
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / import_path.rsplit("/", 1)[-1]).write_text(f"binary {import_path}\n")
        return CommandResult(0, "", "")


@pytest.fixture
def fake_go(monkeypatch: pytest.MonkeyPatch) -> FakeGo:
    """Install a FakeGo as the process-wide executor."""
    fake = FakeGo()
    monkeypatch.setattr(toolchain, "_default_executor", fake)
    return fake


# ---------------------------------------------------------------------------
# Shared test helpers (used across service test modules)
# ---------------------------------------------------------------------------


def make_settings(**flags: Any) -> GobinSettings:
    """GobinSettings for the current (isolated) environment."""
    return GobinSettings.from_cli(**flags)


def make_toolchain(settings: GobinSettings, executor: FakeGo) -> GoToolchain:
    """GoToolchain wired to *executor* the same way AppContext wires it."""
    env = EnvironmentBuilder(
        os.environ,
        download_cache=settings.layout.download_cache,
        goflags=settings.go.goflags,
        mod=settings.mod,
    )
    return GoToolchain(ToolchainInvoker(executor), env)
