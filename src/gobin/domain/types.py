"""Module coordinates, resolved packages, and resolution outcomes.

Records produced by ``go list -json`` are validated into :class:`ListedPackage`
(field aliases follow the Go JSON names). The resolver turns listed main
packages into :class:`ResolvedMainPackage` and returns one
:class:`Resolution` per spec.

INVARIANT: a resolved spec yields exactly one of ``ResolvedPackages`` or
``ResolutionFailure``; there is no shared mutable error field.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from gobin.domain.spec import PackageSpec

MAIN_PACKAGE_NAME = "main"
NOT_MAIN_PACKAGE = "not a main package"


class ExecutionMode(StrEnum):
    """What to do with a main package once it is in the cache."""

    INSTALL = "install"
    PRINT = "print"
    VERSION = "version"
    DOWNLOAD = "download"
    RUN = "run"


class ModuleCoordinate(BaseModel):
    """A ``(path, version)`` pair naming a versioned module.

    ``version`` is empty for the main module in main-module mode.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    path: str = Field(default="", alias="Path")
    version: str = Field(default="", alias="Version")
    dir: str = Field(default="", alias="Dir")

    def __str__(self) -> str:
        return f"{self.path}@{self.version}" if self.version else self.path


class ListedPackage(BaseModel):
    """One record of ``go list -json`` output (only the fields gobin reads)."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    import_path: str = Field(alias="ImportPath")
    name: str = Field(default="", alias="Name")
    dir: str = Field(default="", alias="Dir")
    module: ModuleCoordinate = Field(default_factory=ModuleCoordinate, alias="Module")

    @property
    def is_main(self) -> bool:
        return self.name == MAIN_PACKAGE_NAME


class ResolvedMainPackage(BaseModel):
    """A main package together with the module coordinate that supplies it."""

    model_config = {"frozen": True}

    import_path: str
    module: ModuleCoordinate
    name: str = MAIN_PACKAGE_NAME

    @classmethod
    def from_listed(cls, listed: ListedPackage) -> ResolvedMainPackage:
        return cls(import_path=listed.import_path, module=listed.module, name=listed.name)


class CacheTarget(BaseModel):
    """Where one main package is built inside the artifact cache."""

    model_config = {"frozen": True}

    directory: Path
    binary_path: Path


class ResolvedPackages(BaseModel):
    """Successful resolution: one or more main packages, in ``go list`` order."""

    model_config = {"frozen": True}

    kind: Literal["resolved"] = "resolved"
    spec: PackageSpec
    packages: tuple[ResolvedMainPackage, ...]
    version: str = ""


class ResolutionFailure(BaseModel):
    """Terminal resolution outcome: the pattern is not a runnable main package."""

    model_config = {"frozen": True}

    kind: Literal["failed"] = "failed"
    spec: PackageSpec
    version: str = ""
    reason: str = NOT_MAIN_PACKAGE

    def describe(self) -> str:
        """``<package pattern>@<version>: <reason>``."""
        return f"{self.spec.package_pattern}@{self.version}: {self.reason}"


Resolution = ResolvedPackages | ResolutionFailure
