"""Command-line package specifications.

A spec is one positional argument: ``pattern`` or ``pattern@version``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel

VERSION_SEPARATOR = "@"


def split_pattern(raw: str) -> tuple[str, str, bool]:
    """Split *raw* on the first ``@``.

    Returns ``(package_pattern, version_constraint, has_version)``.

    Examples:
        >>> split_pattern("example.com/cmd@v1.2.3")
        ('example.com/cmd', 'v1.2.3', True)
        >>> split_pattern("example.com/cmd")
        ('example.com/cmd', '', False)
        >>> split_pattern("example.com/cmd@")
        ('example.com/cmd', '', True)
    """
    package, sep, version = raw.partition(VERSION_SEPARATOR)
    return package, version, bool(sep)


class PackageSpec(BaseModel):
    """Parsed form of one command-line package argument.

    Attributes:
        raw_pattern: The token exactly as given.
        package_pattern: Importable package part (before the first ``@``).
        version_constraint: Version part; empty means current/latest.
        has_version: Whether the token contained an ``@``.
        working_dir: Directory holding the ``go.mod`` that scopes resolution.
    """

    model_config = {"frozen": True}

    raw_pattern: str
    package_pattern: str
    version_constraint: str = ""
    has_version: bool = False
    working_dir: Path

    @classmethod
    def parse(cls, raw: str, working_dir: Path) -> PackageSpec:
        package, version, has_version = split_pattern(raw)
        return cls(
            raw_pattern=raw,
            package_pattern=package,
            version_constraint=version,
            has_version=has_version,
            working_dir=working_dir,
        )

    def rejoin(self) -> str:
        """Reassemble the token from its parts."""
        if not self.has_version:
            return self.package_pattern
        return f"{self.package_pattern}{VERSION_SEPARATOR}{self.version_constraint}"

    def trusts_current_version(self, *, main_module: bool) -> bool:
        """True when the version recorded in the main module is used as-is.

        In main-module mode a spec without a version skips ``go get``; the
        requirement already in ``go.mod`` is what gets listed and built.
        """
        return main_module and not self.version_constraint
