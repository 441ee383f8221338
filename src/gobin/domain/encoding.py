"""Artifact cache layout: module coordinate + import path -> directory.

Layout, relative to the cache root::

    <escaped module path>/@v/<escaped version>/<escaped package dir>
    <escaped module path>/@/<escaped package dir>        (unversioned module)

``<escaped package dir>`` is the import path relative to the module path and
is omitted when the package is the module root. The binary is stored in that
directory under the last element of the import path.

Escaping: every uppercase ASCII letter ``X`` becomes ``!x``. Inputs may only
contain ASCII letters, digits and ``-._~+`` (plus ``/`` as a separator in
paths), so ``!`` and ``@`` never appear in escaped text. That makes the
layout safe on case-insensitive filesystems and lets :func:`decode_relpath`
split it back unambiguously.

INVARIANT: ``cache_relpath`` is pure and injective. Equal inputs always give
the same directory; different inputs never share one.
"""

from __future__ import annotations

import posixpath
import string
from pathlib import Path

from gobin.domain.types import CacheTarget, ModuleCoordinate, ResolvedMainPackage
from gobin.errors import EncodingError

ESCAPE_CHAR = "!"
VERSION_MARKER = "@v"
UNVERSIONED_MARKER = "@"

_ALLOWED = frozenset(string.ascii_letters + string.digits + "-._~+")
_UPPER = frozenset(string.ascii_uppercase)
_LOWER = frozenset(string.ascii_lowercase)


def _check_element(elem: str, what: str, value: str) -> None:
    if not elem or elem in (".", ".."):
        msg = f"malformed {what} {value!r}: empty or dot path element"
        raise EncodingError(msg)
    bad = sorted(set(elem) - _ALLOWED)
    if bad:
        msg = f"malformed {what} {value!r}: invalid char {bad[0]!r}"
        raise EncodingError(msg)


def _escape(text: str) -> str:
    return "".join(ESCAPE_CHAR + c.lower() if c in _UPPER else c for c in text)


def _unescape(text: str, what: str) -> str:
    out: list[str] = []
    bang = False
    for c in text:
        if bang:
            if c not in _LOWER:
                msg = f"invalid escaped {what} {text!r}"
                raise EncodingError(msg)
            out.append(c.upper())
            bang = False
        elif c == ESCAPE_CHAR:
            bang = True
        elif c in _UPPER:
            msg = f"invalid escaped {what} {text!r}: unescaped uppercase"
            raise EncodingError(msg)
        else:
            out.append(c)
    if bang:
        msg = f"invalid escaped {what} {text!r}: trailing {ESCAPE_CHAR}"
        raise EncodingError(msg)
    return "".join(out)


# ---------------------------------------------------------------------------
# Path and version escaping
# ---------------------------------------------------------------------------


def escape_path(path: str) -> str:
    """Escape a slash-separated module or package path.

    Examples:
        >>> escape_path("github.com/BurntSushi/toml")
        'github.com/!burnt!sushi/toml'
    """
    if not path:
        raise EncodingError("malformed path '': empty")
    for elem in path.split("/"):
        _check_element(elem, "path", path)
    return _escape(path)


def escape_version(version: str) -> str:
    """Escape a module version; it must be a single path element."""
    if not version:
        raise EncodingError("malformed version '': empty")
    _check_element(version, "version", version)
    return _escape(version)


def unescape_path(escaped: str) -> str:
    """Inverse of :func:`escape_path`; rejects non-canonical input."""
    path = _unescape(escaped, "path")
    if escape_path(path) != escaped:
        msg = f"invalid escaped path {escaped!r}"
        raise EncodingError(msg)
    return path


def unescape_version(escaped: str) -> str:
    """Inverse of :func:`escape_version`; rejects non-canonical input."""
    version = _unescape(escaped, "version")
    if escape_version(version) != escaped:
        msg = f"invalid escaped version {escaped!r}"
        raise EncodingError(msg)
    return version


# ---------------------------------------------------------------------------
# Cache layout
# ---------------------------------------------------------------------------


def package_subdir(module_path: str, import_path: str) -> str:
    """Import path relative to its module path ('' for the module root)."""
    if import_path == module_path:
        return ""
    prefix = module_path + "/"
    if module_path and import_path.startswith(prefix):
        return import_path[len(prefix) :]
    msg = f"package {import_path!r} is not inside module {module_path!r}"
    raise EncodingError(msg)


def cache_relpath(module: ModuleCoordinate, import_path: str) -> str:
    """Slash-separated cache directory for *import_path* within *module*."""
    parts = [escape_path(module.path)]
    if module.version:
        parts += [VERSION_MARKER, escape_version(module.version)]
    else:
        parts.append(UNVERSIONED_MARKER)
    subdir = package_subdir(module.path, import_path)
    if subdir:
        parts.append(escape_path(subdir))
    return "/".join(parts)


def decode_relpath(relpath: str) -> tuple[ModuleCoordinate, str]:
    """Recover ``(module, import_path)`` from a :func:`cache_relpath` result."""
    elems = relpath.split("/")
    marker = next((i for i, e in enumerate(elems) if e.startswith("@")), None)
    if marker is None or marker == 0:
        msg = f"invalid cache path {relpath!r}: no module marker"
        raise EncodingError(msg)

    module_path = unescape_path("/".join(elems[:marker]))
    if elems[marker] == VERSION_MARKER:
        if marker + 1 >= len(elems):
            msg = f"invalid cache path {relpath!r}: missing version"
            raise EncodingError(msg)
        version = unescape_version(elems[marker + 1])
        rest = elems[marker + 2 :]
    elif elems[marker] == UNVERSIONED_MARKER:
        version = ""
        rest = elems[marker + 1 :]
    else:
        msg = f"invalid cache path {relpath!r}: unknown marker {elems[marker]!r}"
        raise EncodingError(msg)

    import_path = module_path
    if rest:
        import_path = f"{module_path}/{unescape_path('/'.join(rest))}"
    return ModuleCoordinate(path=module_path, version=version), import_path


def binary_name(import_path: str) -> str:
    """Name of the binary ``go install`` produces for *import_path*."""
    return posixpath.basename(import_path)


def cache_target(root: Path, package: ResolvedMainPackage) -> CacheTarget:
    """Compute the cache directory and binary path for *package* under *root*."""
    rel = cache_relpath(package.module, package.import_path)
    directory = root.joinpath(*rel.split("/"))
    return CacheTarget(
        directory=directory,
        binary_path=directory / binary_name(package.import_path),
    )
