"""Filesystem operations for publishing built binaries.

INVARIANT: a self-install never writes through an existing file. The old
binary may be the one currently running, so it is unlinked first and the
new one is created with ``O_EXCL``.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from gobin.errors import FilesystemError

logger = logging.getLogger(__name__)

BINARY_MODE = 0o755


def remove_stale(path: Path) -> bool:
    """Best-effort unlink of *path*. Returns True if something was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.debug("Could not remove %s: %s", path, exc)
        return False
    logger.debug("Removed stale binary %s", path)
    return True


def ensure_dir(path: Path) -> Path:
    """``mkdir -p`` that reports failures as :class:`FilesystemError`."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"failed to mkdir {path}: {exc}"
        raise FilesystemError(msg) from exc
    return path


def publish_binary(src: Path, dest: Path, *, exclusive: bool = False) -> Path:
    """Copy *src* to *dest* with mode 0755.

    With *exclusive*, *dest* must not exist; creation fails instead of
    truncating whatever is there. A copy that fails partway removes *dest*.
    """
    flags = os.O_CREAT | os.O_WRONLY
    flags |= os.O_EXCL if exclusive else os.O_TRUNC
    flags |= getattr(os, "O_BINARY", 0)

    try:
        src_file = src.open("rb")
    except OSError as exc:
        msg = f"failed to open {src}: {exc}"
        raise FilesystemError(msg) from exc

    with src_file:
        try:
            fd = os.open(dest, flags, BINARY_MODE)
        except OSError as exc:
            msg = f"failed to open {dest} for writing: {exc}"
            raise FilesystemError(msg) from exc
        try:
            with os.fdopen(fd, "wb") as dest_file:
                shutil.copyfileobj(src_file, dest_file)
        except OSError as exc:
            # A truncated executable must not be left on PATH.
            remove_stale(dest)
            msg = f"failed to copy {src} to {dest}: {exc}"
            raise FilesystemError(msg) from exc
    return dest
