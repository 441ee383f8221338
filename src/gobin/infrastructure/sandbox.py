"""Disposable resolution sandboxes.

Each spec resolved outside a main module gets its own temporary directory
holding a one-line ``go.mod``, so ``go get`` for one spec cannot influence
another. All sandboxes created inside a :class:`Sandbox` block are removed
when the block exits, whether it exits normally or by exception.
"""

from __future__ import annotations

import logging
import tempfile
from contextlib import ExitStack
from pathlib import Path
from types import TracebackType

from gobin.config.models import MODULE_FILENAME, SANDBOX_MODULE
from gobin.errors import FilesystemError

logger = logging.getLogger(__name__)


class Sandbox:
    """Scoped owner of temporary module directories.

    Usage::

        with Sandbox() as sandbox:
            wd = sandbox.create()
            ...  # wd is gone after the block
    """

    def __init__(self, *, prefix: str = "gobin", module: str = SANDBOX_MODULE) -> None:
        self._prefix = prefix
        self._module = module
        self._stack: ExitStack | None = None
        self.created: list[Path] = []

    def __enter__(self) -> Sandbox:
        self._stack = ExitStack()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        assert self._stack is not None
        self._stack.close()
        self._stack = None

    def create(self) -> Path:
        """Create a fresh directory with ``go.mod`` declaring the sandbox module."""
        if self._stack is None:
            raise RuntimeError("Sandbox.create() called outside a with block")
        try:
            tmp = tempfile.TemporaryDirectory(prefix=self._prefix, ignore_cleanup_errors=True)
        except OSError as exc:
            msg = f"failed to create temp dir: {exc}"
            raise FilesystemError(msg) from exc
        path = Path(self._stack.enter_context(tmp))
        try:
            (path / MODULE_FILENAME).write_text(f"module {self._module}\n", encoding="utf-8")
        except OSError as exc:
            msg = f"failed to initialise temp Go module: {exc}"
            raise FilesystemError(msg) from exc
        self.created.append(path)
        logger.debug("Created sandbox %s", path)
        return path
