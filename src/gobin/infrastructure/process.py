"""Hand the process over to a built binary (run mode).

On POSIX the current process image is replaced with ``os.execve``. Where
that primitive is unavailable the binary runs as a child with inherited
standard streams and gobin exits with its status; the parent process then
stays alive until the child finishes.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence

from gobin.errors import ExecError


def replace_process(argv: Sequence[str], env: Mapping[str, str]) -> None:
    """Execute ``argv[0]`` with *argv* and *env*; does not return on success."""
    target = argv[0]
    if os.name == "posix":
        try:
            os.execve(target, list(argv), dict(env))
        except OSError as exc:
            msg = f"failed to exec {target}: {exc}"
            raise ExecError(msg) from exc
        return

    try:
        completed = subprocess.run(list(argv), env=dict(env), check=False)
    except OSError as exc:
        msg = f"failed to exec {target}: {exc}"
        raise ExecError(msg) from exc
    raise SystemExit(completed.returncode)
