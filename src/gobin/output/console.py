"""Rich rendering for gobin's stdout.

Results are rendered into a string buffer first and echoed by the CLI, so
tests can compare plain text. Rich drops colour by itself when stdout is
not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GOBIN_THEME = Theme({"gobin.line": "cyan", "gobin.error": "bold red"})

# Wide enough that a cache path or ``Installed ... to ...`` line never wraps.
DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to an in-memory buffer; read it back with get_output."""
    return Console(
        file=StringIO(),
        theme=GOBIN_THEME,
        no_color=no_color,
        width=width or DEFAULT_WIDTH,
        soft_wrap=True,
        highlight=False,
        markup=False,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console")
    return buffer.getvalue()
