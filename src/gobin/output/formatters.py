"""Turn a ServiceResult into what the CLI prints.

Human mode prints the result's lines and nothing else, so ``gobin -p`` and
``gobin -v`` compose with shell pipelines. A failure prints its message
alone. ``--json`` dumps the whole result model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text

from gobin.output.console import create_console, get_output

if TYPE_CHECKING:
    from gobin.services.result import ServiceResult


def format_result(result: ServiceResult, *, json_output: bool = False) -> str:
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console()
    if result.ok:
        for line in result.lines:
            console.print(Text(line, style="gobin.line"))
    else:
        console.print(Text(result.error_message, style="gobin.error"))
    return get_output(console).rstrip("\n")
