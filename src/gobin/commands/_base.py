"""Click command class for gobin.

Adds two things to ``click.Command``:

* ``examples``: an eager ``--examples`` flag that prints usage examples and
  exits, so ``--help`` stays short.
* ``usage``: a literal synopsis replacing click's generic
  ``[OPTIONS] [PACKAGES]...`` line, to show which flags combine.
"""

from __future__ import annotations

from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo("Examples:\n")
        click.echo(examples)
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class GobinCommand(click.Command):
    """Command with optional ``--examples`` and a fixed usage synopsis."""

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        usage: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.usage = usage
        if examples:
            self.params.append(_examples_option(examples))

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        if self.usage:
            return [self.usage]
        return super().collect_usage_pieces(ctx)
