"""The gobin command: flags, validation, and dispatch to GobinService.

Flags follow the go tool's single-dash style (``-run``, ``-nonet``, ...).
Flag parsing stops at the first package argument, so in run mode everything
after the package is passed to the binary untouched.
"""

from __future__ import annotations

import click

from gobin import __version__
from gobin.commands._base import GobinCommand
from gobin.commands._context import AppContext, fail
from gobin.config.settings import GobinSettings
from gobin.errors import GobinError

USAGE = "[-m] [-mod MODE] [-run|-p|-v|-d] [-u|-nonet] [-debug] packages..."

EXAMPLES = """\
  gobin github.com/rogpeppe/gohack
  gobin github.com/rogpeppe/gohack@v1.0.0
  gobin -m golang.org/x/tools/cmd/stringer
  gobin -p github.com/rogpeppe/gohack
  gobin -run github.com/rogpeppe/gohack -help
  gobin -u -v github.com/rogpeppe/gohack"""


@click.command(
    cls=GobinCommand,
    examples=EXAMPLES,
    usage=USAGE,
    context_settings={
        "allow_interspersed_args": False,
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(version=__version__, prog_name="gobin")
@click.option("-run", "run", is_flag=True, help="Run the provided main package.")
@click.option("-p", "print_path", is_flag=True, help="Print gobin cache location for main packages.")
@click.option(
    "-v", "print_version", is_flag=True, help="Print the module path and version for main packages."
)
@click.option(
    "-d",
    "download_only",
    is_flag=True,
    help="Stop after installing main packages to the gobin cache.",
)
@click.option(
    "-m",
    "main_module",
    is_flag=True,
    help="Resolve dependencies via the main module (as given by go env GOMOD).",
)
@click.option(
    "-mod",
    "mod",
    default=None,
    metavar="MODE",
    help="Provide additional control over updating and use of go.mod (readonly, vendor).",
)
@click.option("-u", "upgrade", is_flag=True, help="Check for the latest tagged version of main packages.")
@click.option("-nonet", "nonet", is_flag=True, help="Prevent network access.")
@click.option("-debug", "debug", is_flag=True, help="Print debug information.")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.argument("packages", nargs=-1)
def cli(
    run: bool,
    print_path: bool,
    print_version: bool,
    download_only: bool,
    main_module: bool,
    mod: str | None,
    upgrade: bool,
    nonet: bool,
    debug: bool,
    json_output: bool,
    log_json: bool,
    packages: tuple[str, ...],
) -> None:
    """Install or run main packages.

    PACKAGES are main package patterns, optionally suffixed with @version.
    Binaries are built into a module-aware cache and then installed to
    $GOBIN (default $GOPATH/bin) unless -run, -p, -v or -d is given.
    """
    try:
        settings = GobinSettings.from_cli(
            run=run,
            print_path=print_path,
            print_version=print_version,
            download_only=download_only,
            main_module=main_module,
            mod=mod,
            upgrade=upgrade,
            nonet=nonet,
            debug=debug,
            json_output=json_output,
            log_json=log_json,
        )
    except GobinError as exc:
        fail(exc)

    from gobin.services.pipeline import GobinService

    app = AppContext(settings)
    svc = GobinService(app.settings, app.toolchain, environ=app.environ)
    app.emit(svc.execute(packages))


def main() -> None:
    """Console-script entry point."""
    cli(prog_name="gobin")
