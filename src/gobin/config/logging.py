"""Logging setup for gobin.

Everything gobin logs goes to stderr; stdout carries only results (cache
paths, versions, ``Installed ...`` lines) so it can be piped.

- Default: WARNING and above, console-rendered.
- ``-debug``: the ``gobin`` logger drops to DEBUG. The toolchain invoker
  then traces every go command and telemetry reports span timings.
- ``--log-json``: one JSON object per record, timestamped.

Modules log through plain ``logging.getLogger(__name__)`` or
``structlog.get_logger(...)``; both end up in the same formatter.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

GOBIN_LOGGER = "gobin"


def _pre_chain(*, log_json: bool) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    # Human output carries no timestamps.
    if log_json:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    return processors


def _renderer(stream: TextIO, *, log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    debug: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib records for gobin to *stream*.

    Args:
        debug: Lower the ``gobin`` logger to DEBUG (``-debug``).
        log_json: Render JSON lines instead of console output.
        stream: Destination; defaults to the current ``sys.stderr``.
    """
    stream = stream or sys.stderr
    pre_chain = _pre_chain(log_json=log_json)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(stream, log_json=log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger(GOBIN_LOGGER).setLevel(logging.DEBUG if debug else logging.WARNING)
