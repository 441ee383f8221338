"""Span timing for ``-debug`` runs: Span, @traced, trace_span.

Disabled by default; each call then costs one ContextVar lookup. Under
``-debug`` every traced service call and every resolution/build stage gets
a span. Spans nest through a ContextVar, the outermost traced call attaches
the finished tree to ``ServiceResult.meta["telemetry"]``, and every span is
logged as it closes.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from gobin.services.result import ServiceResult

log = structlog.get_logger("gobin.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """One timed stage and the stages nested inside it."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready tree; empty annotations and children are omitted."""
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        return out


def _open(name: str) -> tuple[Span, Token[Span | None]]:
    parent = _current_span.get()
    span = Span(name=name, parent=parent)
    if parent is not None:
        parent.children.append(span)
    return span, _current_span.set(span)


def _close(span: Span, token: Token[Span | None], *, ok: bool) -> None:
    span.end()
    _current_span.reset(token)
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        children=len(span.children),
        **span.annotations,
    )


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a stage inside the current span.

    Yields None when telemetry is disabled or no span is active, so callers
    guard annotations with ``if span:``.
    """
    if not _enabled.get() or _current_span.get() is None:
        yield None
        return

    span, token = _open(name)
    ok = False
    try:
        yield span
        ok = True
    finally:
        _close(span, token, ok=ok)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Decorator: time a service call as a span.

    A call made while another span is active becomes its child; only the
    outermost call injects the tree into a returned ServiceResult.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span, token = _open(func.__qualname__)
        try:
            result = func(*args, **kwargs)
        except BaseException:
            _close(span, token, ok=False)
            raise

        is_result = isinstance(result, ServiceResult)
        _close(span, token, ok=result.ok if is_result else True)  # type: ignore[attr-defined]
        if is_result and span.parent is None:
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}  # type: ignore[attr-defined]
            return result.model_copy(update={"meta": meta})  # type: ignore[attr-defined, return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on (AppContext does this under ``-debug``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, for manual annotation; None when disabled."""
    if not _enabled.get():
        return None
    return _current_span.get()
