"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time
from collections.abc import Generator

import pytest

from gobin.services.result import ServiceError, ServiceResult
from gobin.services.telemetry import (
    Span,
    _current_span,
    disable_telemetry,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure clean telemetry state for every test."""
    yield
    disable_telemetry()
    _current_span.set(None)


# ── Span unit tests ──────────────────────────────────────────────────


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        d = span.to_dict()
        assert d["name"] == "root"
        assert "duration_ms" in d
        assert "children" not in d
        assert "annotations" not in d

    def test_to_dict_with_children(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.end()
        root.end()
        d = root.to_dict()
        assert [c["name"] for c in d["children"]] == ["child"]

    def test_annotate(self) -> None:
        span = Span(name="test")
        span.annotate("deferred", 2)
        span.end()
        assert span.to_dict()["annotations"] == {"deferred": 2}


# ── trace_span tests ─────────────────────────────────────────────────


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("test") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("test") as span:
            assert span is None

    def test_enabled_with_root(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("resolve.local") as span:
                assert span is not None
                assert get_current_span() is span
            assert root.children[0].name == "resolve.local"
            assert root.children[0].end_time is not None
            assert get_current_span() is root
        finally:
            _current_span.reset(token)

    def test_nested_spans(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _current_span.set(root)
        try:
            with trace_span("a"), trace_span("b"):
                pass
            assert root.children[0].name == "a"
            assert root.children[0].children[0].name == "b"
        finally:
            _current_span.reset(token)


# ── @traced decorator tests ──────────────────────────────────────────


class TestTracedDecorator:
    def test_noop_when_disabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=True, op="test")

        result = my_func()
        assert result.meta is None

    def test_injects_meta_when_enabled(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=True, op="test")

        enable_telemetry()
        result = my_func()
        assert result.meta is not None
        expected_name = "TestTracedDecorator.test_injects_meta_when_enabled.<locals>.my_func"
        assert result.meta["telemetry"]["name"] == expected_name
        assert result.meta["telemetry"]["duration_ms"] >= 0

    def test_preserves_existing_meta(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(ok=True, op="test", meta={"existing": "data"})

        enable_telemetry()
        result = my_func()
        assert result.meta is not None
        assert result.meta["existing"] == "data"
        assert "telemetry" in result.meta

    def test_non_service_result_passthrough(self) -> None:
        @traced
        def my_func() -> list[str]:
            return ["resolved"]

        enable_telemetry()
        assert my_func() == ["resolved"]

    def test_child_spans_in_meta(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            with trace_span("resolve.local"):
                pass
            with trace_span("resolve.network"):
                pass
            return ServiceResult(ok=True, op="test")

        enable_telemetry()
        result = my_func()
        assert result.meta is not None
        children = result.meta["telemetry"]["children"]
        assert [c["name"] for c in children] == ["resolve.local", "resolve.network"]

    def test_nested_traced_calls_attach_to_outer(self) -> None:
        @traced
        def inner() -> ServiceResult:
            return ServiceResult(ok=True, op="inner")

        @traced
        def outer() -> ServiceResult:
            nested = inner()
            assert nested.meta is None
            return ServiceResult(ok=True, op="outer")

        enable_telemetry()
        result = outer()
        assert result.meta is not None
        (child,) = result.meta["telemetry"]["children"]
        assert child["name"].endswith("inner")

    def test_exception_propagates_and_resets(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            msg = "boom"
            raise ValueError(msg)

        enable_telemetry()
        with pytest.raises(ValueError, match="boom"):
            my_func()
        assert _current_span.get() is None

    def test_error_result_gets_telemetry(self) -> None:
        @traced
        def my_func() -> ServiceResult:
            return ServiceResult(
                ok=False, op="test", error=ServiceError(code="FAIL", message="oops")
            )

        enable_telemetry()
        result = my_func()
        assert not result.ok
        assert result.meta is not None
        assert "telemetry" in result.meta


# ── get_current_span tests ───────────────────────────────────────────


class TestGetCurrentSpan:
    def test_returns_none_when_disabled(self) -> None:
        assert get_current_span() is None

    def test_returns_span_inside_traced(self) -> None:
        seen: list[Span | None] = []

        @traced
        def my_func() -> None:
            seen.append(get_current_span())

        enable_telemetry()
        my_func()
        assert seen[0] is not None
        assert seen[0].name.endswith("my_func")
