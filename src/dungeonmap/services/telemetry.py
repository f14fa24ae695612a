"""Timing spans for service calls — Span, @traced, trace_span.

Disabled by default: every entry point checks one ContextVar and returns.
With ``--verbose`` each traced service call builds a span tree (generation,
layout, validation, file I/O phases) that lands in
``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from dungeonmap.services.result import ServiceResult

log = structlog.get_logger("dungeonmap.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_active_span: ContextVar[Span | None] = ContextVar("_active_span", default=None)


@dataclass
class Span:
    """One timed region, nested under the span that was active when it began."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def end(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.annotations:
            payload["annotations"] = dict(self.annotations)
        if self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child span under the active one.

    Yields None when telemetry is off or no traced call is running.
    """
    parent = _active_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent)
    parent.children.append(child)
    token = _active_span.set(child)
    try:
        yield child
    finally:
        child.end()
        _active_span.reset(token)


def _with_telemetry(result: ServiceResult, span: Span) -> ServiceResult:
    """Copy *result* with the span tree merged into ``meta``."""
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time a service method and attach its span tree to the ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _active_span.set(span)
        try:
            result = func(*args, **kwargs)
        except Exception:
            log.debug("span.failed", span_name=span.name)
            raise
        finally:
            span.end()
            _active_span.reset(token)

        log.debug(
            "span.complete",
            span_name=span.name,
            duration_ms=round(span.duration_ms, 2),
            children=len(span.children),
        )
        if isinstance(result, ServiceResult):
            result = _with_telemetry(result, span)  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The active span, or None when telemetry is off."""
    if not _enabled.get():
        return None
    return _active_span.get()
