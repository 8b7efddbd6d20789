"""Per-call log context: trace/span ids plus the index being worked on."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from collections.abc import Generator


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Current context, created with fresh ids on first access."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


@contextmanager
def index_context(index_name: str) -> Generator[dict, None, None]:
    """Tag log lines emitted inside the block with ``index_name``.

    Keeps the surrounding trace id; the previous context is restored on exit.
    """
    token = trace_context.set({**get_trace_context(), "index": index_name})
    try:
        yield trace_context.get()  # type: ignore[misc]
    finally:
        trace_context.reset(token)


def update_span_id(span_id: str) -> None:
    """Update span_id while preserving trace_id and the index tag."""
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})
