"""
Per-task storage of the active trace and span stack.

Both values live in ``contextvars`` so every thread and every asyncio task
sees its own stack; a span started in one task never becomes the parent of a
span in another.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from tracelog.exceptions import TracelogRuntimeError

if TYPE_CHECKING:
    from tracelog.tracer.span import Span
    from tracelog.tracer.trace import Trace

_current_trace: ContextVar[Optional[Trace]] = ContextVar(
    "tracelog:current_trace", default=None
)
_span_stack: ContextVar[Tuple[Span, ...]] = ContextVar(
    "tracelog:span_stack", default=()
)


def get_current_trace() -> Optional[Trace]:
    return _current_trace.get()


def get_current_span() -> Optional[Span]:
    stack = _span_stack.get()
    return stack[-1] if stack else None


def set_current_trace(trace: Optional[Trace]) -> Token[Optional[Trace]]:
    return _current_trace.set(trace)


def reset_current_trace(token: Token[Optional[Trace]]) -> None:
    _current_trace.reset(token)


def push_span(span: Span) -> Token[Tuple[Span, ...]]:
    return _span_stack.set(_span_stack.get() + (span,))


def pop_span(token: Token[Tuple[Span, ...]]) -> None:
    _span_stack.reset(token)


def update_current_span(
    name: Optional[str] = None,
    input: Optional[Any] = None,
    output: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
    usage: Optional[Dict[str, int]] = None,
    model: Optional[str] = None,
    provider: Optional[str] = None,
) -> None:
    span = get_current_span()
    if span is None:
        raise TracelogRuntimeError(
            "update_current_span() called outside of a tracked function"
        )
    span.update(
        name=name,
        input=input,
        output=output,
        metadata=metadata,
        tags=tags,
        usage=usage,
        model=model,
        provider=provider,
    )


def update_current_trace(
    name: Optional[str] = None,
    input: Optional[Any] = None,
    output: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
) -> None:
    trace = get_current_trace()
    if trace is None:
        raise TracelogRuntimeError(
            "update_current_trace() called outside of a tracked function"
        )
    trace.update(name=name, input=input, output=output, metadata=metadata, tags=tags)


__all__ = (
    "get_current_trace",
    "get_current_span",
    "set_current_trace",
    "reset_current_trace",
    "push_span",
    "pop_span",
    "update_current_span",
    "update_current_trace",
)
