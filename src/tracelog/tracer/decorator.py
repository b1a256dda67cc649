"""
Function-level instrumentation.

``@track`` records one span per call. The first tracked call in a context
also opens (and later ends) the trace; nested tracked calls become child spans
of whichever span is active in the current context.
"""

from __future__ import annotations

import functools
import inspect
from contextvars import Token
from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncGenerator,
    Callable,
    Dict,
    Generator,
    List,
    Optional,
    Tuple,
    TypeVar,
    overload,
)

from tracelog.constants import SpanType
from tracelog.data.trace import ErrorInfo
from tracelog.exceptions import TracelogRuntimeError
from tracelog.logger import tracelog_logger
from tracelog.tracer import context
from tracelog.tracer.client import Tracelog, get_global_client
from tracelog.tracer.span import Span
from tracelog.tracer.trace import Trace
from tracelog.tracer.utils import format_inputs, format_output
from tracelog.utils.decorators.dont_throw import dont_throw

C = TypeVar("C", bound=Callable[..., Any])


@dataclass(frozen=True)
class TrackOptions:
    name: Optional[str]
    type: SpanType
    capture_input: bool
    capture_output: bool
    project_name: Optional[str]
    tags: Optional[List[str]]
    metadata: Optional[Dict[str, Any]]
    client: Optional[Tracelog]


@dataclass
class _CallState:
    span: Span
    owned_trace: Optional[Trace]
    tokens: List[Tuple[str, Token[Any]]] = field(default_factory=list)


@dont_throw
def _start(
    func: Callable[..., Any],
    options: TrackOptions,
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
) -> Optional[_CallState]:
    trace = context.get_current_trace()
    # nested calls log through the client that owns the active trace
    client = options.client or (trace.client if trace else get_global_client())
    if client.disabled:
        return None

    span_name = options.name or func.__name__
    inputs = format_inputs(func, args, kwargs) if options.capture_input else None

    owned_trace: Optional[Trace] = None
    if trace is None:
        owned_trace = client.trace(
            name=span_name,
            input=inputs,
            tags=options.tags,
            metadata=options.metadata,
            project_name=options.project_name,
        )
        trace = owned_trace
    elif options.project_name and options.project_name != trace.project_name:
        tracelog_logger.warning(
            f"Span '{span_name}' requested project '{options.project_name}' but is "
            f"nested in a trace of project '{trace.project_name}'; using the latter"
        )

    span = trace.span(
        name=span_name,
        type=options.type,
        input=inputs,
        tags=options.tags,
        metadata=options.metadata,
    )
    return _CallState(span=span, owned_trace=owned_trace)


def _activate(state: _CallState) -> None:
    if state.owned_trace is not None:
        state.tokens.append(("trace", context.set_current_trace(state.owned_trace)))
    state.tokens.append(("span", context.push_span(state.span)))


def _deactivate(state: _CallState) -> None:
    while state.tokens:
        kind, token = state.tokens.pop()
        if kind == "span":
            context.pop_span(token)
        else:
            context.reset_current_trace(token)


@dont_throw
def _finish(
    state: _CallState,
    options: TrackOptions,
    output: Any = None,
    error: Optional[BaseException] = None,
) -> None:
    if error is not None:
        error_info = ErrorInfo.from_exception(error)
        state.span.end(error_info=error_info)
        if state.owned_trace is not None:
            state.owned_trace.end(error_info=error_info)
        return

    formatted = format_output(output) if options.capture_output else None
    state.span.end(output=formatted)
    if state.owned_trace is not None:
        state.owned_trace.end(output=formatted)


def _wrap_sync(func: Callable[..., Any], options: TrackOptions) -> Callable[..., Any]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        state = _start(func, options, args, kwargs)
        if state is None:
            return func(*args, **kwargs)

        _activate(state)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _finish(state, options, error=e)
            raise
        finally:
            _deactivate(state)
        _finish(state, options, output=result)
        return result

    return wrapper


def _wrap_async(func: Callable[..., Any], options: TrackOptions) -> Callable[..., Any]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        state = _start(func, options, args, kwargs)
        if state is None:
            return await func(*args, **kwargs)

        _activate(state)
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            _finish(state, options, error=e)
            raise
        finally:
            _deactivate(state)
        _finish(state, options, output=result)
        return result

    return wrapper


def _wrap_generator(
    func: Callable[..., Generator[Any, Any, Any]], options: TrackOptions
) -> Callable[..., Generator[Any, Any, Any]]:
    # The span is only active while the generator body runs, never across a
    # yield, so the consumer's context is left untouched.
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Generator[Any, Any, Any]:
        state = _start(func, options, args, kwargs)
        if state is None:
            yield from func(*args, **kwargs)
            return

        items: List[Any] = []
        gen = func(*args, **kwargs)
        try:
            while True:
                _activate(state)
                try:
                    item = next(gen)
                except StopIteration:
                    break
                finally:
                    _deactivate(state)
                items.append(item)
                yield item
        except Exception as e:
            _finish(state, options, error=e)
            raise
        except GeneratorExit:
            _finish(state, options, output=items)
            raise
        finally:
            gen.close()
        _finish(state, options, output=items)

    return wrapper


def _wrap_async_generator(
    func: Callable[..., AsyncGenerator[Any, Any]], options: TrackOptions
) -> Callable[..., AsyncGenerator[Any, Any]]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> AsyncGenerator[Any, Any]:
        state = _start(func, options, args, kwargs)
        if state is None:
            async for item in func(*args, **kwargs):
                yield item
            return

        items: List[Any] = []
        agen = func(*args, **kwargs)
        try:
            while True:
                _activate(state)
                try:
                    item = await agen.__anext__()
                except StopAsyncIteration:
                    break
                finally:
                    _deactivate(state)
                items.append(item)
                yield item
        except Exception as e:
            _finish(state, options, error=e)
            raise
        except GeneratorExit:
            _finish(state, options, output=items)
            raise
        finally:
            await agen.aclose()
        _finish(state, options, output=items)

    return wrapper


@overload
def track(name: C) -> C: ...


@overload
def track(
    name: Optional[str] = None,
    *,
    type: SpanType | str = SpanType.GENERAL,
    capture_input: bool = True,
    capture_output: bool = True,
    project_name: Optional[str] = None,
    tags: Optional[List[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    client: Optional[Tracelog] = None,
) -> Callable[[C], C]: ...


def track(
    name: Any = None,
    *,
    type: SpanType | str = SpanType.GENERAL,
    capture_input: bool = True,
    capture_output: bool = True,
    project_name: Optional[str] = None,
    tags: Optional[List[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    client: Optional[Tracelog] = None,
) -> Any:
    """
    Decorator that logs each call of the wrapped function as a span.

    Args:
        name: Span name, defaults to the function name.
        type: Span type (``general``, ``tool``, ``llm`` or ``guardrail``).
        capture_input: Record the bound call arguments as the span input.
        capture_output: Record the return value (or yielded items) as output.
        project_name: Destination project for a trace started by this call.
            Falls back to the client's project (``TRACELOG_PROJECT_NAME``).
        tags: Tags added to the span (and to the trace it starts, if any).
        metadata: Metadata added the same way as ``tags``.
        client: Client to log through, defaults to the shared global client.

    Works with plain functions, coroutines, generators and async generators.
    Exceptions are recorded on the span and re-raised unchanged.
    """
    if callable(name):
        return track()(name)

    try:
        span_type = SpanType.parse(type)
    except ValueError as e:
        raise TracelogRuntimeError(str(e)) from e

    options = TrackOptions(
        name=name,
        type=span_type,
        capture_input=capture_input,
        capture_output=capture_output,
        project_name=project_name,
        tags=tags,
        metadata=metadata,
        client=client,
    )

    def decorator(func: C) -> C:
        if inspect.isasyncgenfunction(func):
            return _wrap_async_generator(func, options)  # type: ignore[return-value]
        if inspect.isgeneratorfunction(func):
            return _wrap_generator(func, options)  # type: ignore[return-value]
        if inspect.iscoroutinefunction(func):
            return _wrap_async(func, options)  # type: ignore[return-value]
        return _wrap_sync(func, options)  # type: ignore[return-value]

    return decorator


def flush_tracker(timeout_ms: Optional[int] = None) -> bool:
    """Flush the shared client used by ``@track``."""
    return get_global_client().flush(timeout_ms)


__all__ = ("track", "flush_tracker", "TrackOptions")
