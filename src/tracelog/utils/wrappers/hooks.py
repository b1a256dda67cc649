"""
Lifecycle-hook wrappers used by the client integrations.

A wrapped call runs ``pre_hook`` before the original function, then
``post_hook`` or ``error_hook``, and always ``finally_hook``. Hooks share a
context dict; only ``pre_hook`` may write to it. Every hook is guarded with
``dont_throw`` so instrumentation never changes what the caller sees: the
original result is returned and the original exception is re-raised.
"""

from functools import wraps
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Mapping,
    NamedTuple,
    ParamSpec,
    TypeAlias,
    TypeVar,
)

from tracelog.utils.decorators.dont_throw import dont_throw

P = ParamSpec("P")
R = TypeVar("R")
Ctx: TypeAlias = Dict[str, Any]
ImmCtx: TypeAlias = Mapping[str, Any]


def _noop(*_: Any) -> None:
    pass


class _Hooks(NamedTuple):
    pre: Callable[[Ctx], None]
    post: Callable[[ImmCtx, Any], None]
    error: Callable[[ImmCtx, Exception], None]
    final: Callable[[ImmCtx], None]


def _guard(pre_hook, post_hook, error_hook, finally_hook) -> _Hooks:
    return _Hooks(
        dont_throw(pre_hook),
        dont_throw(post_hook),
        dont_throw(error_hook),
        dont_throw(finally_hook),
    )


def immutable_wrap_sync(
    func: Callable[P, R],
    /,
    *,
    pre_hook: Callable[[Ctx], None] = _noop,
    post_hook: Callable[[ImmCtx, R], None] = _noop,
    error_hook: Callable[[ImmCtx, Exception], None] = _noop,
    finally_hook: Callable[[ImmCtx], None] = _noop,
) -> Callable[P, R]:
    hooks = _guard(pre_hook, post_hook, error_hook, finally_hook)

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        ctx: Ctx = {"args": args, "kwargs": kwargs}
        hooks.pre(ctx)
        try:
            result = func(*args, **kwargs)
            hooks.post(ctx, result)
            return result
        except Exception as e:
            hooks.error(ctx, e)
            raise
        finally:
            hooks.final(ctx)

    return wrapper


def immutable_wrap_async(
    func: Callable[P, Awaitable[R]],
    /,
    *,
    pre_hook: Callable[[Ctx], None] = _noop,
    post_hook: Callable[[ImmCtx, R], None] = _noop,
    error_hook: Callable[[ImmCtx, Exception], None] = _noop,
    finally_hook: Callable[[ImmCtx], None] = _noop,
) -> Callable[P, Awaitable[R]]:
    hooks = _guard(pre_hook, post_hook, error_hook, finally_hook)

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        ctx: Ctx = {"args": args, "kwargs": kwargs}
        hooks.pre(ctx)
        try:
            result = await func(*args, **kwargs)
            hooks.post(ctx, result)
            return result
        except Exception as e:
            hooks.error(ctx, e)
            raise
        finally:
            hooks.final(ctx)

    return wrapper
