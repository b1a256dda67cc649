from functools import wraps
from typing import Callable, Optional, ParamSpec, TypeVar

from tracelog.logger import tracelog_logger

P = ParamSpec("P")
T = TypeVar("T")


def dont_throw(func: Callable[P, T]) -> Callable[P, Optional[T]]:
    """
    Log and swallow any exception raised by ``func``. Used for bookkeeping
    that must never break the caller (span hooks, background jobs).
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> Optional[T]:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            tracelog_logger.debug(
                f"[Caught] An exception was raised in {func.__name__}", exc_info=e
            )
            return None

    return wrapper


__all__ = ("dont_throw",)
