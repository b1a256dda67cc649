from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, Tuple

from tracelog.logger import tracelog_logger

_IGNORED_ARGS = ("self", "cls")


def format_inputs(
    f: Callable, args: Tuple[Any, ...], kwargs: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Map call arguments onto parameter names. ``self``/``cls`` are dropped,
    ``*args`` and ``**kwargs`` are kept under their parameter names.
    """
    try:
        params = list(inspect.signature(f).parameters.values())
    except (TypeError, ValueError):
        return {"args": list(args), "kwargs": kwargs}

    inputs: Dict[str, Any] = {}
    arg_i = 0
    try:
        for param in params:
            if param.kind in (
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                if arg_i < len(args):
                    inputs[param.name] = args[arg_i]
                    arg_i += 1
                elif param.name in kwargs:
                    inputs[param.name] = kwargs[param.name]
            elif param.kind == inspect.Parameter.VAR_POSITIONAL:
                inputs[param.name] = list(args[arg_i:])
                arg_i = len(args)
            elif param.kind == inspect.Parameter.KEYWORD_ONLY:
                if param.name in kwargs:
                    inputs[param.name] = kwargs[param.name]
            elif param.kind == inspect.Parameter.VAR_KEYWORD:
                named = {p.name for p in params}
                extra = {k: v for k, v in kwargs.items() if k not in named}
                inputs[param.name] = extra
    except Exception as e:
        tracelog_logger.debug(
            f"[Caught] Failed to format inputs of {getattr(f, '__name__', f)}",
            exc_info=e,
        )
        return {}

    for name in _IGNORED_ARGS:
        inputs.pop(name, None)
    return inputs


def format_output(output: Any) -> Dict[str, Any]:
    if isinstance(output, dict):
        return output
    return {"output": output}
