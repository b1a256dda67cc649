from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, TypeVar

from tracelog.constants import SpanType
from tracelog.data.trace import ErrorInfo
from tracelog.integrations.openai.config import HAS_OPENAI
from tracelog.tracer import context
from tracelog.tracer.client import get_global_client
from tracelog.utils.serialize import json_encoder
from tracelog.utils.wrappers import immutable_wrap_async, immutable_wrap_sync

if TYPE_CHECKING:
    from tracelog.tracer.client import Tracelog

TClient = TypeVar("TClient")

SPAN_NAME = "chat_completion_create"
PROVIDER = "openai"
_WRAPPED_MARKER = "__tracelog_tracked__"


def _start_span(ctx: Dict[str, Any], project_name: Optional[str]) -> None:
    kwargs: Dict[str, Any] = dict(ctx["kwargs"])
    messages = kwargs.pop("messages", None)

    trace = context.get_current_trace()
    if trace is None:
        client: Tracelog = get_global_client()
        if client.disabled:
            return
        trace = client.trace(
            name=SPAN_NAME,
            input={"messages": messages},
            project_name=project_name,
        )
        ctx["owned_trace"] = trace

    ctx["span"] = trace.span(
        name=SPAN_NAME,
        type=SpanType.LLM,
        input={"messages": messages},
        metadata={k: v for k, v in kwargs.items() if k != "stream"},
        model=kwargs.get("model"),
        provider=PROVIDER,
    )


def _record_response(ctx: Mapping[str, Any], response: Any) -> None:
    span = ctx.get("span")
    if span is None:
        return
    body = json_encoder(response)
    usage = body.get("usage") if isinstance(body, dict) else None
    output = {"choices": body.get("choices")} if isinstance(body, dict) else body
    span.end(
        output=output,
        usage=_usage(usage),
        model=body.get("model") if isinstance(body, dict) else None,
    )
    owned_trace = ctx.get("owned_trace")
    if owned_trace is not None:
        owned_trace.end(output=output)


def _record_error(ctx: Mapping[str, Any], error: Exception) -> None:
    error_info = ErrorInfo.from_exception(error)
    span = ctx.get("span")
    if span is not None:
        span.end(error_info=error_info)
    owned_trace = ctx.get("owned_trace")
    if owned_trace is not None:
        owned_trace.end(error_info=error_info)


def _usage(raw: Any) -> Optional[Dict[str, int]]:
    if not isinstance(raw, dict):
        return None
    return {k: v for k, v in raw.items() if isinstance(v, int)}


def track_openai(client: TClient, project_name: Optional[str] = None) -> TClient:
    """
    Log every ``chat.completions.create`` call of an OpenAI client (sync or
    async) as an ``llm`` span. Streaming responses are passed through
    untracked. The client is patched in place and returned.
    """
    completions = client.chat.completions  # type: ignore[attr-defined]
    original = completions.create
    if getattr(original, _WRAPPED_MARKER, False):
        return client

    def pre_hook(ctx: Dict[str, Any]) -> None:
        if ctx["kwargs"].get("stream"):
            return
        _start_span(ctx, project_name)

    if _is_async_client(client):
        wrapped = immutable_wrap_async(
            original,
            pre_hook=pre_hook,
            post_hook=_record_response,
            error_hook=_record_error,
        )
    else:
        wrapped = immutable_wrap_sync(
            original,
            pre_hook=pre_hook,
            post_hook=_record_response,
            error_hook=_record_error,
        )

    setattr(wrapped, _WRAPPED_MARKER, True)
    completions.create = wrapped
    return client


def _is_async_client(client: Any) -> bool:
    if HAS_OPENAI:
        from openai import AsyncOpenAI

        if isinstance(client, AsyncOpenAI):
            return True
    return inspect.iscoroutinefunction(client.chat.completions.create)
