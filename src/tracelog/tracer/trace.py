from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from tracelog.constants import SpanType
from tracelog.data.trace import TraceData
from tracelog.tracer import context
from tracelog.tracer.base import ObservedRecord
from tracelog.tracer.span import Span, create_span


class Trace(ObservedRecord[TraceData]):
    """Handle to a trace that has been queued for creation."""

    __slots__ = ()

    def span(
        self,
        name: Optional[str] = None,
        type: SpanType | str = SpanType.GENERAL,
        input: Optional[Any] = None,
        output: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        usage: Optional[Dict[str, int]] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        start_time: Optional[datetime] = None,
        parent_span_id: Optional[str] = None,
        id: Optional[str] = None,
    ) -> Span:
        """
        Start a span under this trace.

        Without an explicit ``parent_span_id`` the span attaches to the span
        currently active in this context if it belongs to this trace (e.g. the
        span of an enclosing ``@track`` function), otherwise to the trace root.
        """
        if parent_span_id is None:
            active = context.get_current_span()
            if active is not None and active.trace_id == self.id:
                parent_span_id = active.id

        return create_span(
            self._client,
            trace_id=self.id,
            project_name=self.project_name,
            parent_span_id=parent_span_id,
            name=name,
            type=type,
            input=input,
            output=output,
            metadata=metadata,
            tags=tags,
            usage=usage,
            model=model,
            provider=provider,
            start_time=start_time,
            id=id,
        )

    def _activate(self) -> Any:
        return context.set_current_trace(self)

    def _deactivate(self, token: Any) -> None:
        context.reset_current_trace(token)

    def _send_update(self, fields: Dict[str, Any]) -> None:
        self._client._update_trace(self._data, fields)

    def _send_feedback_scores(self, scores: List[Dict[str, Any]]) -> None:
        self._client.log_traces_feedback_scores(scores)
