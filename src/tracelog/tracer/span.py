from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from tracelog.constants import SpanType
from tracelog.data.trace import SpanData
from tracelog.exceptions import TracelogRuntimeError
from tracelog.tracer import context
from tracelog.tracer.base import ObservedRecord
from tracelog.utils.id_generator import generate_span_id

if TYPE_CHECKING:
    from tracelog.tracer.client import Tracelog


def create_span(
    client: Tracelog,
    *,
    trace_id: str,
    project_name: str,
    parent_span_id: Optional[str],
    name: Optional[str],
    type: SpanType | str = SpanType.GENERAL,
    input: Optional[Any] = None,
    output: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
    tags: Optional[List[str]] = None,
    usage: Optional[Dict[str, int]] = None,
    model: Optional[str] = None,
    provider: Optional[str] = None,
    start_time: Optional[datetime] = None,
    id: Optional[str] = None,
) -> Span:
    try:
        span_type = SpanType.parse(type)
    except ValueError as e:
        raise TracelogRuntimeError(str(e)) from e

    data = SpanData(
        id=id or generate_span_id(),
        trace_id=trace_id,
        parent_span_id=parent_span_id,
        project_name=project_name,
        name=name,
        type=span_type,
        input=input,
        output=output,
        metadata=metadata,
        tags=tags,
        usage=usage,
        model=model,
        provider=provider,
    )
    if start_time is not None:
        data.start_time = start_time
    client._create_span(data)
    return Span(client, data)


class Span(ObservedRecord[SpanData]):
    """Handle to a span that has been queued for creation."""

    __slots__ = ()

    @property
    def trace_id(self) -> str:
        return self._data.trace_id

    @property
    def parent_span_id(self) -> Optional[str]:
        return self._data.parent_span_id

    @property
    def type(self) -> SpanType:
        return self._data.type

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
        id: Optional[str] = None,
    ) -> Span:
        """Start a child span of this span."""
        return create_span(
            self._client,
            trace_id=self.trace_id,
            project_name=self.project_name,
            parent_span_id=self.id,
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
        return context.push_span(self)

    def _deactivate(self, token: Any) -> None:
        context.pop_span(token)

    def _send_update(self, fields: Dict[str, Any]) -> None:
        self._client._update_span(self._data, fields)

    def _send_feedback_scores(self, scores: List[Dict[str, Any]]) -> None:
        self._client.log_spans_feedback_scores(scores)
