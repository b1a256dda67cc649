from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tracelog.constants import SpanType
from tracelog.utils.serialize import json_encoder


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorInfo(BaseModel):
    """Exception captured on a span or trace."""

    exception_type: str
    message: str
    traceback: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorInfo:
        return cls(
            exception_type=type(exc).__name__,
            message=str(exc),
            traceback="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        )


class RecordData(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: Optional[str] = None
    project_name: str
    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    input: Optional[Any] = None
    output: Optional[Any] = None
    metadata: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    error_info: Optional[ErrorInfo] = None

    def init_end_time(self) -> None:
        if self.end_time is None:
            self.end_time = utcnow()

    def update(self, **fields: Any) -> None:
        """
        Merge ``fields`` into the record. ``None`` values are ignored, tags are
        appended without duplicates, metadata is merged key by key.
        """
        for key, value in fields.items():
            if value is None:
                continue
            if key == "tags":
                merged = list(self.tags or [])
                merged.extend(tag for tag in value if tag not in merged)
                self.tags = merged
            elif key == "metadata":
                self.metadata = {**(self.metadata or {}), **value}
            else:
                setattr(self, key, value)

    def to_payload(self) -> Dict[str, Any]:
        return json_encoder(self.model_dump(exclude_none=True))


class TraceData(RecordData):
    """Top-level record of one end-to-end operation."""


class SpanData(RecordData):
    """A sub-operation within a trace, optionally nested under another span."""

    trace_id: str
    parent_span_id: Optional[str] = None
    type: SpanType = SpanType.GENERAL
    usage: Optional[Dict[str, int]] = None
    model: Optional[str] = None
    provider: Optional[str] = None
