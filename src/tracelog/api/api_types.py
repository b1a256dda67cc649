from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

from typing_extensions import NotRequired


class ErrorInfoPayload(TypedDict):
    exception_type: str
    message: str
    traceback: str


class TracePayload(TypedDict):
    id: str
    project_name: str
    start_time: str
    name: NotRequired[str]
    end_time: NotRequired[str]
    input: NotRequired[Any]
    output: NotRequired[Any]
    metadata: NotRequired[Dict[str, Any]]
    tags: NotRequired[List[str]]
    error_info: NotRequired[ErrorInfoPayload]


class SpanPayload(TracePayload):
    trace_id: str
    type: str
    parent_span_id: NotRequired[str]
    usage: NotRequired[Dict[str, int]]
    model: NotRequired[str]
    provider: NotRequired[str]


class FeedbackScorePayload(TypedDict):
    id: str
    name: str
    value: float
    source: str
    project_name: NotRequired[str]
    reason: NotRequired[str]


class DatasetPayload(TypedDict):
    name: str
    description: NotRequired[Optional[str]]


class DatasetResponse(TypedDict):
    id: str
    name: str
    description: NotRequired[Optional[str]]


class DatasetItemPayload(TypedDict):
    id: str
    input: NotRequired[Any]
    expected_output: NotRequired[Any]
    metadata: NotRequired[Dict[str, Any]]


class DatasetItemsPage(TypedDict):
    content: List[DatasetItemPayload]
    page: int
    size: int
    total: int


class ExperimentPayload(TypedDict):
    id: str
    name: str
    dataset_name: str
    metadata: NotRequired[Dict[str, Any]]


class ExperimentItemPayload(TypedDict):
    id: str
    experiment_id: str
    dataset_item_id: str
    trace_id: str
