from typing import Any, Dict, List, Literal, Mapping, Optional

import httpx
from httpx import Response

from tracelog.env import TRACELOG_HTTP_TIMEOUT
from tracelog.exceptions import TracelogAPIError
from tracelog.utils.serialize import json_encoder
from tracelog.utils.url import url_for
from tracelog.api.api_types import (
    DatasetItemPayload,
    DatasetItemsPage,
    DatasetPayload,
    DatasetResponse,
    ExperimentItemPayload,
    ExperimentPayload,
    FeedbackScorePayload,
    SpanPayload,
    TracePayload,
)


def _headers(api_key: Optional[str], workspace: Optional[str]) -> Mapping[str, str]:
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = api_key
    if workspace:
        headers["X-Workspace"] = workspace
    return headers


def _handle_response(r: Response) -> Any:
    if r.status_code >= 400:
        try:
            body = r.json()
            detail = body.get("detail") or body.get("errors") or r.text
        except Exception:
            detail = r.text
        raise TracelogAPIError(r.status_code, detail, r)
    if not r.content:
        return None
    return r.json()


class TracelogSyncClient:
    __slots__ = ("base_url", "api_key", "workspace", "client")

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        workspace: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.workspace = workspace
        self.client = client or httpx.Client(timeout=TRACELOG_HTTP_TIMEOUT)

    def _request(
        self,
        method: Literal["POST", "PUT", "PATCH", "GET"],
        url: str,
        payload: Any,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if method == "GET":
            r = self.client.request(
                method,
                url,
                params=payload if params is None else params,
                headers=_headers(self.api_key, self.workspace),
            )
        else:
            r = self.client.request(
                method,
                url,
                json=json_encoder(payload),
                params=params,
                headers=_headers(self.api_key, self.workspace),
            )
        return _handle_response(r)

    def close(self) -> None:
        self.client.close()

    def is_alive(self) -> Any:
        return self._request(
            "GET",
            url_for("/is-alive/ping", self.base_url),
            {},
        )

    def create_traces(self, traces: List[TracePayload]) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/traces/batch", self.base_url),
            {"traces": traces},
        )

    def update_trace(self, trace_id: str, payload: Dict[str, Any]) -> Any:
        return self._request(
            "PATCH",
            url_for(f"/v1/private/traces/{trace_id}", self.base_url),
            payload,
        )

    def log_traces_feedback_scores(self, scores: List[FeedbackScorePayload]) -> Any:
        return self._request(
            "PUT",
            url_for("/v1/private/traces/feedback-scores", self.base_url),
            {"scores": scores},
        )

    def create_spans(self, spans: List[SpanPayload]) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/spans/batch", self.base_url),
            {"spans": spans},
        )

    def update_span(self, span_id: str, payload: Dict[str, Any]) -> Any:
        return self._request(
            "PATCH",
            url_for(f"/v1/private/spans/{span_id}", self.base_url),
            payload,
        )

    def log_spans_feedback_scores(self, scores: List[FeedbackScorePayload]) -> Any:
        return self._request(
            "PUT",
            url_for("/v1/private/spans/feedback-scores", self.base_url),
            {"scores": scores},
        )

    def create_dataset(self, payload: DatasetPayload) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/datasets", self.base_url),
            payload,
        )

    def get_dataset_by_name(self, dataset_name: str) -> DatasetResponse:
        return self._request(
            "POST",
            url_for("/v1/private/datasets/retrieve", self.base_url),
            {"dataset_name": dataset_name},
        )

    def delete_dataset_by_name(self, dataset_name: str) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/datasets/delete", self.base_url),
            {"dataset_name": dataset_name},
        )

    def insert_dataset_items(
        self, dataset_name: str, items: List[DatasetItemPayload]
    ) -> Any:
        return self._request(
            "PUT",
            url_for("/v1/private/datasets/items", self.base_url),
            {"dataset_name": dataset_name, "items": items},
        )

    def delete_dataset_items(self, item_ids: List[str]) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/datasets/items/delete", self.base_url),
            {"item_ids": item_ids},
        )

    def get_dataset_items(
        self, dataset_id: str, page: int = 1, size: int = 100
    ) -> DatasetItemsPage:
        return self._request(
            "GET",
            url_for(f"/v1/private/datasets/{dataset_id}/items", self.base_url),
            {"page": page, "size": size},
        )

    def create_experiment(self, payload: ExperimentPayload) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/experiments", self.base_url),
            payload,
        )

    def create_experiment_items(self, items: List[ExperimentItemPayload]) -> Any:
        return self._request(
            "POST",
            url_for("/v1/private/experiments/items", self.base_url),
            {"experiment_items": items},
        )


__all__ = ("TracelogSyncClient",)
