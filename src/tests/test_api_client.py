import json
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx
import pytest

from tracelog.api import TracelogSyncClient
from tracelog.exceptions import TracelogAPIError

BASE_URL = "http://backend.test/api"


def _client(handler, api_key="secret", workspace="team") -> TracelogSyncClient:
    return TracelogSyncClient(
        base_url=BASE_URL,
        api_key=api_key,
        workspace=workspace,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


@pytest.fixture
def requests_seen() -> List[httpx.Request]:
    return []


@pytest.fixture
def api(requests_seen: List[httpx.Request]) -> TracelogSyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, json={"ok": True})

    return _client(handler)


def _body(request: httpx.Request) -> Dict[str, Any]:
    return json.loads(request.content)


def test_headers(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    api.is_alive()

    (request,) = requests_seen
    assert request.headers["Authorization"] == "secret"
    assert request.headers["X-Workspace"] == "team"
    assert request.url.path == "/api/is-alive/ping"
    assert request.method == "GET"


def test_headers_without_credentials(requests_seen: List[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(200, json={})

    _client(handler, api_key=None, workspace=None).is_alive()

    assert "Authorization" not in requests_seen[0].headers
    assert "X-Workspace" not in requests_seen[0].headers


def test_create_traces(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    api.create_traces(
        [{"id": "t1", "project_name": "p", "start_time": start}]  # type: ignore[typeddict-item]
    )

    (request,) = requests_seen
    assert request.method == "POST"
    assert request.url.path == "/api/v1/private/traces/batch"
    assert _body(request) == {
        "traces": [
            {"id": "t1", "project_name": "p", "start_time": "2024-01-01T00:00:00+00:00"}
        ]
    }


def test_update_span(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    api.update_span("s1", {"trace_id": "t1", "output": {"a": 1}})

    (request,) = requests_seen
    assert request.method == "PATCH"
    assert request.url.path == "/api/v1/private/spans/s1"
    assert _body(request)["output"] == {"a": 1}


def test_feedback_scores(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    score = {"id": "t1", "name": "n", "value": 1.0, "source": "sdk"}
    api.log_traces_feedback_scores([score])  # type: ignore[list-item]
    api.log_spans_feedback_scores([score])  # type: ignore[list-item]

    assert [r.method for r in requests_seen] == ["PUT", "PUT"]
    assert [r.url.path for r in requests_seen] == [
        "/api/v1/private/traces/feedback-scores",
        "/api/v1/private/spans/feedback-scores",
    ]
    assert _body(requests_seen[0]) == {"scores": [score]}


def test_dataset_endpoints(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    api.get_dataset_by_name("qa")
    api.insert_dataset_items("qa", [{"id": "i1", "input": "x"}])
    api.get_dataset_items("ds-1", page=2, size=50)

    retrieve, insert, items = requests_seen
    assert retrieve.url.path == "/api/v1/private/datasets/retrieve"
    assert _body(retrieve) == {"dataset_name": "qa"}
    assert insert.method == "PUT"
    assert _body(insert) == {"dataset_name": "qa", "items": [{"id": "i1", "input": "x"}]}
    assert items.method == "GET"
    assert items.url.path == "/api/v1/private/datasets/ds-1/items"
    assert items.url.params["page"] == "2"
    assert items.url.params["size"] == "50"


def test_experiment_items(api: TracelogSyncClient, requests_seen: List[httpx.Request]):
    link = {"id": "e1", "experiment_id": "x", "dataset_item_id": "i1", "trace_id": "t1"}
    api.create_experiment_items([link])  # type: ignore[list-item]

    assert requests_seen[0].url.path == "/api/v1/private/experiments/items"
    assert _body(requests_seen[0]) == {"experiment_items": [link]}


def test_error_response_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"errors": ["Dataset not found"]})

    with pytest.raises(TracelogAPIError) as exc_info:
        _client(handler).get_dataset_by_name("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == ["Dataset not found"]
    assert exc_info.value.response is not None


def test_error_response_with_text_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(TracelogAPIError) as exc_info:
        _client(handler).is_alive()

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "bad gateway"


def test_empty_response_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    assert _client(handler).update_trace("t1", {"output": 1}) is None
