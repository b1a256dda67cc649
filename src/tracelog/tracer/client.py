from __future__ import annotations

import threading
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from tracelog.api import TracelogSyncClient
from tracelog.background_queue import BackgroundQueue
from tracelog.data.feedback import validate_feedback_scores
from tracelog.data.trace import ErrorInfo, SpanData, TraceData
from tracelog.env import (
    TRACELOG_API_KEY,
    TRACELOG_BG_MAX_QUEUE,
    TRACELOG_BG_WORKERS,
    TRACELOG_PROJECT_NAME,
    TRACELOG_TRACK_DISABLE,
    TRACELOG_URL_OVERRIDE,
    TRACELOG_WORKSPACE,
)
from tracelog.exceptions import DatasetNotFound, TracelogAPIError
from tracelog.logger import tracelog_logger
from tracelog.tracer.trace import Trace
from tracelog.utils.id_generator import generate_id, generate_trace_id
from tracelog.utils.serialize import json_encoder

if TYPE_CHECKING:
    from tracelog.datasets.dataset import Dataset
    from tracelog.evaluation.experiment import Experiment

FEEDBACK_SOURCE = "sdk"


class Tracelog:
    """
    Entry point for logging traces, spans and feedback scores.

    Every logging call is turned into a job on a background queue and returns
    immediately; call ``flush()`` before the process exits to make sure all
    queued records have reached the backend.
    """

    __slots__ = (
        "project_name",
        "api_client",
        "disabled",
        "_queue",
        "_owns_queue",
    )

    def __init__(
        self,
        project_name: Optional[str] = None,
        workspace: Optional[str] = None,
        host: Optional[str] = None,
        api_key: Optional[str] = None,
        api_client: Optional[TracelogSyncClient] = None,
        disabled: Optional[bool] = None,
        workers: Optional[int] = None,
        max_queue_size: Optional[int] = None,
    ):
        self.project_name = project_name or TRACELOG_PROJECT_NAME
        self.api_client = api_client or TracelogSyncClient(
            base_url=host or TRACELOG_URL_OVERRIDE,
            api_key=api_key or TRACELOG_API_KEY,
            workspace=workspace or TRACELOG_WORKSPACE,
        )
        self.disabled = TRACELOG_TRACK_DISABLE if disabled is None else disabled
        # clients share one queue unless they size their own
        self._owns_queue = workers is not None or max_queue_size is not None
        if self._owns_queue:
            self._queue = BackgroundQueue(
                workers=workers or TRACELOG_BG_WORKERS,
                max_queue_size=max_queue_size or TRACELOG_BG_MAX_QUEUE,
            )
        else:
            self._queue = BackgroundQueue.get_instance()

        if self.disabled:
            tracelog_logger.info("Tracking is disabled, records will not be sent")

    def _enqueue(self, fn) -> bool:
        if self.disabled:
            return False
        return self._queue.enqueue(fn)

    # -- traces & spans ----------------------------------------------------

    def trace(
        self,
        name: Optional[str] = None,
        input: Optional[Any] = None,
        output: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
        tags: Optional[List[str]] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        error_info: Optional[ErrorInfo] = None,
        project_name: Optional[str] = None,
        id: Optional[str] = None,
    ) -> Trace:
        """Create a trace and queue it for sending. Never blocks on I/O."""
        data = TraceData(
            id=id or generate_trace_id(),
            name=name,
            project_name=project_name or self.project_name,
            input=input,
            output=output,
            metadata=metadata,
            tags=tags,
            end_time=end_time,
            error_info=error_info,
        )
        if start_time is not None:
            data.start_time = start_time

        payload = data.to_payload()
        self._enqueue(lambda: self.api_client.create_traces([payload]))
        return Trace(self, data)

    def _create_span(self, data: SpanData) -> None:
        payload = data.to_payload()
        self._enqueue(lambda: self.api_client.create_spans([payload]))

    def _update_trace(self, data: TraceData, fields: Dict[str, Any]) -> None:
        payload = _update_payload(data, fields)
        self._enqueue(lambda: self.api_client.update_trace(data.id, payload))

    def _update_span(self, data: SpanData, fields: Dict[str, Any]) -> None:
        payload = _update_payload(data, fields)
        payload["trace_id"] = data.trace_id
        if data.parent_span_id is not None:
            payload["parent_span_id"] = data.parent_span_id
        self._enqueue(lambda: self.api_client.update_span(data.id, payload))

    # -- feedback scores ---------------------------------------------------

    def log_traces_feedback_scores(
        self, scores: List[Dict[str, Any]], project_name: Optional[str] = None
    ) -> None:
        """
        Attach scores to traces by id. Each score is a dict with ``id``,
        ``name``, ``value`` and optionally ``reason``. Invalid entries are
        logged and skipped.
        """
        payloads = self._feedback_payloads(scores, project_name)
        if payloads:
            self._enqueue(lambda: self.api_client.log_traces_feedback_scores(payloads))

    def log_spans_feedback_scores(
        self, scores: List[Dict[str, Any]], project_name: Optional[str] = None
    ) -> None:
        """Attach scores to spans by id; same contract as the trace variant."""
        payloads = self._feedback_payloads(scores, project_name)
        if payloads:
            self._enqueue(lambda: self.api_client.log_spans_feedback_scores(payloads))

    def _feedback_payloads(
        self, scores: List[Dict[str, Any]], project_name: Optional[str]
    ) -> List[Dict[str, Any]]:
        valid = validate_feedback_scores(scores, project_name or self.project_name)
        return [
            {**score.model_dump(exclude_none=True), "source": FEEDBACK_SOURCE}
            for score in valid
        ]

    # -- lifecycle ---------------------------------------------------------

    def flush(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Block until every record queued so far has been sent. Returns False if
        ``timeout_ms`` elapsed first. Without a timeout, waits indefinitely.
        """
        tracelog_logger.debug(f"Flushing {self._queue.pending} pending job(s)")
        return self._queue.force_flush(timeout_ms)

    def end(self, timeout_ms: Optional[int] = None) -> None:
        """
        Flush, then stop a queue this client owns. The shared queue is only
        flushed; it is shut down at interpreter exit.
        """
        if self._owns_queue:
            self._queue.shutdown(timeout_ms)
        else:
            self._queue.force_flush(timeout_ms)

    # -- datasets ----------------------------------------------------------

    def create_dataset(self, name: str, description: Optional[str] = None) -> Dataset:
        from tracelog.datasets.dataset import Dataset

        self.api_client.create_dataset({"name": name, "description": description})
        response = self.api_client.get_dataset_by_name(name)
        return Dataset(
            name=name,
            description=description,
            dataset_id=response["id"],
            client=self,
        )

    def get_dataset(self, name: str) -> Dataset:
        from tracelog.datasets.dataset import Dataset

        try:
            response = self.api_client.get_dataset_by_name(name)
        except TracelogAPIError as e:
            if e.status_code == 404:
                raise DatasetNotFound(name) from e
            raise

        dataset = Dataset(
            name=name,
            description=response.get("description"),
            dataset_id=response["id"],
            client=self,
        )
        dataset.sync_hashes()
        return dataset

    def get_or_create_dataset(
        self, name: str, description: Optional[str] = None
    ) -> Dataset:
        try:
            return self.get_dataset(name)
        except DatasetNotFound:
            tracelog_logger.info(f"Dataset '{name}' not found, creating it")
            return self.create_dataset(name, description)

    def delete_dataset(self, name: str) -> None:
        self.api_client.delete_dataset_by_name(name)

    # -- experiments -------------------------------------------------------

    def create_experiment(
        self,
        dataset_name: str,
        name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Experiment:
        from tracelog.evaluation.experiment import Experiment

        experiment_id = generate_id()
        experiment_name = name or f"{dataset_name}-{experiment_id[:8]}"
        payload: Dict[str, Any] = {
            "id": experiment_id,
            "name": experiment_name,
            "dataset_name": dataset_name,
        }
        if metadata:
            payload["metadata"] = metadata
        self.api_client.create_experiment(payload)  # type: ignore[arg-type]
        return Experiment(
            id=experiment_id,
            name=experiment_name,
            dataset_name=dataset_name,
            client=self,
        )


def _update_payload(data: TraceData | SpanData, fields: Dict[str, Any]) -> Dict[str, Any]:
    # tags and metadata are merged locally, so the full merged value is sent;
    # encoding here snapshots user objects at call time
    payload = json_encoder({key: getattr(data, key) for key in fields})
    payload["project_name"] = data.project_name
    return payload


_global_client: Optional[Tracelog] = None
_global_client_lock = threading.Lock()


def get_global_client() -> Tracelog:
    """Client shared by ``@track`` and the integrations, created on first use."""
    global _global_client
    if _global_client is None:
        with _global_client_lock:
            if _global_client is None:
                _global_client = Tracelog()
    return _global_client


def set_global_client(client: Optional[Tracelog]) -> None:
    global _global_client
    with _global_client_lock:
        _global_client = client


__all__ = ("Tracelog", "get_global_client", "set_global_client")
