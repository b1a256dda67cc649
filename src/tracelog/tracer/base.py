from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, TypeVar

from tracelog.data.trace import ErrorInfo, RecordData

if TYPE_CHECKING:
    from tracelog.tracer.client import Tracelog

D = TypeVar("D", bound=RecordData)


class ObservedRecord(ABC, Generic[D]):
    """
    Client-side handle shared by ``Trace`` and ``Span``. Local state is kept in
    ``data``; every change is mirrored to the backend as a queued update.
    """

    __slots__ = ("_client", "_data", "_tokens")

    def __init__(self, client: Tracelog, data: D):
        self._client = client
        self._data = data
        self._tokens: List[Any] = []

    @property
    def client(self) -> Tracelog:
        return self._client

    @property
    def id(self) -> str:
        return self._data.id

    @property
    def name(self) -> Optional[str]:
        return self._data.name

    @property
    def project_name(self) -> str:
        return self._data.project_name

    @property
    def data(self) -> D:
        return self._data

    @property
    def ended(self) -> bool:
        return self._data.end_time is not None

    @abstractmethod
    def _activate(self) -> Any:
        pass

    @abstractmethod
    def _deactivate(self, token: Any) -> None:
        pass

    @abstractmethod
    def _send_update(self, fields: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def _send_feedback_scores(self, scores: List[Dict[str, Any]]) -> None:
        pass

    def update(self, **fields: Any) -> None:
        fields = {k: v for k, v in fields.items() if v is not None}
        if not fields:
            return
        self._data.update(**fields)
        self._send_update(fields)

    def end(
        self,
        end_time: Optional[datetime] = None,
        error_info: Optional[ErrorInfo] = None,
        **fields: Any,
    ) -> None:
        """
        Mark completion. The first call records the end timestamp; later calls
        keep it unless ``end_time`` is given explicitly.
        """
        if end_time is not None:
            self._data.end_time = end_time
        else:
            self._data.init_end_time()
        self.update(end_time=self._data.end_time, error_info=error_info, **fields)

    def log_feedback_score(
        self, name: str, value: float, reason: Optional[str] = None
    ) -> None:
        self._send_feedback_scores(
            [
                {
                    "id": self.id,
                    "name": name,
                    "value": value,
                    "reason": reason,
                    "project_name": self.project_name,
                }
            ]
        )

    def __enter__(self):
        """Make this record the active one in the current context."""
        self._tokens.append(self._activate())
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._deactivate(self._tokens.pop())
        self.end(error_info=ErrorInfo.from_exception(exc) if exc is not None else None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r})"
