from __future__ import annotations

from typing import Any, Optional

from httpx import HTTPError, Response


class TracelogAPIError(HTTPError):
    """
    Raised by the REST client for any response with a status code >= 400.
    """

    status_code: int
    detail: Any
    response: Optional[Response]

    def __init__(self, status_code: int, detail: Any, response: Optional[Response]):
        self.status_code = status_code
        self.detail = detail
        self.response = response
        super().__init__(f"{status_code}: {detail}")


class DatasetNotFound(TracelogAPIError):
    def __init__(self, name: str):
        super().__init__(404, f"Dataset '{name}' not found", None)
        self.name = name


class TracelogRuntimeError(RuntimeError):
    """
    Raised when the client is used in a way it cannot honour, e.g. an unknown span type.
    """


__all__ = ("TracelogAPIError", "DatasetNotFound", "TracelogRuntimeError")
