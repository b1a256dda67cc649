from __future__ import annotations

import random

from opentelemetry import trace
from opentelemetry.sdk.trace.id_generator import IdGenerator


class IsolatedRandomIdGenerator(IdGenerator):
    """
    Trace/span id generator backed by ``random.SystemRandom`` so that user code
    calling ``random.seed()`` cannot make two runs produce colliding ids.
    """

    def __init__(self) -> None:
        self._random = random.SystemRandom()

    def generate_span_id(self) -> int:
        span_id = self._random.getrandbits(64)
        while span_id == trace.INVALID_SPAN_ID:
            span_id = self._random.getrandbits(64)
        return span_id

    def generate_trace_id(self) -> int:
        trace_id = self._random.getrandbits(128)
        while trace_id == trace.INVALID_TRACE_ID:
            trace_id = self._random.getrandbits(128)
        return trace_id


_generator = IsolatedRandomIdGenerator()


def generate_trace_id() -> str:
    return format(_generator.generate_trace_id(), "032x")


def generate_span_id() -> str:
    return format(_generator.generate_span_id(), "016x")


def generate_id() -> str:
    return generate_trace_id()


__all__ = (
    "IsolatedRandomIdGenerator",
    "generate_trace_id",
    "generate_span_id",
    "generate_id",
)
