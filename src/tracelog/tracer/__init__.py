from tracelog.tracer.client import Tracelog, get_global_client, set_global_client
from tracelog.tracer.decorator import flush_tracker, track
from tracelog.tracer.span import Span
from tracelog.tracer.trace import Trace

__all__ = (
    "Tracelog",
    "Trace",
    "Span",
    "track",
    "flush_tracker",
    "get_global_client",
    "set_global_client",
)
