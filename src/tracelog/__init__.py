from tracelog.data import DatasetItem, ErrorInfo, FeedbackScore
from tracelog.datasets import Dataset
from tracelog.evaluation import EvaluationResult, evaluate
from tracelog.exceptions import DatasetNotFound, TracelogAPIError, TracelogRuntimeError
from tracelog.tracer import (
    Span,
    Trace,
    Tracelog,
    flush_tracker,
    get_global_client,
    set_global_client,
    track,
)
from tracelog.tracer import context as tracelog_context
from tracelog.version import __version__

__all__ = [
    "__version__",
    "Tracelog",
    "Trace",
    "Span",
    "track",
    "flush_tracker",
    "get_global_client",
    "set_global_client",
    "tracelog_context",
    "Dataset",
    "DatasetItem",
    "ErrorInfo",
    "FeedbackScore",
    "evaluate",
    "EvaluationResult",
    "DatasetNotFound",
    "TracelogAPIError",
    "TracelogRuntimeError",
]
