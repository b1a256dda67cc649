from tracelog.data.dataset_item import DatasetItem
from tracelog.data.feedback import FeedbackScore
from tracelog.data.trace import ErrorInfo, SpanData, TraceData

__all__ = ("DatasetItem", "ErrorInfo", "FeedbackScore", "SpanData", "TraceData")
