"""
Base class for all metrics.
"""

from __future__ import annotations

import abc
import functools
from typing import Any, Callable, List, Optional, Union

from tracelog.metrics.score_result import ScoreResult
from tracelog.tracer import context
from tracelog.tracer.decorator import track


class BaseMetric(abc.ABC):
    """
    A metric turns the merged task output and dataset item into a score.

    Subclasses implement ``score`` and accept ``**ignored_kwargs`` so the
    evaluator can pass every available field without knowing which ones a
    metric uses. With ``track=True`` (the default) each call made inside a
    trace is logged as a span of that trace.
    """

    def __init__(self, name: Optional[str] = None, track: bool = True):
        self.name = name or self.__class__.__name__
        self.track = track

        if track:
            self.score = track_metric(self.name, self.score)  # type: ignore[method-assign]

    @abc.abstractmethod
    def score(self, *args: Any, **kwargs: Any) -> Union[ScoreResult, List[ScoreResult]]:
        raise NotImplementedError()


def track_metric(name: str, score_fn: Callable[..., Any]) -> Callable[..., Any]:
    tracked = track(name=name)(score_fn)

    @functools.wraps(score_fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if context.get_current_trace() is None:
            return score_fn(*args, **kwargs)
        return tracked(*args, **kwargs)

    return wrapper
