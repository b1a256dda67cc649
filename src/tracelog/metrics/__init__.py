from tracelog.metrics.base_metric import BaseMetric
from tracelog.metrics.heuristics import Contains, Equals, IsJson, RegexMatch
from tracelog.metrics.score_result import ScoreResult

__all__ = (
    "BaseMetric",
    "ScoreResult",
    "Contains",
    "Equals",
    "IsJson",
    "RegexMatch",
)
