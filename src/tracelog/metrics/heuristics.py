from __future__ import annotations

import json
import re
from typing import Any, Optional, Pattern, Union

from tracelog.metrics.base_metric import BaseMetric
from tracelog.metrics.score_result import ScoreResult


class Equals(BaseMetric):
    """1.0 when ``output`` equals ``reference``, else 0.0."""

    def __init__(
        self,
        case_sensitive: bool = False,
        name: str = "equals_metric",
        track: bool = True,
    ):
        self._case_sensitive = case_sensitive
        super().__init__(name=name, track=track)

    def score(self, output: str, reference: str, **ignored_kwargs: Any) -> ScoreResult:
        value = output if self._case_sensitive else output.lower()
        expected = reference if self._case_sensitive else reference.lower()
        return ScoreResult(name=self.name, value=1.0 if value == expected else 0.0)


class Contains(BaseMetric):
    """1.0 when ``reference`` appears in ``output``."""

    def __init__(
        self,
        case_sensitive: bool = False,
        name: str = "contains_metric",
        track: bool = True,
    ):
        self._case_sensitive = case_sensitive
        super().__init__(name=name, track=track)

    def score(self, output: str, reference: str, **ignored_kwargs: Any) -> ScoreResult:
        value = output if self._case_sensitive else output.lower()
        expected = reference if self._case_sensitive else reference.lower()
        return ScoreResult(name=self.name, value=1.0 if expected in value else 0.0)


class RegexMatch(BaseMetric):
    """1.0 when ``output`` matches ``regex`` anywhere."""

    def __init__(
        self,
        regex: Union[str, Pattern[str]],
        name: str = "regex_match_metric",
        track: bool = True,
    ):
        self._pattern = re.compile(regex) if isinstance(regex, str) else regex
        super().__init__(name=name, track=track)

    def score(self, output: str, **ignored_kwargs: Any) -> ScoreResult:
        matched = self._pattern.search(output) is not None
        return ScoreResult(name=self.name, value=1.0 if matched else 0.0)


class IsJson(BaseMetric):
    """1.0 when ``output`` parses as JSON."""

    def __init__(self, name: str = "is_json_metric", track: bool = True):
        super().__init__(name=name, track=track)

    def score(self, output: str, **ignored_kwargs: Any) -> ScoreResult:
        reason: Optional[str] = None
        try:
            json.loads(output)
            value = 1.0
        except (TypeError, ValueError) as e:
            value = 0.0
            reason = str(e)
        return ScoreResult(name=self.name, value=value, reason=reason)
