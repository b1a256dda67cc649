from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tracelog.metrics.score_result import ScoreResult


@dataclass(slots=True)
class TestCase:
    __test__ = False

    trace_id: str
    dataset_item_id: str
    scoring_inputs: Dict[str, Any]
    task_output: Dict[str, Any]


@dataclass(slots=True)
class TestResult:
    __test__ = False

    test_case: TestCase
    score_results: List[ScoreResult] = field(default_factory=list)
    task_error: Optional[str] = None


@dataclass(slots=True)
class EvaluationResult:
    experiment_id: str
    experiment_name: str
    test_results: List[TestResult]

    def aggregate_scores(self) -> Dict[str, float]:
        """Average value per metric name, ignoring failed scorings."""
        totals: Dict[str, List[float]] = {}
        for result in self.test_results:
            for score in result.score_results:
                if score.scoring_failed:
                    continue
                totals.setdefault(score.name, []).append(score.value)
        return {name: sum(values) / len(values) for name, values in totals.items()}
