from tracelog.evaluation.evaluator import evaluate
from tracelog.evaluation.experiment import Experiment, ExperimentItem
from tracelog.evaluation.results import EvaluationResult, TestCase, TestResult

__all__ = (
    "evaluate",
    "Experiment",
    "ExperimentItem",
    "EvaluationResult",
    "TestCase",
    "TestResult",
)
