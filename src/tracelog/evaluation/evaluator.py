from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from tracelog.data.dataset_item import DatasetItem
from tracelog.data.trace import ErrorInfo
from tracelog.datasets.dataset import Dataset
from tracelog.evaluation.experiment import ExperimentItem
from tracelog.evaluation.report import display_summary
from tracelog.evaluation.results import EvaluationResult, TestCase, TestResult
from tracelog.logger import tracelog_logger
from tracelog.metrics.base_metric import BaseMetric
from tracelog.metrics.score_result import ScoreResult
from tracelog.tracer.client import Tracelog, get_global_client

EVALUATION_TRACE_NAME = "evaluation_task"

Task = Callable[[Dict[str, Any]], Dict[str, Any]]


def evaluate(
    dataset: Dataset,
    task: Task,
    scoring_metrics: Optional[List[BaseMetric]] = None,
    experiment_name: Optional[str] = None,
    experiment_config: Optional[Dict[str, Any]] = None,
    project_name: Optional[str] = None,
    nb_samples: Optional[int] = None,
    task_threads: int = 16,
    verbose: int = 1,
    client: Optional[Tracelog] = None,
) -> EvaluationResult:
    """
    Run ``task`` over the items of ``dataset`` and score every output.

    Each item is processed in its own trace; tracked functions called by the
    task nest under it. The task receives the item content as a dict and
    must return a dict. That dict, merged over the item content, is passed as
    keyword arguments to each metric's ``score``.

    A metric that raises yields a failed ``ScoreResult`` carrying the
    exception message; a task that raises marks every metric of that item as
    failed the same way. Neither aborts the evaluation.
    """
    client = client or get_global_client()
    scoring_metrics = scoring_metrics or []
    console = Console(quiet=verbose < 1)

    experiment = client.create_experiment(
        dataset_name=dataset.name,
        name=experiment_name,
        metadata=experiment_config,
    )
    items = dataset.get_items(nb_samples=nb_samples)
    eval_project = project_name or client.project_name

    test_results: List[TestResult] = []
    start_time = time.time()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress_task = progress.add_task("Running evaluation tasks...", total=len(items))
        completed = 0

        with ThreadPoolExecutor(max_workers=max(1, task_threads)) as executor:
            futures = [
                executor.submit(
                    _run_test_case, client, item, task, scoring_metrics, eval_project
                )
                for item in items
            ]
            for future in as_completed(futures):
                test_results.append(future.result())
                completed += 1
                progress.update(
                    progress_task,
                    advance=1,
                    description=f"Running evaluation tasks... ({completed}/{len(items)})",
                )

    elapsed = time.time() - start_time
    console.print(
        f"[green]✓[/green] Evaluated {len(items)} item(s) in [bold]{elapsed:.1f}s[/bold]"
    )

    experiment.insert(
        [
            ExperimentItem(
                dataset_item_id=result.test_case.dataset_item_id,
                trace_id=result.test_case.trace_id,
            )
            for result in test_results
        ]
    )
    client.flush()

    result = EvaluationResult(
        experiment_id=experiment.id,
        experiment_name=experiment.name,
        test_results=test_results,
    )
    if verbose >= 1:
        display_summary(console, result)
    return result


def _run_test_case(
    client: Tracelog,
    item: DatasetItem,
    task: Task,
    scoring_metrics: List[BaseMetric],
    project_name: str,
) -> TestResult:
    item_content = item.content()
    trace = client.trace(
        name=EVALUATION_TRACE_NAME,
        input=item_content,
        project_name=project_name,
        metadata={"dataset_item_id": item.id},
    )

    task_output: Dict[str, Any] = {}
    task_error: Optional[Exception] = None
    with trace:
        try:
            task_output = task(item_content)
            if not isinstance(task_output, dict):
                raise TypeError(
                    f"The task must return a dict, got {type(task_output).__name__}"
                )
        except Exception as e:
            tracelog_logger.error(f"Task failed for dataset item {item.id}: {e}")
            task_error = e
            task_output = {}
            trace.update(error_info=ErrorInfo.from_exception(e))

        trace.update(output=task_output)

        scoring_inputs = {**item_content, **task_output}
        if task_error is not None:
            score_results = [
                ScoreResult(
                    name=metric.name, value=0.0, reason=str(task_error), scoring_failed=True
                )
                for metric in scoring_metrics
            ]
        else:
            score_results = _score(scoring_metrics, scoring_inputs)

    client.log_traces_feedback_scores(
        [
            {
                "id": trace.id,
                "name": score.name,
                "value": score.value,
                "reason": score.reason,
            }
            for score in score_results
            if not score.scoring_failed
        ],
        project_name=project_name,
    )

    return TestResult(
        test_case=TestCase(
            trace_id=trace.id,
            dataset_item_id=item.id,
            scoring_inputs=scoring_inputs,
            task_output=task_output,
        ),
        score_results=score_results,
        task_error=str(task_error) if task_error is not None else None,
    )


def _score(metrics: List[BaseMetric], scoring_inputs: Dict[str, Any]) -> List[ScoreResult]:
    results: List[ScoreResult] = []
    for metric in metrics:
        try:
            outcome = metric.score(**scoring_inputs)
            if isinstance(outcome, list):
                results.extend(outcome)
            else:
                results.append(outcome)
        except Exception as e:
            tracelog_logger.error(f"Metric '{metric.name}' failed: {e}")
            results.append(
                ScoreResult(name=metric.name, value=0.0, reason=str(e), scoring_failed=True)
            )
    return results
