from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from rich.console import Console
from rich.table import Table

from tracelog.evaluation.results import EvaluationResult


def display_summary(console: Console, result: EvaluationResult) -> None:
    failures: Dict[str, int] = defaultdict(int)
    names: List[str] = []
    for test_result in result.test_results:
        for score in test_result.score_results:
            if score.name not in names:
                names.append(score.name)
            if score.scoring_failed:
                failures[score.name] += 1

    averages = result.aggregate_scores()

    table = Table(
        title=f"{result.experiment_name} ({len(result.test_results)} samples)"
    )
    table.add_column("Metric")
    table.add_column("Average", justify="right")
    table.add_column("Failed", justify="right")

    for name in names:
        average = averages.get(name)
        table.add_row(
            name,
            f"{average:.4f}" if average is not None else "-",
            str(failures[name]) if failures[name] else "",
        )

    console.print()
    console.print(table)
