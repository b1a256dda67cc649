from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from tracelog.logger import tracelog_logger
from tracelog.utils.id_generator import generate_id

if TYPE_CHECKING:
    from tracelog.tracer.client import Tracelog


@dataclass(slots=True, frozen=True)
class ExperimentItem:
    dataset_item_id: str
    trace_id: str


@dataclass(slots=True)
class Experiment:
    id: str
    name: str
    dataset_name: str
    client: Tracelog

    def insert(self, items: List[ExperimentItem]) -> None:
        """Link dataset items to the traces that processed them."""
        if not items:
            return
        payload = [
            {
                "id": generate_id(),
                "experiment_id": self.id,
                "dataset_item_id": item.dataset_item_id,
                "trace_id": item.trace_id,
            }
            for item in items
        ]
        self.client.api_client.create_experiment_items(payload)  # type: ignore[arg-type]
        tracelog_logger.info(
            f"Linked {len(payload)} item(s) to experiment '{self.name}'"
        )
