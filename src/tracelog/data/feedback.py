from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from tracelog.logger import tracelog_logger


class FeedbackScore(BaseModel):
    """A named numeric value attached after the fact to a trace or span id."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    value: float = Field(strict=True, allow_inf_nan=False)
    reason: Optional[str] = None
    project_name: Optional[str] = None


def validate_feedback_scores(
    scores: List[Dict[str, Any]], default_project_name: str
) -> List[FeedbackScore]:
    """
    Validate raw score dicts. Invalid entries are logged and dropped so that
    logging scores never raises into the caller.
    """
    valid: List[FeedbackScore] = []
    for raw in scores:
        try:
            score = FeedbackScore.model_validate(raw)
        except ValidationError as e:
            tracelog_logger.warning(
                f"Skipping invalid feedback score {raw!r}: {e.errors()}"
            )
            continue
        if score.project_name is None:
            score.project_name = default_project_name
        valid.append(score)
    return valid
