from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ScoreResult(BaseModel):
    name: str
    value: float
    reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    scoring_failed: bool = False
