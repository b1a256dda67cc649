from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from tracelog.utils.id_generator import generate_id
from tracelog.utils.serialize import json_encoder

SERVER_MANAGED_FIELDS = frozenset(
    {
        "created_at",
        "created_by",
        "last_updated_at",
        "last_updated_by",
        "dataset_id",
        "source",
        "trace_id",
        "span_id",
        "experiment_items",
    }
)


class DatasetItem(BaseModel):
    """An input/expected-output pair stored in a named dataset."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=generate_id)
    input: Any = None
    expected_output: Any = None
    metadata: Optional[Dict[str, Any]] = None

    def content(self) -> Dict[str, Any]:
        """Everything except the id; extra fields are kept."""
        return json_encoder(self.model_dump(exclude={"id"}, exclude_none=True))

    def content_hash(self) -> str:
        encoded = json.dumps(self.content(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, **self.content()}

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> DatasetItem:
        """Build an item from a backend response, dropping server-managed fields."""
        return cls.model_validate(
            {k: v for k, v in raw.items() if k not in SERVER_MANAGED_FIELDS}
        )
