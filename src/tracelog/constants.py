from __future__ import annotations

from enum import Enum

DEFAULT_PROJECT_NAME = "Default Project"

DATASET_ITEMS_BATCH_SIZE = 1000
DATASET_ITEMS_PAGE_SIZE = 100


class SpanType(str, Enum):
    """
    Kinds of span the backend understands. ``GENERAL`` is used for plain
    function calls, ``LLM`` for model calls made through an integration.
    """

    GENERAL = "general"
    TOOL = "tool"
    LLM = "llm"
    GUARDRAIL = "guardrail"

    @classmethod
    def parse(cls, value: str | SpanType) -> SpanType:
        if isinstance(value, SpanType):
            return value
        try:
            return cls(value.lower())
        except (AttributeError, ValueError):
            raise ValueError(
                f"Invalid span type: {value!r}, expected one of "
                f"{[member.value for member in cls]}"
            ) from None
