"""
JSON-safe conversion of arbitrary payloads.

Trace and span inputs/outputs are user objects; everything that crosses the
wire goes through ``json_encoder`` first so the REST client never fails on an
unserializable value.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
from collections import deque
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from types import GeneratorType
from typing import Any, Callable, Dict, Type
from uuid import UUID

from pydantic import BaseModel

from tracelog.logger import tracelog_logger


def _isoformat(o: datetime.date | datetime.time) -> str:
    return o.isoformat()


def _decimal_encoder(dec_value: Decimal) -> int | float:
    if dec_value.as_tuple().exponent >= 0:  # type: ignore[operator]
        return int(dec_value)
    return float(dec_value)


ENCODERS_BY_TYPE: Dict[Type[Any], Callable[[Any], Any]] = {
    bytes: lambda o: o.decode(errors="replace"),
    datetime.date: _isoformat,
    datetime.datetime: _isoformat,
    datetime.time: _isoformat,
    datetime.timedelta: lambda td: td.total_seconds(),
    Decimal: _decimal_encoder,
    Enum: lambda o: o.value,
    frozenset: list,
    deque: list,
    GeneratorType: list,
    PurePath: str,
    set: list,
    UUID: str,
}


def _dict_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def json_encoder(obj: Any) -> Any:
    """
    Convert ``obj`` into a structure made only of dicts, lists, strings,
    numbers, booleans and ``None``. Unknown objects fall back to ``repr``.
    """
    if isinstance(obj, BaseModel):
        return json_encoder(obj.model_dump(mode="json"))

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return json_encoder(dataclasses.asdict(obj))

    if isinstance(obj, Enum):
        return json_encoder(obj.value)

    if isinstance(obj, (str, int, float, type(None))):
        return obj

    if isinstance(obj, dict):
        return {_dict_key(k): json_encoder(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [json_encoder(item) for item in obj]

    for base in obj.__class__.__mro__[:-1]:
        encoder = ENCODERS_BY_TYPE.get(base)
        if encoder is not None:
            return json_encoder(encoder(obj))

    try:
        return json_encoder(dict(vars(obj)))
    except (TypeError, RecursionError):
        pass

    try:
        return repr(obj)
    except Exception as e:
        tracelog_logger.debug(f"[Caught] Failed to serialize {type(obj)}", exc_info=e)
        return None


def safe_serialize(obj: Any) -> str:
    return json.dumps(json_encoder(obj))


__all__ = ("json_encoder", "safe_serialize")
