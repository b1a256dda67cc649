from __future__ import annotations
from dotenv import load_dotenv

load_dotenv()

import os
from typing import overload

from tracelog.constants import DEFAULT_PROJECT_NAME


@overload
def optional_env_var(var_name: str) -> str | None: ...


@overload
def optional_env_var(var_name: str, default: str) -> str: ...


def optional_env_var(var_name: str, default: str | None = None) -> str | None:
    return os.getenv(var_name, default)


@overload
def optional_int_env_var(var_name: str) -> int | None: ...


@overload
def optional_int_env_var(var_name: str, default: int) -> int: ...


def optional_int_env_var(var_name: str, default: int | None = None) -> int | None:
    result = optional_env_var(var_name)
    if result is None:
        return default
    try:
        return int(result)
    except ValueError:
        return default


def optional_bool_env_var(var_name: str, default: bool = False) -> bool:
    result = optional_env_var(var_name)
    if result is None:
        return default
    return result.strip().lower() in ("1", "true", "yes", "on")


TRACELOG_URL_OVERRIDE = optional_env_var(
    "TRACELOG_URL_OVERRIDE", "http://localhost:5173/api"
)
TRACELOG_API_KEY = optional_env_var("TRACELOG_API_KEY")
TRACELOG_WORKSPACE = optional_env_var("TRACELOG_WORKSPACE")
TRACELOG_PROJECT_NAME = optional_env_var("TRACELOG_PROJECT_NAME", DEFAULT_PROJECT_NAME)

TRACELOG_TRACK_DISABLE = optional_bool_env_var("TRACELOG_TRACK_DISABLE")

TRACELOG_BG_WORKERS = optional_int_env_var("TRACELOG_BG_WORKERS", 1)
TRACELOG_BG_MAX_QUEUE = optional_int_env_var("TRACELOG_BG_MAX_QUEUE", 10000)
TRACELOG_FLUSH_TIMEOUT_MS = optional_int_env_var("TRACELOG_FLUSH_TIMEOUT_MS", 30000)
TRACELOG_HTTP_TIMEOUT = optional_int_env_var("TRACELOG_HTTP_TIMEOUT", 30)

TRACELOG_NO_COLOR = optional_env_var("TRACELOG_NO_COLOR")
TRACELOG_LOG_LEVEL = optional_env_var("TRACELOG_LOG_LEVEL", "WARNING")
