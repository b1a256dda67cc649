from __future__ import annotations

try:
    import openai  # noqa: F401

    HAS_OPENAI = True
except ImportError:
    HAS_OPENAI = False

__all__ = ("HAS_OPENAI",)
