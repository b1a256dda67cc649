from .hooks import immutable_wrap_async, immutable_wrap_sync

__all__ = [
    "immutable_wrap_sync",
    "immutable_wrap_async",
]
