from __future__ import annotations

import atexit
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set

from tracelog.env import (
    TRACELOG_BG_MAX_QUEUE,
    TRACELOG_BG_WORKERS,
    TRACELOG_FLUSH_TIMEOUT_MS,
)
from tracelog.logger import tracelog_logger


class BackgroundQueue:
    """
    Bounded pool of worker threads that sends log records off the caller's
    thread. With a single worker, jobs run in submission order.
    """

    _instance: Optional[BackgroundQueue] = None
    _lock = threading.Lock()

    def __init__(
        self,
        workers: int = TRACELOG_BG_WORKERS,
        max_queue_size: int = TRACELOG_BG_MAX_QUEUE,
    ):
        self._max_queue_size = max_queue_size
        self._semaphore = threading.Semaphore(max_queue_size)
        self._futures: Set[Future[Any]] = set()
        self._futures_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, workers),
            thread_name_prefix="tracelog-bg",
        )
        self._shutdown = False
        atexit.register(self.shutdown)

    @property
    def pending(self) -> int:
        with self._futures_lock:
            return len(self._futures)

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @classmethod
    def get_instance(cls) -> BackgroundQueue:
        """Queue shared by every client that does not ask for its own."""
        if cls._instance is None or cls._instance.is_shutdown:
            with cls._lock:
                if cls._instance is None or cls._instance.is_shutdown:
                    cls._instance = cls(
                        workers=TRACELOG_BG_WORKERS,
                        max_queue_size=TRACELOG_BG_MAX_QUEUE,
                    )
        return cls._instance

    def enqueue(self, fn: Callable[[], Any]) -> bool:
        if self._shutdown:
            tracelog_logger.warning("[BackgroundQueue] Queue is shut down, dropping job")
            return False
        if not self._semaphore.acquire(blocking=False):
            tracelog_logger.warning("[BackgroundQueue] Queue full, dropping job")
            return False
        try:
            future = self._executor.submit(fn)
        except RuntimeError as e:
            self._semaphore.release()
            tracelog_logger.warning(f"[BackgroundQueue] Could not submit job: {e}")
            return False
        with self._futures_lock:
            self._futures.add(future)
        future.add_done_callback(self._on_done)
        return True

    def _on_done(self, future: Future[Any]) -> None:
        self._semaphore.release()
        with self._futures_lock:
            self._futures.discard(future)
        exc = future.exception()
        if exc is not None:
            tracelog_logger.error(f"[BackgroundQueue] Job failed: {repr(exc)}")

    def force_flush(self, timeout_ms: Optional[int] = TRACELOG_FLUSH_TIMEOUT_MS) -> bool:
        with self._futures_lock:
            pending = set(self._futures)
        if not pending:
            return True
        timeout = None if timeout_ms is None else timeout_ms / 1000.0
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            tracelog_logger.warning(
                f"[BackgroundQueue] Flush timed out, {len(not_done)} jobs still pending"
            )
            return False
        return True

    def shutdown(self, timeout_ms: Optional[int] = TRACELOG_FLUSH_TIMEOUT_MS) -> None:
        if self._shutdown:
            return
        self._shutdown = True
        self.force_flush(timeout_ms)
        self._executor.shutdown(wait=False)
        atexit.unregister(self.shutdown)


__all__ = ["BackgroundQueue"]
