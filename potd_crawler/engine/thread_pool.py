"""Named worker pools keeping CPU-bound image work off the I/O path."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Lock
from typing import Dict

IMAGING_POOL = "imaging"


class ThreadPoolManager:
    """Manage the shared default pool and lazily created named pools."""

    def __init__(self, default_workers: int = 4) -> None:
        self.default_workers = default_workers
        self._default_executor = ThreadPoolExecutor(
            max_workers=default_workers, thread_name_prefix="potd"
        )
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, name: str | None = None, max_workers: int | None = None) -> ThreadPoolExecutor:
        if name is None:
            return self._default_executor
        with self._lock:
            if name not in self._executors:
                self._executors[name] = ThreadPoolExecutor(
                    max_workers=max_workers or self.default_workers,
                    thread_name_prefix=f"potd-{name}",
                )
            return self._executors[name]

    def shutdown(self, wait: bool = False) -> None:
        self._default_executor.shutdown(wait=wait)
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=wait)
            self._executors.clear()


__all__ = ["IMAGING_POOL", "ThreadPoolManager"]
