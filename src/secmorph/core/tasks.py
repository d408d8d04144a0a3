"""Cooperative cancellation, progress reporting and background execution.

The algorithms are single-threaded; these helpers only let a caller run a
top-level operation off its own thread, poll it, and cancel it between
sections or steps.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    def __call__(self, stage: str, done: int, total: int) -> None: ...


class CancellationToken:
    """Thread-safe flag polled by the engine at section/step boundaries."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


def report(progress: Optional[ProgressCallback], stage: str, done: int, total: int) -> None:
    """Invoke a progress callback; a failing callback never affects the run."""
    if progress is None:
        return
    try:
        progress(stage, done, total)
    except Exception as e:
        logger.warning(f"Progress callback failed at {stage} {done}/{total}: {e}")


class MorphTask:
    """Handle on a background unit of work: a future plus its cancellation token."""

    def __init__(self, future: Future, token: CancellationToken, executor: Executor | None = None):
        self.future = future
        self.token = token
        self._owned_executor = executor

    def cancel(self) -> None:
        """Request cooperative cancellation; the result is still delivered (partial)."""
        self.token.cancel()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> Any:
        try:
            return self.future.result(timeout=timeout)
        finally:
            if self._owned_executor is not None and self.future.done():
                self._owned_executor.shutdown(wait=False)
                self._owned_executor = None


def submit(
    fn: Callable[..., Any],
    *args: Any,
    executor: Executor | None = None,
    **kwargs: Any,
) -> MorphTask:
    """Run ``fn(*args, cancel=token, **kwargs)`` on an executor and return a MorphTask."""
    token = CancellationToken()
    owned = None
    if executor is None:
        owned = ThreadPoolExecutor(max_workers=1, thread_name_prefix="secmorph")
        executor = owned
    future = executor.submit(fn, *args, cancel=token, **kwargs)
    return MorphTask(future, token, owned)
