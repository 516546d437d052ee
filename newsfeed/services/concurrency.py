"""Bounded worker pool and timeout helpers for asyncio work."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from newsfeed.errors import JobTimeoutError, OperationTimeoutError

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class WorkerPool(Generic[T]):
    """Fixed number of workers pulling from a shared queue until it is empty.

    Completion order is not guaranteed; every item is handled exactly once.
    Handler exceptions propagate out of ``run``; callers that need per-item
    isolation catch inside the handler.
    """

    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.concurrency = concurrency

    async def run(self, items: Sequence[T], handler: Callable[[T], Awaitable[Any]]) -> None:
        if not items:
            return
        queue: asyncio.Queue[T] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)

        async def worker() -> None:
            while True:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                await handler(item)

        workers = min(self.concurrency, len(items))
        await asyncio.gather(*(worker() for _ in range(workers)))


async def with_timeout(awaitable: Awaitable[R], seconds: float, *, operation: str) -> R:
    """Await ``awaitable`` for at most ``seconds``; the operation is cancelled on expiry."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise OperationTimeoutError(operation, seconds) from exc


async def retry_with_timeout(
    factory: Callable[[], Awaitable[R]],
    *,
    retries: int,
    timeout_seconds: float,
    operation: str,
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> R:
    """Run ``factory()`` up to ``retries + 1`` times, each attempt bounded by its own timeout.

    ``on_retry(attempt, exc)`` is invoked after every failed attempt that will be retried.
    The last error is re-raised once attempts are exhausted.
    """
    attempts = max(0, retries) + 1
    last_error: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        try:
            return await with_timeout(factory(), timeout_seconds, operation=operation)
        except Exception as exc:
            last_error = exc
            if attempt >= attempts:
                break
            if on_retry is not None:
                on_retry(attempt, exc)
    assert last_error is not None
    raise last_error


async def await_with_deadline(
    awaitable: Awaitable[R],
    seconds: float,
    *,
    on_orphan_done: Optional[Callable[["asyncio.Future[Any]"], None]] = None,
) -> R:
    """Wait for ``awaitable`` up to ``seconds``.

    On expiry ``JobTimeoutError`` is raised but the underlying task keeps running;
    the deadline only stops the caller from waiting. ``on_orphan_done`` fires once
    the abandoned task eventually finishes.
    """
    task = asyncio.ensure_future(awaitable)
    done, _pending = await asyncio.wait({task}, timeout=seconds)
    if task in done:
        return task.result()
    task.add_done_callback(_consume_result)
    if on_orphan_done is not None:
        task.add_done_callback(on_orphan_done)
    raise JobTimeoutError(seconds)


def _consume_result(task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("ingest.job.orphan_failed", extra={"error": str(exc)})
