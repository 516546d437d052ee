import asyncio

import pytest

from newsfeed.errors import JobTimeoutError, OperationTimeoutError
from newsfeed.services.concurrency import WorkerPool, await_with_deadline, retry_with_timeout, with_timeout


@pytest.mark.asyncio
async def test_worker_pool_processes_every_item_once_with_bound():
    active = 0
    peak = 0
    seen = []

    async def handler(item):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        seen.append(item)
        active -= 1

    await WorkerPool(3).run(list(range(10)), handler)

    assert sorted(seen) == list(range(10))
    assert peak == 3


@pytest.mark.asyncio
async def test_worker_pool_handles_empty_and_rejects_zero():
    calls = []

    async def handler(item):
        calls.append(item)

    await WorkerPool(2).run([], handler)
    assert calls == []
    with pytest.raises(ValueError):
        WorkerPool(0)


@pytest.mark.asyncio
async def test_with_timeout_raises_operation_timeout():
    with pytest.raises(OperationTimeoutError) as exc:
        await with_timeout(asyncio.sleep(1), 0.01, operation="rss.fetch")

    assert exc.value.code == "OPERATION_TIMEOUT"
    assert exc.value.details["operation"] == "rss.fetch"


@pytest.mark.asyncio
async def test_retry_with_timeout_attempts_and_callbacks():
    attempts = []
    retries = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError(f"fail {len(attempts)}")
        return "ok"

    result = await retry_with_timeout(
        flaky,
        retries=2,
        timeout_seconds=1,
        operation="op",
        on_retry=lambda attempt, exc: retries.append((attempt, str(exc))),
    )

    assert result == "ok"
    assert len(attempts) == 3
    assert retries == [(1, "fail 1"), (2, "fail 2")]


@pytest.mark.asyncio
async def test_retry_with_timeout_reraises_last_error():
    retries = []

    async def always_slow():
        await asyncio.sleep(1)

    with pytest.raises(OperationTimeoutError):
        await retry_with_timeout(
            always_slow,
            retries=1,
            timeout_seconds=0.01,
            operation="op",
            on_retry=lambda attempt, exc: retries.append(attempt),
        )

    assert retries == [1]


@pytest.mark.asyncio
async def test_await_with_deadline_does_not_cancel_work():
    finished = asyncio.Event()

    async def slow():
        await asyncio.sleep(0.05)
        finished.set()
        return "done"

    with pytest.raises(JobTimeoutError):
        await await_with_deadline(slow(), 0.01)

    await asyncio.wait_for(finished.wait(), timeout=1)
    assert finished.is_set()


@pytest.mark.asyncio
async def test_await_with_deadline_returns_result():
    async def quick():
        return 42

    assert await await_with_deadline(quick(), 1) == 42
