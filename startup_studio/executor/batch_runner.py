"""Bounded fan-out over a homogeneous batch of async work.

Items are processed in fixed chunks of `concurrency`: every call in a chunk
runs concurrently, and the next chunk starts only once the whole chunk has
finished. Peak concurrency is bounded; chunk latency is that of the
slowest item.

A failing (or timed-out) item never cancels its siblings. Its error is
captured in its ItemResult and the batch carries on. No retries happen
here; retry policy belongs to the work callable or its collaborator.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, Optional, Sequence, TypeVar

from startup_studio.executor.schemas import ItemResult

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
KeyT = TypeVar("KeyT", bound=Hashable)


def _identity(item: Any) -> Any:
    return item


async def _run_item(
    item: Any,
    key: Any,
    work: Callable[[Any], Awaitable[Any]],
    timeout: Optional[float],
    label: str,
) -> ItemResult:
    try:
        if timeout:
            value = await asyncio.wait_for(work(item), timeout=timeout)
        else:
            value = await work(item)
        return ItemResult(value=value)
    except asyncio.TimeoutError:
        logger.warning(f"[{label}] {key}: timed out after {timeout}s")
        return ItemResult(error=f"Timed out after {timeout}s")
    except Exception as e:
        logger.warning(f"[{label}] {key}: {type(e).__name__}: {e}")
        return ItemResult(error=f"{type(e).__name__}: {e}")


async def run_batch(
    items: Sequence[ItemT],
    work: Callable[[ItemT], Awaitable[Any]],
    concurrency: int,
    key: Callable[[ItemT], KeyT] = _identity,
    timeout: Optional[float] = None,
    label: str = "batch",
) -> dict[KeyT, ItemResult]:
    """Run `work` over every item, at most `concurrency` at a time.

    Args:
        items: Inputs, processed in order, chunk by chunk
        work: Async unit of work for one item
        concurrency: Chunk size (peak in-flight calls)
        key: Item identity for the result map; must be unique per item
        timeout: Seconds allowed per item; a timeout is an ordinary item failure
        label: Prefix for log lines

    Returns:
        Item key -> ItemResult, in item order

    Raises:
        ValueError: On concurrency < 1 or duplicate keys, before any work starts
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    keys = [key(item) for item in items]
    seen: set = set()
    duplicates: set = set()
    for k in keys:
        if k in seen:
            duplicates.add(k)
        seen.add(k)
    if duplicates:
        raise ValueError(f"Duplicate batch keys: {sorted(map(str, duplicates))}")

    results: dict[KeyT, ItemResult] = {}
    total = len(items)
    for start in range(0, total, concurrency):
        chunk = list(zip(keys[start:start + concurrency], items[start:start + concurrency]))
        outcomes = await asyncio.gather(
            *(_run_item(item, k, work, timeout, label) for k, item in chunk)
        )
        for (k, _), outcome in zip(chunk, outcomes):
            results[k] = outcome
        logger.debug(f"[{label}] {min(start + concurrency, total)}/{total} done")

    failed = sum(1 for r in results.values() if not r.ok)
    if total:
        logger.info(f"[{label}] {total - failed}/{total} succeeded, {failed} failed")
    return results
