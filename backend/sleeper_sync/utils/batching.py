import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

async def gather_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int,
    delay: float = 0.0,
    on_batch_done: Optional[Callable[[int, int], None]] = None
) -> List[R]:
    """
    Run worker over items, batch_size at a time.

    Every call in a batch is awaited before the next batch starts, and delay
    seconds are slept between batches (not after the last one). Results come
    back in item order. Workers are expected to handle their own errors; an
    exception escaping a worker propagates once its batch has settled.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: List[R] = []
    total = len(items)

    for start in range(0, total, batch_size):
        batch = items[start:start + batch_size]
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))

        done = min(start + batch_size, total)
        if on_batch_done:
            on_batch_done(done, total)

        if delay and done < total:
            await asyncio.sleep(delay)

    return results
