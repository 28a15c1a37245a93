"""
Height-constrained fitter.

Finds, by binary search against a measurement callback, the largest prefix of two
positionally aligned queues that renders within a height limit. The callback is
expensive (a browser layout per call), so the search is strictly sequential.

Rendered height is assumed to be non-decreasing in the prefix length. The fitter
does not check this.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, Sequence, Tuple, TypeVar

from card_paginator.utils.events import NullEventSink, PaginationEventSink

logger = logging.getLogger(__name__)

T = TypeVar("T")

# render(k) -> rendered height of the first k items of each track
RenderPrefix = Callable[[int], Awaitable[float]]


@dataclass(frozen=True)
class AlignedQueue(Generic[T]):
    """
    Two independently tokenized tracks consumed in lockstep.

    Index ``k`` means "the first k remaining items of each track", even when the
    tracks have different lengths. Nothing checks that items at the same index
    actually correspond to each other.
    """
    track_a: Tuple[T, ...] = ()
    track_b: Tuple[T, ...] = ()
    offset: int = 0

    @classmethod
    def of(cls, track_a: Sequence[T], track_b: Sequence[T]) -> "AlignedQueue[T]":
        return cls(tuple(track_a), tuple(track_b))

    @property
    def remaining_a(self) -> Tuple[T, ...]:
        return self.track_a[self.offset:]

    @property
    def remaining_b(self) -> Tuple[T, ...]:
        return self.track_b[self.offset:]

    def __len__(self) -> int:
        return max(0, max(len(self.track_a), len(self.track_b)) - self.offset)

    @property
    def is_empty(self) -> bool:
        return self.offset >= len(self.track_a) and self.offset >= len(self.track_b)

    def head(self, k: int) -> Tuple[Tuple[T, ...], Tuple[T, ...]]:
        end = self.offset + k
        return self.track_a[self.offset:end], self.track_b[self.offset:end]

    def drop(self, k: int) -> "AlignedQueue[T]":
        if k < 0:
            raise ValueError("cannot drop a negative number of items")
        return AlignedQueue(self.track_a, self.track_b, self.offset + k)


async def _probe(render: RenderPrefix, k: int, events: PaginationEventSink) -> float:
    """Measure one prefix. A failed measurement reads as height 0, i.e. "does not fit"."""
    try:
        return await render(k)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.warning("Measurement of a %d-item prefix failed: %s", k, e)
        events.emit("measurement_failed", prefix_size=k, error=str(e))
        return 0


async def fit(
    remaining_a: Sequence[T],
    remaining_b: Sequence[T],
    limit: float,
    render: RenderPrefix,
    events: Optional[PaginationEventSink] = None,
) -> int:
    """
    Find the largest ``k`` whose rendered height is within ``limit``.

    Args:
        remaining_a: First track of remaining items.
        remaining_b: Second track, aligned to the first by position.
        limit: Maximum acceptable height.
        render: Coroutine function returning the height of the first ``k`` items of
            both tracks laid out together. 0 means "not found / failed".
        events: Optional sink for measurement failures.

    Returns:
        int: The chunk size. 1 if not even a single item fits (the chunk then
        overflows ``limit``), 0 if both tracks are empty.
    """
    events = events or NullEventSink()
    n = max(len(remaining_a), len(remaining_b))
    if n == 0:
        return 0

    low, high = 1, n
    best = 0
    while low <= high:
        mid = (low + high) // 2
        height = await _probe(render, mid, events)
        if 0 < height <= limit:
            best = mid
            low = mid + 1
        else:
            high = mid - 1

    if best == 0:
        logger.debug("No prefix fits within %s; forcing a single-item chunk", limit)
        return 1
    return best


async def iter_chunks(
    queue: AlignedQueue[T],
    limit: float,
    render_chunk: Callable[[Tuple[T, ...], Tuple[T, ...]], Awaitable[float]],
    events: Optional[PaginationEventSink] = None,
) -> AsyncIterator[Tuple[Tuple[T, ...], Tuple[T, ...], bool]]:
    """
    Partition ``queue`` into consecutive chunks that each fit ``limit``.

    ``render_chunk(chunk_a, chunk_b)`` measures a candidate chunk. Yields
    ``(chunk_a, chunk_b, fits)`` in order until both tracks are exhausted; ``fits`` is
    False only for a forced single-item chunk that no measurement confirmed.
    Concatenating all yielded chunks gives back each track unchanged.
    """
    while not queue.is_empty:
        current = queue
        fitted = {}

        async def render(k: int) -> float:
            height = await render_chunk(*current.head(k))
            fitted[k] = height
            return height

        size = await fit(current.remaining_a, current.remaining_b, limit, render, events)
        chunk_a, chunk_b = current.head(size)
        yield chunk_a, chunk_b, 0 < fitted.get(size, 0) <= limit
        queue = current.drop(size)
