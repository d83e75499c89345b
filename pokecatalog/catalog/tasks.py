"""Cancellation tokens and bounded fan-out for page enrichment."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class LoadCancelled(Exception):
    """A load was superseded by a newer one and must not apply its result."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise LoadCancelled()


async def gather_bounded(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    limit: int,
    token: CancellationToken,
) -> List[R]:
    """Run ``func`` over ``items`` with at most ``limit`` in flight.

    Results keep the order of ``items``.  The first failure cancels the
    remaining tasks and is re-raised; nothing partial is returned.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(item: T) -> R:
        async with semaphore:
            token.raise_if_cancelled()
            return await func(item)

    tasks = [asyncio.ensure_future(run(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
