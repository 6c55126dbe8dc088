"""Bounded fan-out for coroutine factories."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

T = TypeVar("T")


class WorkerPool(Generic[T]):
    """Runs zero-argument coroutine factories with at most ``limit`` in flight.

    A job is only called once it holds a slot, so jobs cancelled while waiting
    never create a coroutine. The first job to raise cancels every other job
    and its exception propagates unchanged.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"worker limit must be >= 1, got {limit}")
        self._limit = limit
        self._active = 0
        self.peak = 0

    async def map(self, jobs: Iterable[Callable[[], Awaitable[T]]]) -> list[T]:
        """Return job results in submission order."""

        gate = asyncio.Semaphore(self._limit)

        async def guarded(job: Callable[[], Awaitable[T]]) -> T:
            async with gate:
                self._active += 1
                self.peak = max(self.peak, self._active)
                try:
                    return await job()
                finally:
                    self._active -= 1

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(guarded(job)) for job in jobs]
        except ExceptionGroup as grouped:
            raise grouped.exceptions[0] from None
        return [task.result() for task in tasks]


__all__ = ["WorkerPool"]
