"""
Pending task set.

An ordered, append-only group of asyncio tasks. ``snapshot()`` freezes the
tasks started so far; ``join_snapshot()`` waits for exactly those, so work
spawned afterwards is not covered by the wait.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Iterator, Optional


class TaskGroup:
    def __init__(self) -> None:
        self._tasks: list[asyncio.Task] = []

    def spawn(self, coro: Awaitable[Any], name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        if name and hasattr(task, "set_name"):
            task.set_name(name)
        self._tasks.append(task)
        return task

    def snapshot(self) -> tuple[asyncio.Task, ...]:
        return tuple(self._tasks)

    async def join_snapshot(self, snapshot: tuple[asyncio.Task, ...]) -> list:
        return list(await asyncio.gather(*snapshot))

    async def drain(self) -> list:
        """Await every task, including ones spawned while draining."""
        results: list = []
        seen = 0
        while seen < len(self._tasks):
            batch = self._tasks[seen:]
            seen = len(self._tasks)
            results.extend(await asyncio.gather(*batch))
        return results

    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[asyncio.Task]:
        return iter(list(self._tasks))
