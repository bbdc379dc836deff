from __future__ import annotations

import asyncio

from profile_metrics.tasks import TaskGroup


async def _value(v, delay=0):
    await asyncio.sleep(delay)
    return v


def test_snapshot_excludes_later_tasks():
    async def scenario():
        group = TaskGroup()
        release = asyncio.Event()

        async def late():
            await release.wait()
            return "late"

        group.spawn(_value("early"))
        snapshot = group.snapshot()
        late_task = group.spawn(late())

        joined = await group.join_snapshot(snapshot)
        assert joined == ["early"]
        assert not late_task.done()

        release.set()
        assert await group.drain() == ["early", "late"]

    asyncio.run(scenario())


def test_drain_picks_up_tasks_spawned_while_draining():
    async def scenario():
        group = TaskGroup()

        async def spawner():
            group.spawn(_value("child"))
            return "parent"

        group.spawn(spawner())
        results = await group.drain()
        assert results == ["parent", "child"]
        assert len(group) == 2
        assert group.pending() == 0

    asyncio.run(scenario())


def test_empty_snapshot_joins_immediately():
    async def scenario():
        group = TaskGroup()
        assert await group.join_snapshot(group.snapshot()) == []
        assert await group.drain() == []

    asyncio.run(scenario())
