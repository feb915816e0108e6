import asyncio
import json
import random
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from conftest import START, make_entrant, make_giveaway

from giveaway_bot.manager import GiveawayManager
from giveaway_bot.scheduler import SweepScheduler


def test_requires_a_worker(storage):
    async def finalize(_giveaway):
        return True

    with pytest.raises(ValueError):
        SweepScheduler(storage, finalize, workers=0)


@pytest.mark.asyncio
async def test_tick_queues_only_expired_giveaways(storage, clock):
    storage.create_giveaway(make_giveaway(message_id=1, end_time=START))
    storage.create_giveaway(
        make_giveaway(message_id=2, end_time=START - timedelta(minutes=5))
    )
    storage.create_giveaway(
        make_giveaway(message_id=3, end_time=START + timedelta(seconds=1))
    )

    async def finalize(_giveaway):
        return True

    scheduler = SweepScheduler(storage, finalize, clock=clock)

    assert await scheduler.tick() == 2
    assert scheduler.claimed == {1, 2}


@pytest.mark.asyncio
async def test_overlapping_ticks_do_not_requeue_claimed_giveaways(storage, clock):
    storage.create_giveaway(make_giveaway(message_id=1))

    async def finalize(_giveaway):
        return True

    scheduler = SweepScheduler(storage, finalize, clock=clock)

    assert await scheduler.tick() == 1
    assert await scheduler.tick() == 0


@pytest.mark.asyncio
async def test_failing_sweep_is_logged_and_swallowed(clock):
    storage = MagicMock()
    storage.list_expired.side_effect = RuntimeError("table unavailable")

    async def finalize(_giveaway):
        return True

    scheduler = SweepScheduler(storage, finalize, clock=clock)

    await scheduler._run_sweep()
    await scheduler._run_sweep()

    assert storage.list_expired.call_count == 2


@pytest.mark.asyncio
async def test_workers_finalize_concurrently_and_release_claims(storage, clock):
    for message_id in (1, 2, 3):
        storage.create_giveaway(make_giveaway(message_id=message_id))

    running = 0
    peak = 0
    done = asyncio.Event()
    finished: list[int] = []

    async def finalize(giveaway):
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.05)
        running -= 1
        storage.remove_giveaway(giveaway.message_id)
        finished.append(giveaway.message_id)
        if len(finished) == 3:
            done.set()
        return True

    scheduler = SweepScheduler(storage, finalize, interval=0.05, workers=3, clock=clock)
    scheduler.start()
    try:
        await asyncio.wait_for(done.wait(), timeout=5)
    finally:
        await scheduler.shutdown(timeout=5)

    assert sorted(finished) == [1, 2, 3]
    assert peak > 1
    assert scheduler.claimed == frozenset()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_finalizer_errors_do_not_kill_workers(storage, clock):
    storage.create_giveaway(make_giveaway(message_id=1))
    storage.create_giveaway(make_giveaway(message_id=2))
    seen: list[int] = []
    done = asyncio.Event()

    async def finalize(giveaway):
        seen.append(giveaway.message_id)
        storage.remove_giveaway(giveaway.message_id)
        if len(seen) == 2:
            done.set()
        if giveaway.message_id == 1:
            raise RuntimeError("boom")
        return False

    scheduler = SweepScheduler(storage, finalize, interval=0.05, workers=1, clock=clock)
    scheduler.start()
    try:
        await asyncio.wait_for(done.wait(), timeout=5)
    finally:
        await scheduler.shutdown(timeout=5)

    assert sorted(seen) == [1, 2]


@pytest.mark.asyncio
async def test_shutdown_without_start_is_a_noop(storage):
    async def finalize(_giveaway):
        return True

    scheduler = SweepScheduler(storage, finalize)

    await scheduler.shutdown()

    assert not scheduler.running


@pytest.mark.asyncio
async def test_shutdown_times_out_on_stuck_finalizer(storage, clock):
    storage.create_giveaway(make_giveaway(message_id=1))
    started = asyncio.Event()

    async def finalize(_giveaway):
        started.set()
        await asyncio.sleep(60)
        return True

    scheduler = SweepScheduler(storage, finalize, interval=0.05, workers=1, clock=clock)
    scheduler.start()
    await asyncio.wait_for(started.wait(), timeout=5)

    await scheduler.shutdown(timeout=0.1)

    assert not scheduler.running
    assert scheduler.claimed == frozenset()


@pytest.mark.asyncio
async def test_expired_giveaway_is_swept_and_drawn_end_to_end(
    storage, messenger, uploader, clock
):
    storage.create_giveaway(
        make_giveaway(message_id=500, num_winners=2, end_time=START - timedelta(seconds=5))
    )
    entrants = [make_entrant(101, "A"), make_entrant(102, "B"), make_entrant(103, "C")]
    for entrant in entrants:
        storage.add_entry(500, entrant)

    manager = GiveawayManager(
        storage, messenger, uploader, clock=clock, rng=random.Random(3)
    )
    removed: list[int] = []
    original_remove = storage.remove_giveaway

    def tracking_remove(message_id):
        removed.append(message_id)
        return original_remove(message_id)

    storage.remove_giveaway = tracking_remove
    finished = asyncio.Event()
    results: list[bool] = []

    async def finalize(giveaway):
        results.append(await manager.end_giveaway(giveaway))
        finished.set()
        return results[-1]

    scheduler = SweepScheduler(storage, finalize, interval=0.05, clock=clock)
    scheduler.start()
    try:
        await asyncio.wait_for(finished.wait(), timeout=5)
        # give a few more ticks a chance to misbehave
        await asyncio.sleep(0.2)
    finally:
        await scheduler.shutdown(timeout=5)

    assert results == [True]
    assert removed == [500]

    summary = json.loads(uploader.uploads[0][0])
    assert {entry["username"] for entry in summary["entries"]} == {"A", "B", "C"}
    winner_ids = {int(winner["id"]) for winner in summary["winners"]}
    assert len(winner_ids) == 2
    assert winner_ids <= {101, 102, 103}

    _, announcement = messenger.posts[0]
    mentioned = {i for i in (101, 102, 103) if f"<@{i}>" in announcement.content}
    assert mentioned == winner_ids
