from datetime import timedelta

import pytest

from giveaway_bot.cooldown import FAILURE_COOLDOWN, CooldownTracker


def test_unknown_guild_is_not_on_cooldown(clock):
    tracker = CooldownTracker(clock=clock)

    assert tracker.is_on_cooldown(1) is False


def test_cooldown_lasts_exactly_thirty_seconds(clock):
    tracker = CooldownTracker(clock=clock)
    tracker.record_failure(1)

    assert tracker.is_on_cooldown(1)
    clock.advance(29.999)
    assert tracker.is_on_cooldown(1)
    clock.advance(0.001)
    assert not tracker.is_on_cooldown(1)
    clock.advance(100)
    assert not tracker.is_on_cooldown(1)


def test_default_window_is_thirty_seconds():
    assert FAILURE_COOLDOWN == timedelta(seconds=30)
    assert CooldownTracker().window == FAILURE_COOLDOWN


def test_new_failure_restarts_the_window(clock):
    tracker = CooldownTracker(clock=clock)
    tracker.record_failure(1)
    clock.advance(20)
    tracker.record_failure(1)
    clock.advance(20)

    assert tracker.is_on_cooldown(1)


def test_guilds_are_tracked_independently(clock):
    tracker = CooldownTracker(clock=clock)
    tracker.record_failure(1)

    assert tracker.is_on_cooldown(1)
    assert not tracker.is_on_cooldown(2)


def test_expired_entries_are_pruned_on_write(clock):
    tracker = CooldownTracker(clock=clock)
    tracker.record_failure(1)
    tracker.record_failure(2)
    clock.advance(31)
    tracker.record_failure(3)

    assert len(tracker) == 1
    assert tracker.is_on_cooldown(3)


def test_oldest_entries_are_evicted_past_capacity(clock):
    tracker = CooldownTracker(clock=clock, max_entries=2)
    for guild_id in (1, 2, 3):
        tracker.record_failure(guild_id)
        clock.advance(1)

    assert len(tracker) == 2
    assert not tracker.is_on_cooldown(1)
    assert tracker.is_on_cooldown(2)
    assert tracker.is_on_cooldown(3)


def test_rejects_empty_capacity():
    with pytest.raises(ValueError):
        CooldownTracker(max_entries=0)
