"""Tests for cache entries, the response cache, the rate limiter and deadlines."""

from __future__ import annotations

import asyncio

import pytest

from quiz_gate.sync import (
    CacheEntry,
    Channel,
    DeadlineChannel,
    FetchTimeoutError,
    MinIntervalLimiter,
    ResponseCache,
    is_valid,
)


def test_is_valid_respects_ttl_boundary():
    entry = CacheEntry(payload=[1], stored_at=100.0, ttl=120.0)
    assert is_valid(entry, 100.0)
    assert is_valid(entry, 219.9)
    assert not is_valid(entry, 220.0)
    assert not is_valid(None, 100.0)


def test_response_cache_expires_per_channel(clock):
    cache = ResponseCache({Channel.QUESTIONS: 300, Channel.LEADERBOARD: 120}, clock)
    cache.store(Channel.QUESTIONS, ["q"])
    cache.store(Channel.LEADERBOARD, ["l"])
    clock.advance(150)
    assert Channel.QUESTIONS in cache
    assert Channel.LEADERBOARD not in cache
    assert cache.get(Channel.QUESTIONS).payload == ["q"]


def test_response_cache_invalidate(clock):
    cache = ResponseCache({Channel.QUESTIONS: 300, Channel.LEADERBOARD: 120}, clock)
    cache.store(Channel.QUESTIONS, ["q"])
    cache.store(Channel.LEADERBOARD, ["l"])
    cache.invalidate(Channel.LEADERBOARD)
    assert Channel.LEADERBOARD not in cache
    cache.invalidate()
    assert Channel.QUESTIONS not in cache


def test_response_cache_requires_every_ttl(clock):
    with pytest.raises(KeyError):
        ResponseCache({Channel.QUESTIONS: 300}, clock)


def test_limiter_enforces_minimum_interval(clock):
    limiter = MinIntervalLimiter(10, clock)
    assert limiter.try_acquire()
    clock.advance(4)
    assert not limiter.try_acquire()
    assert limiter.remaining() == pytest.approx(6)
    clock.advance(6)
    assert limiter.try_acquire()


@pytest.mark.asyncio
async def test_deadline_returns_result_in_time():
    channel = DeadlineChannel("questions")
    ticket = channel.begin()

    async def quick():
        return "done"

    assert await channel.run(ticket, quick(), timeout=1) == "done"
    assert channel.is_current(ticket)


@pytest.mark.asyncio
async def test_deadline_expires_ticket_and_cancels_late_operation():
    channel = DeadlineChannel("leaderboard")
    ticket = channel.begin()
    finished = []

    async def slow():
        await asyncio.sleep(1)
        finished.append(True)
        return "late"

    with pytest.raises(FetchTimeoutError) as excinfo:
        await channel.run(ticket, slow(), timeout=0.01)
    assert excinfo.value.backend_down
    assert not channel.is_current(ticket)
    await asyncio.sleep(0)
    assert finished == []


def test_newer_ticket_supersedes_older():
    channel = DeadlineChannel("questions")
    first = channel.begin()
    second = channel.begin()
    assert not channel.is_current(first)
    assert channel.is_current(second)


@pytest.mark.asyncio
async def test_cancelling_caller_cancels_inner_operation():
    channel = DeadlineChannel("questions")
    ticket = channel.begin()
    started = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        try:
            await asyncio.sleep(1)
        except asyncio.CancelledError:
            finished.append("cancelled")
            raise
        finished.append("done")

    caller = asyncio.ensure_future(channel.run(ticket, slow(), timeout=5))
    await started.wait()
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller
    await asyncio.sleep(0.01)
    assert finished == ["cancelled"]
    assert not channel.is_current(ticket)
