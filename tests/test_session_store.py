"""Tests for the sliding-TTL session store."""

from __future__ import annotations

import asyncio

import pytest

from relay_bot.models import ConversationKey, Role, Scope, Turn
from relay_bot.session_store import SessionStore

ALICE = ConversationKey(Scope.DIRECT, "alice")


def _turns(n: int) -> list[Turn]:
    return [Turn(Role.USER, f"m{i}") for i in range(n)]


def test_missing_key_reads_empty(clock) -> None:
    store = SessionStore(clock=clock)
    assert store.get(ALICE) == ()


def test_entry_lives_until_ttl_elapses(clock) -> None:
    store = SessionStore(ttl=60, clock=clock)
    store.set(ALICE, _turns(2))

    clock.advance(59.9)
    assert store.get(ALICE) == tuple(_turns(2))

    clock.advance(0.1)
    assert store.get(ALICE) == ()


def test_explicit_ttl_overrides_default(clock) -> None:
    store = SessionStore(ttl=600, clock=clock)
    store.set(ALICE, _turns(1), ttl=5)

    clock.advance(5)
    assert store.get(ALICE) == ()


def test_write_refreshes_deadline(clock) -> None:
    store = SessionStore(ttl=60, clock=clock)
    store.set(ALICE, _turns(1))
    clock.advance(50)
    store.set(ALICE, _turns(2))
    clock.advance(50)

    assert store.get(ALICE) == tuple(_turns(2))


def test_last_write_wins(clock) -> None:
    store = SessionStore(clock=clock)
    store.set(ALICE, _turns(3))
    store.set(ALICE, [Turn(Role.ASSISTANT, "only")])

    assert store.get(ALICE) == (Turn(Role.ASSISTANT, "only"),)


def test_set_keeps_most_recent_window(clock) -> None:
    store = SessionStore(window=20, clock=clock)
    store.set(ALICE, _turns(25))

    kept = store.get(ALICE)
    assert len(kept) == 20
    assert kept[0].content == "m5"
    assert kept[-1].content == "m24"


def test_direct_and_group_keys_do_not_alias(clock) -> None:
    store = SessionStore(clock=clock)
    group = ConversationKey(Scope.GROUP, "alice")
    store.set(ALICE, _turns(1))

    assert store.get(group) == ()
    assert ALICE != group


def test_purge_drops_only_expired_entries(clock) -> None:
    store = SessionStore(ttl=60, clock=clock)
    bob = ConversationKey(Scope.DIRECT, "bob")
    store.set(ALICE, _turns(1))
    clock.advance(30)
    store.set(bob, _turns(1))
    clock.advance(30)

    assert store.purge_expired() == 1
    assert len(store) == 1
    assert store.get(bob) == tuple(_turns(1))


@pytest.mark.anyio("asyncio")
async def test_sweeper_purges_in_background(clock) -> None:
    store = SessionStore(ttl=1, sweep_interval=0.01, clock=clock)
    store.set(ALICE, _turns(1))
    clock.advance(2)

    store.start_sweeper()
    try:
        for _ in range(50):
            if not len(store):
                break
            await asyncio.sleep(0.01)
    finally:
        await store.stop_sweeper()

    assert len(store) == 0


@pytest.mark.anyio("asyncio")
async def test_sweeper_keeps_live_entries(clock) -> None:
    store = SessionStore(ttl=60, sweep_interval=0.01, clock=clock)
    store.set(ALICE, _turns(1))

    store.start_sweeper()
    await asyncio.sleep(0.05)
    await store.stop_sweeper()

    assert store.get(ALICE) == tuple(_turns(1))


@pytest.mark.anyio("asyncio")
async def test_stop_sweeper_without_start_is_noop(clock) -> None:
    store = SessionStore(clock=clock)
    await store.stop_sweeper()


def test_purge_reports_entries_removed(clock) -> None:
    store = SessionStore(ttl=10, clock=clock)
    assert store.purge_expired() == 0

    for name in ("a", "b", "c"):
        store.set(ConversationKey(Scope.DIRECT, name), _turns(1))
    clock.advance(10)

    assert store.purge_expired() == 3
    assert len(store) == 0
    assert store.purge_expired() == 0
