from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .config import HISTORY_WINDOW, SESSION_TTL, SWEEP_INTERVAL
from .models import ConversationKey, Turn

log = logging.getLogger(__name__)


@dataclass
class _Session:
    turns: tuple[Turn, ...]
    deadline: float


class SessionStore:
    """In-memory store of ConversationKey -> recent turns, with a sliding TTL.

    Lost on restart by design.  Expired entries read as empty; a background
    sweeper removes them so idle conversations don't pile up.

    Every method is synchronous and never awaits, so on a single event loop
    each call is atomic with respect to the others.
    """

    def __init__(
        self,
        *,
        ttl: float = SESSION_TTL,
        sweep_interval: float = SWEEP_INTERVAL,
        window: int = HISTORY_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.sweep_interval = sweep_interval
        self.window = max(1, window)
        self._clock = clock
        self._store: dict[ConversationKey, _Session] = {}
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: ConversationKey) -> tuple[Turn, ...]:
        session = self._store.get(key)
        if session is None:
            return ()
        if session.deadline <= self._clock():
            del self._store[key]
            return ()
        return session.turns

    def set(
        self,
        key: ConversationKey,
        turns: Sequence[Turn],
        ttl: float | None = None,
    ) -> None:
        kept = tuple(turns)[-self.window:]
        deadline = self._clock() + (self.ttl if ttl is None else ttl)
        self._store[key] = _Session(turns=kept, deadline=deadline)

    def purge_expired(self) -> int:
        """Drop every entry whose deadline has passed.  Returns how many went."""
        now = self._clock()
        expired = [k for k, s in self._store.items() if s.deadline <= now]
        for key in expired:
            del self._store[key]
        if expired:
            log.debug("Purged %d expired session(s)", len(expired))
        return len(expired)

    # -- background sweeper ------------------------------------------------

    def start_sweeper(self) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.purge_expired()
            except Exception:
                log.exception("Session sweep failed")
