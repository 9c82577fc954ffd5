"""Reply pipeline — one pass per incoming message, no retries.

    load history -> append user turn -> completion -> relay -> store

The user turn is stored even when the completion round fails, so the next
message still sees the question that went unanswered.  Failure text is
relayed to the user but never written into history.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .completion import Completer
from .errors import RelayBotError, RelayError
from .models import ConversationKey, IncomingMessage, Role, Scope, Turn
from .session_store import SessionStore

log = logging.getLogger(__name__)

# Delivers text back to the conversation a message came from.
# Raises RelayError when delivery fails.
Relay = Callable[[IncomingMessage, str], Awaitable[None]]


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class Replier(ABC):
    """Base pipeline; subclasses only decide which conversation a message is in.

    With ``serialize=True`` rounds for the same key run one at a time, so
    two quick messages from one sender both end up in history.  With
    ``serialize=False`` overlapping rounds for a key race and the later
    write wins.
    """

    def __init__(
        self,
        store: SessionStore,
        completer: Completer,
        relay: Relay,
        *,
        serialize: bool = True,
    ) -> None:
        self.store = store
        self.completer = completer
        self.relay = relay
        self.serialize = serialize
        self._locks: dict[ConversationKey, _KeyLock] = {}

    @abstractmethod
    def key_for(self, message: IncomingMessage) -> ConversationKey:
        ...

    async def reply(self, message: IncomingMessage) -> None:
        if not message.is_text:
            return

        key = self.key_for(message)
        if not self.serialize:
            await self._round(key, message)
            return

        entry = self._locks.setdefault(key, _KeyLock())
        entry.users += 1
        try:
            async with entry.lock:
                await self._round(key, message)
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    async def _round(self, key: ConversationKey, message: IncomingMessage) -> None:
        turns = [*self.store.get(key), Turn(Role.USER, message.content)]

        try:
            text = await self.completer.completion(turns)
        except RelayBotError as exc:
            log.warning("Completion failed for %s: %s", key, exc)
            text = str(exc) or type(exc).__name__
        else:
            turns.append(Turn(Role.ASSISTANT, text))

        window = self.store.window
        if len(turns) > window:
            turns = turns[-window:]

        try:
            await self.relay(message, text)
        except RelayError:
            log.warning("Failed to relay reply to %s", key, exc_info=True)
        finally:
            self.store.set(key, turns)


class DirectReplier(Replier):
    """Keys history by the sender of a one-to-one chat."""

    def key_for(self, message: IncomingMessage) -> ConversationKey:
        return ConversationKey(Scope.DIRECT, message.sender_id)


class GroupReplier(Replier):
    """Keys history by the sender within one particular group."""

    def key_for(self, message: IncomingMessage) -> ConversationKey:
        if not message.group_sender_id:
            raise ValueError("group message has no group_sender_id")
        return ConversationKey(Scope.GROUP, message.group_sender_id)
