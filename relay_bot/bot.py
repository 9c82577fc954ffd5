from __future__ import annotations

import contextlib
import logging

import discord
import httpx

from .auth import AccessTokenProvider
from .completion import CompletionClient
from .config import Config
from .dispatcher import Dispatcher
from .errors import RelayError
from .formatter import split_message
from .models import IncomingMessage, Scope
from .replier import DirectReplier, GroupReplier
from .session_store import SessionStore

log = logging.getLogger(__name__)

_TEXT_MESSAGE_TYPES = (discord.MessageType.default, discord.MessageType.reply)


def _strip_mention(content: str, user_id: int) -> str:
    for token in (f"<@{user_id}>", f"<@!{user_id}>"):
        content = content.replace(token, "")
    return content.strip()


async def relay_to_discord(message: IncomingMessage, text: str) -> None:
    """Answer ``message`` on Discord, splitting long replies."""
    original: discord.Message = message.raw
    try:
        first, *rest = split_message(text)
        await original.reply(first, mention_author=False)
        for chunk in rest:
            await original.channel.send(chunk)
    except discord.HTTPException as exc:
        raise RelayError(f"Discord rejected the reply: {exc}") from exc


class RelayBot(discord.Client):
    def __init__(self, config: Config) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)

        self.config = config
        self.http_client = httpx.AsyncClient(timeout=config.request_timeout)
        self.sessions = SessionStore(
            ttl=config.session_ttl,
            sweep_interval=config.sweep_interval,
            window=config.history_window,
        )
        tokens = AccessTokenProvider(
            self.http_client,
            config.app_id,
            config.app_secret,
            base_url=config.base_url,
        )
        completer = CompletionClient(
            self.http_client,
            tokens,
            base_url=config.base_url,
            model=config.model,
        )
        self.dispatcher = Dispatcher(
            direct=DirectReplier(self.sessions, completer, relay_to_discord),
            group=GroupReplier(self.sessions, completer, relay_to_discord),
        )

    async def setup_hook(self) -> None:
        self.sessions.start_sweeper()

    async def close(self) -> None:
        await self.sessions.stop_sweeper()
        await self.http_client.aclose()
        await super().close()

    async def on_ready(self) -> None:
        log.info("Logged in as %s (ID: %s)", self.user, self.user.id)

    def to_incoming(self, message: discord.Message) -> IncomingMessage:
        """Describe a Discord message in the pipeline's terms."""
        is_direct = isinstance(message.channel, discord.DMChannel)
        sender_id = str(message.author.id)
        mentioned = self.user is not None and any(
            u.id == self.user.id for u in message.mentions
        )
        content = message.content
        if mentioned:
            content = _strip_mention(content, self.user.id)

        return IncomingMessage(
            scope=Scope.DIRECT if is_direct else Scope.GROUP,
            sender_id=sender_id,
            group_sender_id=None if is_direct else f"{message.channel.id}:{sender_id}",
            is_mentioned=mentioned,
            is_text=message.type in _TEXT_MESSAGE_TYPES and bool(content),
            content=content,
            raw=message,
        )

    async def on_message(self, message: discord.Message) -> None:
        # Ignore own messages and bots
        if message.author.bot:
            return

        incoming = self.to_incoming(message)
        if not self.dispatcher.wants(incoming):
            return

        async with contextlib.AsyncExitStack() as stack:
            try:
                await stack.enter_async_context(message.channel.typing())
            except discord.HTTPException:
                log.warning("Could not show typing indicator", exc_info=True)
            await self.dispatcher.dispatch(incoming)
