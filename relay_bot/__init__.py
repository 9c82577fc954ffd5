"""Discord relay bot — answers chat messages with a remote completion service.

Keeps a short, sliding-TTL history per conversation so replies have context.

Run with:
    python -m relay_bot
"""

from relay_bot.bot import RelayBot
from relay_bot.config import Config

__all__ = ["Config", "RelayBot"]
