from __future__ import annotations

import logging

from .models import IncomingMessage, Scope
from .replier import DirectReplier, GroupReplier

log = logging.getLogger(__name__)


class Dispatcher:
    """Routes incoming messages to the replier for their scope.

    Group messages are only answered when the bot was mentioned.  Nothing
    raised while replying escapes: it is logged and the next message is
    handled as usual.
    """

    def __init__(self, direct: DirectReplier, group: GroupReplier) -> None:
        self.direct = direct
        self.group = group

    def wants(self, message: IncomingMessage) -> bool:
        """True if ``message`` would reach a replier."""
        if not message.is_text:
            return False
        if message.scope is Scope.GROUP:
            return message.is_mentioned and bool(message.group_sender_id)
        return True

    async def dispatch(self, message: IncomingMessage) -> None:
        if not self.wants(message):
            log.debug("Ignoring %s message from %s", message.scope.value, message.sender_id)
            return

        replier = self.direct if message.scope is Scope.DIRECT else self.group
        try:
            await replier.reply(message)
        except Exception:
            log.exception("Unhandled error replying to %s", message.sender_id)
