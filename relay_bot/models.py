from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


# ---------------------------------------------------------------------------
# Conversation turns
# ---------------------------------------------------------------------------

class Role(enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        """Wire form sent to the completion service."""
        return {"role": self.role.value, "content": self.content}


# ---------------------------------------------------------------------------
# Conversation identity
# ---------------------------------------------------------------------------

class Scope(enum.Enum):
    DIRECT = "direct"  # one-to-one chat with the bot
    GROUP = "group"    # shared channel; the bot must be mentioned


@dataclass(frozen=True)
class ConversationKey:
    """Identity of one independent conversation context.

    The scope is part of the key, so a person's direct chat and their
    chat inside a group never share history even if the identity strings
    happen to match.
    """
    scope: Scope
    identity: str

    def __str__(self) -> str:
        return f"{self.scope.value}:{self.identity}"


# ---------------------------------------------------------------------------
# Inbound event
# ---------------------------------------------------------------------------

@dataclass
class IncomingMessage:
    scope: Scope
    sender_id: str
    content: str
    is_text: bool = True
    is_mentioned: bool = False
    # Only set for group messages: the sender within that specific group
    group_sender_id: str | None = None
    # Platform object the relay answers to (a discord.Message in production)
    raw: Any = None


@dataclass(frozen=True)
class AccessToken:
    value: str
    expire_in: int
