"""Formatter — turns a completion reply into Discord-ready messages.

Discord caps a message at 2000 characters, so long replies are split into
several chunks.  Splits prefer line boundaries, and a code block that is
cut in half is closed at the end of one chunk and reopened at the start of
the next so both render correctly.
"""

from __future__ import annotations

import re

DISCORD_CHAR_LIMIT = 1900
EMPTY_REPLY = "-# (empty reply)"

# Match bare URLs not already inside <angle brackets>
_BARE_URL_RE = re.compile(r"(?<![<(])(https?://\S+)")


def suppress_embeds(text: str) -> str:
    """Wrap bare URLs in <brackets> so Discord won't generate previews."""
    return _BARE_URL_RE.sub(r"<\1>", text)


def unclosed_code_fence(text: str) -> str | None:
    """If text has an unclosed ``` block, return the fence line (e.g. '```json').

    Returns None if all code blocks are properly closed.
    """
    fence = None
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("```"):
            if fence is None:
                fence = stripped
            else:
                fence = None
    return fence


def _cut_point(text: str, limit: int) -> int:
    """Index to split ``text`` at: the last newline in the back half of ``limit``, else ``limit``."""
    newline = text.rfind("\n", 0, limit)
    return newline + 1 if newline > limit // 2 else limit


def split_message(text: str, limit: int = DISCORD_CHAR_LIMIT) -> list[str]:
    """Split ``text`` into chunks no longer than ``limit`` characters."""
    text = suppress_embeds(text)
    if not text.strip():
        return [EMPTY_REPLY]

    # Room for a reopened fence at the start and "\n```" at the end
    budget = max(limit - 24, 1)
    chunks: list[str] = []
    rest = text
    while len(rest) > limit:
        cut = _cut_point(rest, budget)
        chunk, rest = rest[:cut], rest[cut:]
        fence = unclosed_code_fence(chunk)
        if fence and len(fence) < budget // 2:
            chunk = chunk.rstrip("\n") + "\n```"
            rest = fence + "\n" + rest
        chunk = chunk.rstrip("\n")
        if chunk.strip():
            chunks.append(chunk)
    if rest:
        chunks.append(rest)
    return chunks
