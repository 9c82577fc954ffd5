"""Tests for the ``python -m relay_bot`` entry point."""

from __future__ import annotations

import pytest

from relay_bot import __main__ as entry
from relay_bot import config as config_module


def test_missing_token_exits_with_message(monkeypatch) -> None:
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)

    with pytest.raises(SystemExit, match="DISCORD_BOT_TOKEN"):
        entry.main()


def test_main_runs_bot_with_token(monkeypatch) -> None:
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "discord-token")
    runs: list[tuple[str, dict]] = []
    monkeypatch.setattr(
        entry.RelayBot, "run", lambda self, token, **kwargs: runs.append((token, kwargs))
    )

    entry.main()

    assert runs == [("discord-token", {"log_handler": None})]
