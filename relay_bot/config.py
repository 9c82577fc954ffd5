from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://cpdd.today"
DEFAULT_MODEL = "gpt-3.5-turbo"

# Session policy
SESSION_TTL = 10 * 60.0
SWEEP_INTERVAL = 60.0
HISTORY_WINDOW = 20


@dataclass(frozen=True)
class Config:
    discord_token: str
    app_id: str = ""
    app_secret: str = ""
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    session_ttl: float = SESSION_TTL
    sweep_interval: float = SWEEP_INTERVAL
    history_window: int = HISTORY_WINDOW
    request_timeout: float = 60.0

    @classmethod
    def from_env(cls, env_path: str | Path | None = None) -> Config:
        """Build a Config from the process environment (and ``.env`` if present).

        Only the Discord token and the completion service credentials come
        from the environment:

            DISCORD_BOT_TOKEN   required
            APP_ID              defaults to ""
            APP_SECRET          defaults to ""
        """
        load_dotenv(env_path)

        token = os.environ["DISCORD_BOT_TOKEN"]

        return cls(
            discord_token=token,
            app_id=os.getenv("APP_ID", ""),
            app_secret=os.getenv("APP_SECRET", ""),
        )
