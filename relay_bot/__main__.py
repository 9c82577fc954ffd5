"""Run the relay bot.

Usage:
    python -m relay_bot

Reads DISCORD_BOT_TOKEN, APP_ID and APP_SECRET from the environment or a
``.env`` file in the working directory.
"""

import logging

from relay_bot.bot import RelayBot
from relay_bot.config import Config

log = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    try:
        config = Config.from_env()
    except KeyError as exc:
        raise SystemExit(f"Missing required environment variable {exc}") from exc

    log.info("Starting relay bot (completion service: %s)", config.base_url)
    RelayBot(config).run(config.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
