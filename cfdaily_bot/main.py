from __future__ import annotations

import asyncio

import discord

from .adapters.codeforces import CodeforcesAdapter
from .bot import CFDailyBot
from .commands.register import register_commands
from .config import load_settings
from .core.storage import JSONStorage, StorageError
from .logging_config import setup_logging


def main() -> int:
    log = setup_logging()
    settings = load_settings()
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    try:
        store = JSONStorage(settings.data_path)
    except StorageError as e:
        log.error("Cannot open the data store: %s", e)
        return 1
    judge = CodeforcesAdapter(
        api_base=settings.codeforces_api_url, timeout=settings.codeforces_timeout
    )
    bot = CFDailyBot(
        store,
        judge,
        sync_commands=settings.sync_commands,
        application_id=settings.application_id,
    )
    register_commands(bot, bot.service)

    async def runner():
        try:
            async with bot:
                await bot.start(settings.token)
        except discord.LoginFailure as e:
            log.error("Discord login failed: %s", e)
            return 1
        return 0

    try:
        return asyncio.run(runner())
    except KeyboardInterrupt:
        log.info("Shutting down...")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
