from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

import discord
import psutil

log = logging.getLogger("cfdaily.commands")

# Discord's "Unknown interaction" error: the response window has passed.
INTERACTION_EXPIRED = 10062


def format_uptime(seconds: float) -> str:
    """Format ``seconds`` as ``"{d}d, {h}h, {m}m, {s}s"``."""
    seconds = int(seconds)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d, {hours}h, {minutes}m, {seconds}s"


def process_uptime() -> float:
    return time.time() - psutil.Process().create_time()


def memory_usage_mb() -> float:
    return psutil.Process().memory_info().rss / 1024 / 1024


def total_member_count(guilds: Iterable[Any]) -> int:
    """Sum of each guild's cached member count."""
    return sum(getattr(g, "member_count", None) or 0 for g in guilds)


def is_manager(interaction: discord.Interaction) -> bool:
    perms = getattr(interaction.user, "guild_permissions", None)
    return bool(perms and perms.manage_guild)


async def safe_reply(
    interaction: discord.Interaction,
    embed: discord.Embed,
    ephemeral: bool = True,
    view: discord.ui.View | None = None,
) -> None:
    """Reply to ``interaction`` or follow up if a response was already sent.

    Expired interactions are logged as a warning; nothing can be sent for
    them anymore.
    """
    kwargs: dict[str, Any] = {"embed": embed, "ephemeral": ephemeral}
    if view is not None:
        kwargs["view"] = view
    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(**kwargs)
        else:
            await interaction.followup.send(**kwargs)
    except discord.NotFound as e:
        if e.code == INTERACTION_EXPIRED:
            log.warning("safe_reply: interaction expired, cannot send reply.")
            return
        log.exception("[safe_reply] reply failed")
    except discord.HTTPException:
        log.exception("[safe_reply] reply failed")
