"""Discord bot implementation for the daily problem workflow."""

from __future__ import annotations

import logging
from typing import Any

import discord
from discord import app_commands
from discord.ext import commands

from .adapters.base import JudgeAdapter
from .core.service import DailyService
from .core.storage import JSONStorage
from .core.tasks import BackgroundTasks
from .logging_config import setup_logging
from .ui.views import LoginConfirmButton, make_embed

log = logging.getLogger("cfdaily.bot")

WELCOME_TITLE = "Hello! Thanks for inviting me!"
WELCOME_TEXT = (
    "I'm here to help you with Codeforces daily problems. "
    "Use `/help` to see what I can do!"
)


class DiscordPublisher:
    """Send and edit embeds in guild text channels through the bot."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def fetch_text_channel(self, channel_id: str) -> discord.TextChannel | None:
        try:
            channel = self.bot.get_channel(int(channel_id))
            if channel is None:
                channel = await self.bot.fetch_channel(int(channel_id))
        except (discord.HTTPException, ValueError):
            log.exception("[fetch_text_channel] cannot fetch channel %s", channel_id)
            return None
        if not isinstance(channel, discord.TextChannel):
            log.error("fetch_text_channel: channel %s is not a text channel", channel_id)
            return None
        return channel

    async def send(self, channel_id: str, title: str, description: str) -> str | None:
        channel = await self.fetch_text_channel(channel_id)
        if channel is None:
            return None
        try:
            message = await channel.send(embed=make_embed(description, title=title))
        except discord.HTTPException:
            log.exception("[send] failed to send to channel %s", channel_id)
            return None
        return str(message.id)

    async def edit(
        self, channel_id: str, message_id: str, title: str, description: str
    ) -> bool:
        channel = await self.fetch_text_channel(channel_id)
        if channel is None:
            return False
        try:
            message = await channel.fetch_message(int(message_id))
            await message.edit(embed=make_embed(description, title=title))
        except discord.NotFound:
            log.info("edit: message %s no longer exists", message_id)
            return False
        except discord.HTTPException:
            log.exception("[edit] failed to edit message %s", message_id)
            return False
        return True


class CFDailyBot(commands.Bot):
    """Small ``discord.py`` based bot running the daily problem workflow."""

    def __init__(
        self,
        store: JSONStorage,
        judge: JudgeAdapter,
        sync_commands: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize the bot with the minimal intents required."""
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Slash commands and components only; message content is not needed.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
            **kwargs,
        )
        self.log = setup_logging()
        self.sync_commands = sync_commands
        self.judge = judge
        self.background = BackgroundTasks()
        self.service = DailyService(
            store, judge, DiscordPublisher(self), self.background
        )

    async def setup_hook(self) -> None:
        """Install the error handler, the login button and sync commands."""
        self.tree.on_error = self._on_app_command_error
        # Login prompts outlive restarts; their buttons are matched by custom id.
        self.add_dynamic_items(LoginConfirmButton)
        if self.sync_commands:
            try:
                synced = await self.tree.sync()
                self.log.info("Synced %d app commands", len(synced))
            except discord.HTTPException:
                self.log.exception("Failed to sync app commands")
        await super().setup_hook()

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        """Global error handler for all app commands."""
        if isinstance(error, app_commands.NoPrivateMessage):
            msg = "This command can only be used in a server."
        else:
            log.error("App command error: %s", error, exc_info=error)
            msg = "An unexpected error occurred. Please try again later."
        if interaction.response.is_done():
            # Something was already sent; a second reply would fail.
            return
        try:
            await interaction.response.send_message(
                embed=make_embed(msg, title="Error"), ephemeral=True
            )
        except discord.HTTPException:
            log.warning("Could not report command error to the user")

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(activity=discord.Game(name="Codeforces"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )

    async def on_guild_join(self, guild: discord.Guild) -> None:
        """Greet a new guild in its system channel, if it has one."""
        channel = guild.system_channel
        if channel is None:
            return
        try:
            await channel.send(embed=make_embed(WELCOME_TEXT, title=WELCOME_TITLE))
        except discord.HTTPException:
            log.exception("[guild_join] failed to greet guild %s", guild.id)

    async def close(self) -> None:
        await self.background.drain()
        close_judge = getattr(self.judge, "close", None)
        if close_judge is not None:
            await close_judge()
        await super().close()


__all__ = ["CFDailyBot", "DiscordPublisher"]
