"""Registration of slash commands for the bot."""

from __future__ import annotations

import logging
import platform
import re

import discord
from discord import app_commands
from discord.ext import commands

from ..core.leaderboard import render_leaderboard
from ..core.problems import InvalidProblemURL
from ..core.service import LEADERBOARD_TITLE, CheckStatus, DailyService, UnknownProblem
from ..ui.views import login_view, make_embed
from .utils import (
    format_uptime,
    is_manager,
    memory_usage_mb,
    process_uptime,
    safe_reply,
    total_member_count,
)

log = logging.getLogger("cfdaily.commands")

HANDLE_RE = re.compile(r"[A-Za-z0-9_.\-]{1,24}")

# (command, help text) in the order /help lists them.
HELP_ENTRIES = [
    ("/ping", "Check bot latency."),
    ("/login", "Connect your Codeforces account. Usage: /login handle:<your_handle>"),
    ("/check", "Check if you've solved the daily problem."),
    ("/setdailyproblem", "Set the daily Codeforces problem. (Admin only)"),
    ("/setleaderboardchannel", "Set the channel for the leaderboard. (Admin only)"),
    ("/setannouncementchannel", "Set the channel for announcements. (Admin only)"),
    ("/botinfo", "Show info about this bot."),
    ("/leaderboard", "Display the current leaderboard."),
]

CHECK_REPLIES = {
    CheckStatus.NOT_LOGGED_IN: "You are not logged in. Please use /login to log in.",
    CheckStatus.NO_DAILY: "No server found with a daily problem.",
    CheckStatus.FETCH_FAILED: (
        "There was an error checking your submissions. Please try again later."
    ),
    CheckStatus.ALREADY_SUBMITTED: (
        "You have already submitted your solution for this problem today."
    ),
    CheckStatus.SOLVED: (
        "Congratulations! You have solved the daily problem and earned 1 point."
    ),
    CheckStatus.NOT_SOLVED: "You have not solved the daily problem yet. Keep trying!",
}


def register_commands(bot: commands.Bot, service: DailyService) -> None:
    """Register the slash command table on ``bot.tree``."""
    tree = bot.tree

    @tree.command(name="ping", description="Replies with Pong & shows latency!")
    @app_commands.guild_only()
    async def ping(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(embed=make_embed("Pinging..."))
        sent = await interaction.original_response()
        latency = (sent.created_at - interaction.created_at).total_seconds() * 1000
        await interaction.edit_original_response(
            embed=make_embed(
                f"Pong! 🏓 Latency is `{round(latency)}ms`. "
                f"API Latency is `{round(bot.latency * 1000)}ms`"
            )
        )

    @tree.command(name="login", description="Connect your Codeforces account to the bot!")
    @app_commands.describe(handle="Your Codeforces handle")
    @app_commands.guild_only()
    async def login(interaction: discord.Interaction, handle: str) -> None:
        handle = handle.strip()
        if not handle or not HANDLE_RE.fullmatch(handle):
            await safe_reply(
                interaction, make_embed("Please provide a Codeforces username.")
            )
            return
        await interaction.response.defer(ephemeral=True)
        try:
            prompt = await service.start_login()
        except Exception:
            log.exception("[login] could not start login for %s", handle)
            await safe_reply(
                interaction, make_embed("An error occurred while processing your login.")
            )
            return
        if prompt is None:
            await safe_reply(
                interaction,
                make_embed("Sorry, I could not fetch a random problem at the moment."),
            )
            return
        await safe_reply(
            interaction,
            make_embed(
                f"Please submit a compilation error to this problem: {prompt.url}\n"
                "When you are done, please press the **Done** button."
            ),
            view=login_view(handle, prompt.problem_id),
        )

    @tree.command(name="check", description="Check if you solved the daily problem!")
    @app_commands.guild_only()
    async def check(interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        try:
            status = await service.check(
                str(interaction.user.id), str(interaction.guild_id)
            )
        except Exception:
            log.exception("[check] failed for user %s", interaction.user.id)
            await safe_reply(
                interaction, make_embed("An error occurred while checking your solution.")
            )
            return
        await safe_reply(interaction, make_embed(CHECK_REPLIES[status]))

    @tree.command(
        name="setdailyproblem",
        description="Set the daily Codeforces problem (Admin only).",
    )
    @app_commands.describe(
        problem_url=(
            "The Codeforces problem URL "
            "(e.g., https://codeforces.com/contest/123/problem/A)"
        )
    )
    @app_commands.guild_only()
    async def setdailyproblem(interaction: discord.Interaction, problem_url: str) -> None:
        if not is_manager(interaction):
            await safe_reply(
                interaction,
                make_embed("You do not have permission to set the daily problem."),
            )
            return
        if not problem_url:
            await safe_reply(
                interaction, make_embed("Please provide a valid Codeforces problem URL.")
            )
            return
        await interaction.response.defer(ephemeral=True)
        try:
            update = await service.set_daily_problem(str(interaction.guild_id), problem_url)
        except InvalidProblemURL:
            await safe_reply(
                interaction,
                make_embed(
                    "Invalid problem URL format. "
                    "Please provide a valid Codeforces problem URL."
                ),
            )
            return
        except UnknownProblem:
            await safe_reply(
                interaction,
                make_embed(
                    "The provided problem URL is not valid. "
                    "Please provide a valid Codeforces problem URL."
                ),
            )
            return
        except Exception:
            log.exception("[setdailyproblem] failed for guild %s", interaction.guild_id)
            await safe_reply(
                interaction,
                make_embed("An error occurred while setting the daily problem."),
            )
            return
        msg = f"Daily problem has been set to: {problem_url}"
        if update.warnings:
            msg += f"\nWarning: {' '.join(update.warnings)}"
        await safe_reply(interaction, make_embed(msg))

    @tree.command(
        name="setleaderboardchannel",
        description="Set the channel for the leaderboard (Admin only).",
    )
    @app_commands.describe(channel="A text channel for the leaderboard")
    @app_commands.guild_only()
    async def setleaderboardchannel(
        interaction: discord.Interaction, channel: discord.TextChannel
    ) -> None:
        if not is_manager(interaction):
            await safe_reply(
                interaction,
                make_embed("You do not have permission to set the leaderboard channel."),
            )
            return
        if getattr(channel, "id", None) is None:
            await safe_reply(interaction, make_embed("Please provide a valid text channel."))
            return
        service.set_leaderboard_channel(str(interaction.guild_id), str(channel.id))
        await safe_reply(
            interaction,
            make_embed(f"Leaderboard channel has been set to <#{channel.id}>"),
        )

    @tree.command(
        name="setannouncementchannel",
        description="Set the channel for announcements (Admin only).",
    )
    @app_commands.describe(channel="A text channel for announcements")
    @app_commands.guild_only()
    async def setannouncementchannel(
        interaction: discord.Interaction, channel: discord.TextChannel
    ) -> None:
        if not is_manager(interaction):
            await safe_reply(
                interaction,
                make_embed("You do not have permission to set the announcement channel."),
            )
            return
        if getattr(channel, "id", None) is None:
            await safe_reply(interaction, make_embed("Please provide a valid text channel."))
            return
        service.set_announcement_channel(str(interaction.guild_id), str(channel.id))
        await safe_reply(
            interaction,
            make_embed(f"Announcement channel has been set to <#{channel.id}>"),
        )

    @tree.command(
        name="botinfo",
        description="Get information about the bot, including uptime and stats.",
    )
    @app_commands.guild_only()
    async def botinfo(interaction: discord.Interaction) -> None:
        e = make_embed(
            "Daily Codeforces problems and leaderboards for your server.",
            title="Bot Info",
            fields=[
                ("Uptime", format_uptime(process_uptime()), True),
                ("Servers", str(len(bot.guilds)), True),
                ("Users", str(total_member_count(bot.guilds)), True),
                ("Python Version", platform.python_version(), True),
                ("Memory Usage", f"{memory_usage_mb():.2f} MB", True),
                ("API Latency", f"{round(bot.latency * 1000)} ms", True),
                ("discord.py Version", discord.__version__, True),
            ],
        )
        if bot.user is not None:
            e.set_thumbnail(url=bot.user.display_avatar.url)
        await safe_reply(interaction, e, ephemeral=False)

    @tree.command(name="help", description="Show help information for the bot!")
    @app_commands.guild_only()
    async def help_cmd(interaction: discord.Interaction) -> None:
        e = make_embed(
            "Here are the available commands:",
            title="Help",
            fields=[(name, text, False) for name, text in HELP_ENTRIES],
        )
        await safe_reply(interaction, e, ephemeral=False)

    @tree.command(name="leaderboard", description="Display the current leaderboard publicly.")
    @app_commands.guild_only()
    async def leaderboard(interaction: discord.Interaction) -> None:
        guild = service.store.get_guild(str(interaction.guild_id))
        if guild is None or not guild.daily_problem_id:
            await safe_reply(
                interaction,
                make_embed("No daily problem is set for this server."),
                ephemeral=False,
            )
            return
        if not guild.members:
            await safe_reply(
                interaction,
                make_embed(
                    "No members have solved the daily problem yet.", title="Leaderboard"
                ),
                ephemeral=False,
            )
            return
        text = render_leaderboard(service.ranked_members(guild.guild_id))
        await safe_reply(
            interaction,
            make_embed(text, title=LEADERBOARD_TITLE),
            ephemeral=False,
        )
