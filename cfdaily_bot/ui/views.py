from __future__ import annotations

import logging
import re

import discord

from ..commands.utils import safe_reply
from ..core.service import LoginResult

log = logging.getLogger("cfdaily.ui")

EMBED_COLOR = 0x00FFFF
FOOTER_TEXT = "CF Daily • Codeforces daily problems"

LOGIN_TEMPLATE = r"done\|(?P<handle>[^|]+)\|(?P<problem_id>\d+/[A-Za-z0-9]+)"

LOGIN_REPLIES = {
    LoginResult.SUCCESS: "You have now signed in!",
    LoginResult.INVALID: "Invalid Codeforces username.",
    LoginResult.NO_SUBMISSION: (
        "Could not retrieve your last submission. Please try again later."
    ),
    LoginResult.MISMATCH: (
        "Your last submission does not match the problem or it wasn't a "
        "compilation error. Please try again."
    ),
}


def make_embed(
    description: str,
    title: str | None = None,
    fields: list[tuple[str, str, bool]] | None = None,
) -> discord.Embed:
    """Build an embed in the bot's house style."""
    e = discord.Embed(title=title, description=description, color=EMBED_COLOR)
    for name, value, inline in fields or []:
        e.add_field(name=name, value=value, inline=inline)
    e.set_footer(text=FOOTER_TEXT)
    return e


def login_custom_id(handle: str, problem_id: str) -> str:
    return f"done|{handle}|{problem_id}"


class LoginConfirmButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=LOGIN_TEMPLATE,
):
    """The **Done** button of a login prompt.

    The handle and problem id travel inside the custom id, so presses keep
    working across restarts without any server-side state.
    """

    def __init__(self, handle: str, problem_id: str) -> None:
        super().__init__(
            discord.ui.Button(
                label="Done",
                style=discord.ButtonStyle.primary,
                custom_id=login_custom_id(handle, problem_id),
            )
        )
        self.handle = handle
        self.problem_id = problem_id

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
    ) -> LoginConfirmButton:
        return cls(match["handle"], match["problem_id"])

    async def callback(self, interaction: discord.Interaction) -> None:
        service = interaction.client.service
        await interaction.response.defer(ephemeral=True)
        try:
            result = await service.confirm_login(
                str(interaction.user.id),
                str(interaction.guild_id),
                self.handle,
                self.problem_id,
            )
        except Exception:
            log.exception("[login-confirm] verification failed for %s", self.handle)
            await safe_reply(
                interaction,
                make_embed("An error occurred while processing your login."),
            )
            return
        await safe_reply(interaction, make_embed(LOGIN_REPLIES[result]))


def login_view(handle: str, problem_id: str) -> discord.ui.View:
    v = discord.ui.View(timeout=None)
    v.add_item(LoginConfirmButton(handle, problem_id))
    return v
