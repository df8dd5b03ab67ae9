"""Discord-agnostic business logic for the daily problem workflow.

:class:`DailyService` owns the login verification, daily check, daily
problem assignment and leaderboard publishing flows. It only talks to the
outside world through the collaborators handed to it: a
:class:`~cfdaily_bot.core.storage.JSONStorage`, a
:class:`~cfdaily_bot.adapters.base.JudgeAdapter`, a :class:`Publisher` and a
:class:`~cfdaily_bot.core.tasks.BackgroundTasks` runner. Tests swap any of
them for fakes.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol

from ..adapters.base import JudgeAdapter
from .leaderboard import RankedEntry, rank_members, render_leaderboard
from .models import UserRecord
from .problems import (
    InvalidProblemId,
    contest_url,
    make_problem_id,
    parse_problem_url,
    problemset_url,
    split_problem_id,
)
from .storage import JSONStorage
from .tasks import BackgroundTasks

log = logging.getLogger("cfdaily.service")

LOGIN_PROOF_VERDICT = "COMPILATION_ERROR"
LEADERBOARD_TITLE = "Daily Problem Leaderboard"
ANNOUNCEMENT_TITLE = "Daily Problem Announcement"


class Publisher(Protocol):
    """Sends and edits embeds in guild channels."""

    async def send(self, channel_id: str, title: str, description: str) -> str | None:
        """Post a message and return its id, or ``None`` on failure."""

    async def edit(
        self, channel_id: str, message_id: str, title: str, description: str
    ) -> bool:
        """Edit an existing message. ``False`` when it no longer exists."""


class UnknownProblem(LookupError):
    """The problem is not part of the judge's problem set."""


class LoginResult(enum.Enum):
    SUCCESS = "success"
    INVALID = "invalid"
    NO_SUBMISSION = "no_submission"
    MISMATCH = "mismatch"


class CheckStatus(enum.Enum):
    NOT_LOGGED_IN = "not_logged_in"
    NO_DAILY = "no_daily"
    FETCH_FAILED = "fetch_failed"
    ALREADY_SUBMITTED = "already_submitted"
    SOLVED = "solved"
    NOT_SOLVED = "not_solved"


@dataclass(frozen=True)
class LoginPrompt:
    url: str
    problem_id: str


@dataclass
class DailyProblemUpdate:
    problem_id: str
    warnings: list[str] = field(default_factory=list)


class DailyService:
    def __init__(
        self,
        store: JSONStorage,
        judge: JudgeAdapter,
        publisher: Publisher,
        tasks: BackgroundTasks | None = None,
    ) -> None:
        self.store = store
        self.judge = judge
        self.publisher = publisher
        self.tasks = tasks or BackgroundTasks()

    # ------------------------------------------------------------------
    # Login verification
    async def start_login(self) -> LoginPrompt | None:
        """Pick the problem the user must submit a compilation error to."""
        problem = await self.judge.random_problem()
        if problem is None:
            return None
        return LoginPrompt(
            url=contest_url(problem.problem_id), problem_id=problem.problem_id
        )

    async def confirm_login(
        self, platform_user_id: str, guild_id: str, handle: str, problem_id: str
    ) -> LoginResult:
        """Verify the handle's latest submission and create the user record.

        Only the single most recent submission is inspected. It must be for
        ``problem_id`` and must have failed to compile.
        """
        if not handle:
            return LoginResult.INVALID
        try:
            contest_id, index = split_problem_id(problem_id)
        except InvalidProblemId:
            return LoginResult.INVALID

        latest = await self.judge.last_submission(handle)
        if latest is None:
            return LoginResult.NO_SUBMISSION
        if not latest.matches(contest_id, index) or latest.verdict != LOGIN_PROOF_VERDICT:
            log.info(
                "Login for %s rejected: latest submission %s is %s/%s %s",
                handle,
                latest.id,
                latest.problem.contest_id,
                latest.problem.index,
                latest.verdict,
            )
            return LoginResult.MISMATCH

        self.store.add_user(
            UserRecord(
                platform_user_id=str(platform_user_id),
                judge_handle=handle,
                guild_id=str(guild_id),
            )
        )
        log.info("User %s verified as %s in guild %s", platform_user_id, handle, guild_id)
        return LoginResult.SUCCESS

    # ------------------------------------------------------------------
    # Daily check
    async def check(self, platform_user_id: str, guild_id: str) -> CheckStatus:
        user = self.store.find_user(platform_user_id, guild_id)
        if user is None:
            return CheckStatus.NOT_LOGGED_IN
        guild = self.store.get_guild(guild_id)
        if guild is None or not guild.daily_problem_id:
            return CheckStatus.NO_DAILY

        daily = guild.daily_problem_id
        solved = await self.judge.has_solved(user.judge_handle, daily)
        if solved is None:
            return CheckStatus.FETCH_FAILED

        changed = self.store.record_daily_result(guild_id, user.id, daily, solved)
        self.tasks.spawn(
            self.refresh_leaderboard(guild_id), name=f"leaderboard-{guild_id}"
        )
        if not changed:
            return CheckStatus.ALREADY_SUBMITTED
        return CheckStatus.SOLVED if solved else CheckStatus.NOT_SOLVED

    # ------------------------------------------------------------------
    # Administration
    async def set_daily_problem(self, guild_id: str, url: str) -> DailyProblemUpdate:
        """Validate ``url`` against the judge and make it the daily problem.

        Raises :class:`~cfdaily_bot.core.problems.InvalidProblemURL` for a
        malformed URL and :class:`UnknownProblem` when the judge does not
        know the problem. Announcement failures only produce warnings.
        """
        contest_id, index = parse_problem_url(url)
        if not await self.judge.problem_exists(contest_id, index):
            raise UnknownProblem(make_problem_id(contest_id, index))

        problem_id = make_problem_id(contest_id, index)
        guild = self.store.set_daily_problem(guild_id, problem_id)
        update = DailyProblemUpdate(problem_id=problem_id)
        if not guild.announcement_channel_id:
            update.warnings.append("No announcement channel is set.")
        if not guild.leaderboard_channel_id:
            update.warnings.append("No leaderboard channel is set.")
        if not await self.announce(guild_id):
            update.warnings.append("Failed to send announcement.")
        return update

    def set_leaderboard_channel(self, guild_id: str, channel_id: str) -> None:
        self.store.set_leaderboard_channel(guild_id, channel_id)

    def set_announcement_channel(self, guild_id: str, channel_id: str) -> None:
        self.store.set_announcement_channel(guild_id, channel_id)

    # ------------------------------------------------------------------
    # Publishing
    def ranked_members(self, guild_id: str) -> list[RankedEntry]:
        guild = self.store.get_guild(guild_id)
        if guild is None:
            return []
        return rank_members(guild.members, self.store.get_user)

    async def announce(self, guild_id: str) -> bool:
        guild = self.store.get_guild(guild_id)
        if guild is None or not guild.daily_problem_id:
            log.error("announce: no daily problem set for guild %s", guild_id)
            return False
        if not guild.announcement_channel_id:
            log.warning("announce: no announcement channel set for guild %s", guild_id)
            return False
        message_id = await self.publisher.send(
            guild.announcement_channel_id,
            ANNOUNCEMENT_TITLE,
            f"New Daily Problem: {problemset_url(guild.daily_problem_id)}",
        )
        return message_id is not None

    async def refresh_leaderboard(self, guild_id: str) -> bool:
        """Edit the guild's leaderboard message, or post a new one."""
        guild = self.store.get_guild(guild_id)
        if guild is None or not guild.members:
            log.info("refresh_leaderboard: no members for guild %s", guild_id)
            return False
        if not guild.leaderboard_channel_id:
            log.error("refresh_leaderboard: no leaderboard channel for guild %s", guild_id)
            return False

        channel_id = guild.leaderboard_channel_id
        text = render_leaderboard(self.ranked_members(guild_id))
        if guild.last_leaderboard_message_id and await self.publisher.edit(
            channel_id, guild.last_leaderboard_message_id, LEADERBOARD_TITLE, text
        ):
            return True

        message_id = await self.publisher.send(channel_id, LEADERBOARD_TITLE, text)
        if message_id is None:
            return False
        self.store.set_leaderboard_message(guild_id, message_id)
        log.info("refresh_leaderboard: new leaderboard message %s", message_id)
        return True
