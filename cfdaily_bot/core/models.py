"""Data models for CF Daily's persisted records and judge responses.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from dictionaries.
Judge payloads are parsed leniently: unknown fields are ignored so new
fields added by Codeforces do not break parsing.
"""

from __future__ import annotations

import datetime
import uuid
from datetime import UTC

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


class MemberEntry(BaseModel):
    """A user's standing on one guild's leaderboard.

    Attributes
    ----------
    user_ref:
        The :attr:`UserRecord.id` this entry belongs to.
    points:
        Total points earned in the guild. Never negative.
    last_submitted_problem_id:
        The daily problem id the user last earned credit for, if any.

    """

    user_ref: str
    points: int = Field(default=0, ge=0)
    last_submitted_problem_id: str | None = None


class GuildRecord(BaseModel):
    """Per-guild configuration and leaderboard."""

    guild_id: str
    daily_problem_id: str | None = None
    leaderboard_channel_id: str | None = None
    announcement_channel_id: str | None = None
    last_leaderboard_message_id: str | None = None
    members: list[MemberEntry] = Field(default_factory=list)
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)

    def find_member(self, user_ref: str) -> MemberEntry | None:
        return next((m for m in self.members if m.user_ref == user_ref), None)


class UserRecord(BaseModel):
    """A Discord user who proved ownership of a Codeforces handle.

    Attributes
    ----------
    id:
        Internal unique identifier. Defaults to a random UUID4 string and is
        what :class:`MemberEntry` refers to.
    platform_user_id:
        The Discord user ID.
    judge_handle:
        The verified Codeforces handle.
    guild_id:
        The guild the login was completed in.

    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    platform_user_id: str
    judge_handle: str
    guild_id: str
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)


class Problem(BaseModel):
    """A problem as returned by the Codeforces API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    contest_id: int | None = Field(default=None, alias="contestId")
    index: str
    name: str = ""
    rating: int | None = None

    @property
    def problem_id(self) -> str:
        return f"{self.contest_id}/{self.index}"


class Submission(BaseModel):
    """A submission as returned by ``user.status``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    problem: Problem
    # Submissions still being judged carry no verdict.
    verdict: str | None = None
    creation_time_seconds: int | None = Field(
        default=None, alias="creationTimeSeconds"
    )

    def matches(self, contest_id: int, index: str) -> bool:
        return self.problem.contest_id == contest_id and self.problem.index == index
