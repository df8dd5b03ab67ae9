"""Simple JSON-backed document store for guild and user records."""

from __future__ import annotations

import datetime
import json
import logging
import os
from collections.abc import Iterable
from datetime import UTC
from pathlib import Path

from pydantic import ValidationError

from .models import GuildRecord, MemberEntry, UserRecord

log = logging.getLogger("cfdaily.storage")


class StorageError(RuntimeError):
    """Raised when the store file cannot be read or parsed."""


class JSONStorage:
    """Persist :class:`GuildRecord` and :class:`UserRecord` data.

    Every record lives in a single JSON document which is rewritten
    atomically on every mutation. Mutating methods never await, so a
    read-modify-write inside one of them cannot interleave with another
    coroutine on the event loop.
    """

    def __init__(self, path: Path | str) -> None:
        """Initialise storage using JSON file at ``path``."""
        self.path = Path(path)
        self._guilds: dict[str, GuildRecord] = {}
        self._users: list[UserRecord] = []
        if self.path.exists():
            self._load()
        else:
            self._save()

    # ------------------------------------------------------------------
    # Internal helpers
    def _load(self) -> None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            guilds = [GuildRecord(**item) for item in data.get("guilds", [])]
            users = [UserRecord(**item) for item in data.get("users", [])]
        except (OSError, ValueError, AttributeError, ValidationError) as exc:
            raise StorageError(f"Cannot load store {self.path}: {exc}") from exc
        self._guilds = {g.guild_id: g for g in guilds}
        self._users = users
        log.info(
            "Loaded %d guild(s) and %d user(s) from %s",
            len(self._guilds),
            len(self._users),
            self.path,
        )

    def _save(self) -> None:
        data = {
            "guilds": [g.model_dump(mode="json") for g in self._guilds.values()],
            "users": [u.model_dump(mode="json") for u in self._users],
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    def _touch_and_save(self, guild: GuildRecord) -> None:
        guild.updated_at = datetime.datetime.now(tz=UTC)
        self._save()

    # ------------------------------------------------------------------
    # Guild operations
    def get_guild(self, guild_id: str) -> GuildRecord | None:
        """Look up a guild record by its Discord guild ID."""
        return self._guilds.get(str(guild_id))

    def get_or_create_guild(self, guild_id: str) -> GuildRecord:
        """Return the guild record, creating an unsaved one if missing."""
        guild = self.get_guild(guild_id)
        if guild is None:
            guild = GuildRecord(guild_id=str(guild_id))
            self._guilds[guild.guild_id] = guild
        return guild

    def all_guilds(self) -> Iterable[GuildRecord]:
        return self._guilds.values()

    def set_daily_problem(self, guild_id: str, problem_id: str) -> GuildRecord:
        guild = self.get_or_create_guild(guild_id)
        guild.daily_problem_id = problem_id
        self._touch_and_save(guild)
        return guild

    def set_leaderboard_channel(self, guild_id: str, channel_id: str) -> GuildRecord:
        guild = self.get_or_create_guild(guild_id)
        guild.leaderboard_channel_id = str(channel_id)
        self._touch_and_save(guild)
        return guild

    def set_announcement_channel(self, guild_id: str, channel_id: str) -> GuildRecord:
        guild = self.get_or_create_guild(guild_id)
        guild.announcement_channel_id = str(channel_id)
        self._touch_and_save(guild)
        return guild

    def set_leaderboard_message(self, guild_id: str, message_id: str) -> None:
        guild = self.get_guild(guild_id)
        if guild is None:
            return
        guild.last_leaderboard_message_id = str(message_id)
        self._touch_and_save(guild)

    def _member_for(self, guild: GuildRecord, user_ref: str) -> MemberEntry | None:
        """Find the member entry of whoever owns ``user_ref``.

        Every login appends a new user record, so the entry may point at an
        older record of the same Discord user.
        """
        user = self.get_user(user_ref)
        if user is None:
            return guild.find_member(user_ref)
        refs = {u.id for u in self._users if u.platform_user_id == user.platform_user_id}
        return next((m for m in guild.members if m.user_ref in refs), None)

    def record_daily_result(
        self, guild_id: str, user_ref: str, problem_id: str, solved: bool
    ) -> bool:
        """Apply a daily check result to the guild's member list.

        Returns ``False`` without touching anything when the member already
        earned credit for ``problem_id``. Otherwise an absent member is
        inserted and credit (one point plus the problem id) is recorded only
        when ``solved``. A Discord user has at most one entry per guild,
        whichever of their user records ``user_ref`` names.
        """
        guild = self.get_or_create_guild(guild_id)
        member = self._member_for(guild, user_ref)
        if member is not None and member.last_submitted_problem_id == problem_id:
            return False
        if member is None:
            member = MemberEntry(user_ref=user_ref)
            guild.members.append(member)
        member.user_ref = user_ref
        if solved:
            member.points += 1
            member.last_submitted_problem_id = problem_id
        self._touch_and_save(guild)
        return True

    # ------------------------------------------------------------------
    # User operations
    def add_user(self, user: UserRecord) -> None:
        """Persist a new ``user``. Earlier records for the same user stay."""
        self._users.append(user)
        self._save()

    def get_user(self, ref: str) -> UserRecord | None:
        """Retrieve a user by internal id."""
        return next((u for u in self._users if u.id == ref), None)

    def find_user(
        self, platform_user_id: str, guild_id: str | None = None
    ) -> UserRecord | None:
        """Return the most recent record for a Discord user.

        A record created in ``guild_id`` wins over one created elsewhere.
        """
        matches = [u for u in self._users if u.platform_user_id == str(platform_user_id)]
        if guild_id is not None:
            local = [u for u in matches if u.guild_id == str(guild_id)]
            if local:
                return local[-1]
        return matches[-1] if matches else None

    def all_users(self) -> Iterable[UserRecord]:
        return iter(self._users)
