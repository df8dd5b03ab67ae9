"""Leaderboard ranking and rendering."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .models import MemberEntry, UserRecord

HEADER = "**Leaderboard for Daily Problem**"


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    platform_user_id: str
    points: int

    @property
    def mention(self) -> str:
        return f"<@{self.platform_user_id}>"

    def line(self) -> str:
        return f"{self.rank}. {self.mention} - {self.points} point(s)"


def rank_members(
    members: Iterable[MemberEntry],
    resolve: Callable[[str], UserRecord | None],
) -> list[RankedEntry]:
    """Rank ``members`` by points using standard competition ranking.

    Members whose ``user_ref`` cannot be resolved are skipped and do not
    occupy a position. Ties share a rank and the following distinct score
    skips ahead, so points ``[10, 10, 5]`` rank ``[1, 1, 3]``.
    """
    ordered = sorted(members, key=lambda m: m.points, reverse=True)
    ranked: list[RankedEntry] = []
    last_points: int | None = None
    rank = 0
    for member in ordered:
        user = resolve(member.user_ref)
        if user is None:
            continue
        if member.points != last_points:
            rank = len(ranked) + 1
            last_points = member.points
        ranked.append(RankedEntry(rank, user.platform_user_id, member.points))
    return ranked


def render_leaderboard(entries: Iterable[RankedEntry]) -> str:
    lines = [HEADER, ""]
    lines.extend(entry.line() for entry in entries)
    return "\n".join(lines)
