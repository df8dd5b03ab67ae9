"""Tests for leaderboard ranking and rendering."""

from cfdaily_bot.core.leaderboard import HEADER, rank_members, render_leaderboard
from cfdaily_bot.core.models import MemberEntry, UserRecord


def make_users(*ids: str) -> dict[str, UserRecord]:
    return {
        i: UserRecord(id=i, platform_user_id=f"u{i}", judge_handle=i, guild_id="g")
        for i in ids
    }


def test_distinct_points_rank_in_order() -> None:
    users = make_users("a", "b", "c")
    members = [
        MemberEntry(user_ref="a", points=3),
        MemberEntry(user_ref="b", points=7),
        MemberEntry(user_ref="c", points=5),
    ]
    first = render_leaderboard(rank_members(members, users.get))
    second = render_leaderboard(rank_members(members, users.get))
    assert first == second
    assert first.splitlines() == [
        HEADER,
        "",
        "1. <@ub> - 7 point(s)",
        "2. <@uc> - 5 point(s)",
        "3. <@ua> - 3 point(s)",
    ]


def test_ties_share_rank_and_skip() -> None:
    users = make_users("a", "b", "c")
    members = [
        MemberEntry(user_ref="a", points=10),
        MemberEntry(user_ref="b", points=10),
        MemberEntry(user_ref="c", points=5),
    ]
    ranked = rank_members(members, users.get)
    assert [r.rank for r in ranked] == [1, 1, 3]


def test_unresolved_members_are_skipped() -> None:
    users = make_users("a", "c")
    members = [
        MemberEntry(user_ref="ghost", points=20),
        MemberEntry(user_ref="a", points=10),
        MemberEntry(user_ref="c", points=4),
    ]
    ranked = rank_members(members, users.get)
    assert [(r.platform_user_id, r.rank) for r in ranked] == [("ua", 1), ("uc", 2)]


def test_empty_leaderboard_is_just_the_header() -> None:
    assert render_leaderboard([]) == HEADER + "\n"
