"""Tests for the slash command handlers registered by ``register_commands``."""

from __future__ import annotations

import asyncio
import datetime
import types
from pathlib import Path

import pytest

from cfdaily_bot.commands import register
from cfdaily_bot.core.models import Problem, Submission
from cfdaily_bot.core.service import DailyService
from cfdaily_bot.core.storage import JSONStorage
from test_service import FakeJudge, FakePublisher


class DummyTree:
    def command(self, *args, **kwargs):
        def deco(func):
            setattr(self, kwargs["name"], func)
            return func

        return deco


class Response:
    def __init__(self):
        self.sent = []
        self.deferred = None

    def is_done(self):
        return bool(self.sent) or self.deferred is not None

    async def send_message(self, **kwargs):
        self.sent.append(kwargs)

    async def defer(self, ephemeral=False):
        self.deferred = {"ephemeral": ephemeral}


class Followup:
    def __init__(self):
        self.sent = []

    async def send(self, **kwargs):
        self.sent.append(kwargs)


class Interaction:
    def __init__(self, user_id=7, guild_id=1, manage_guild=False):
        self.user = types.SimpleNamespace(
            id=user_id,
            guild_permissions=types.SimpleNamespace(manage_guild=manage_guild),
        )
        self.guild_id = guild_id
        self.created_at = datetime.datetime(2024, 1, 1, tzinfo=datetime.UTC)
        self.response = Response()
        self.followup = Followup()
        self.edited = []

    async def original_response(self):
        return types.SimpleNamespace(
            created_at=self.created_at + datetime.timedelta(milliseconds=120)
        )

    async def edit_original_response(self, **kwargs):
        self.edited.append(kwargs)

    @property
    def replies(self):
        return self.response.sent + self.followup.sent

    @property
    def last_text(self):
        return self.replies[-1]["embed"].description


PROBLEMS = [Problem(contest_id=1500, index="A")]


@pytest.fixture()
def setup(tmp_path: Path):
    judge = FakeJudge(
        submissions=[
            Submission(
                id=1,
                problem=Problem(contest_id=1500, index="A"),
                verdict="COMPILATION_ERROR",
            )
        ],
        problems=PROBLEMS,
    )
    publisher = FakePublisher()
    service = DailyService(JSONStorage(tmp_path / "data.json"), judge, publisher)
    bot = types.SimpleNamespace(
        tree=DummyTree(),
        latency=0.05,
        guilds=[types.SimpleNamespace(member_count=3), types.SimpleNamespace(member_count=4)],
        user=None,
    )
    register.register_commands(bot, service)
    return types.SimpleNamespace(
        bot=bot, tree=bot.tree, service=service, judge=judge, publisher=publisher
    )


def test_all_commands_registered(setup) -> None:
    for name in (
        "ping",
        "login",
        "check",
        "setdailyproblem",
        "setleaderboardchannel",
        "setannouncementchannel",
        "botinfo",
        "help",
        "leaderboard",
    ):
        assert callable(getattr(setup.tree, name))


def test_ping_reports_latency(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.ping(inter))
    assert inter.response.sent[0]["embed"].description == "Pinging..."
    text = inter.edited[0]["embed"].description
    assert "`120ms`" in text
    assert "API Latency is `50ms`" in text


def test_login_sends_prompt_with_button(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.login(inter, "abc"))
    assert inter.response.deferred == {"ephemeral": True}
    reply = inter.followup.sent[0]
    assert "https://codeforces.com/contest/1500/problem/A" in reply["embed"].description
    assert reply["ephemeral"] is True
    assert [c.custom_id for c in reply["view"].children] == ["done|abc|1500/A"]


def test_login_rejects_bad_handle(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.login(inter, "  "))
    assert inter.last_text == "Please provide a Codeforces username."
    assert setup.judge.calls == []


def test_login_without_problem_set(setup) -> None:
    setup.judge.problem_list = None
    inter = Interaction()
    asyncio.run(setup.tree.login(inter, "abc"))
    assert "could not fetch a random problem" in inter.last_text
    assert "view" not in inter.followup.sent[0]


def test_check_requires_login(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.check(inter))
    assert inter.last_text == "You are not logged in. Please use /login to log in."


def test_full_daily_flow(setup) -> None:
    service = setup.service
    asyncio.run(service.confirm_login("7", "1", "abc", "1500/A"))

    admin = Interaction(manage_guild=True)
    asyncio.run(
        setup.tree.setleaderboardchannel(admin, types.SimpleNamespace(id=55))
    )
    assert admin.last_text == "Leaderboard channel has been set to <#55>"

    admin = Interaction(manage_guild=True)
    asyncio.run(
        setup.tree.setdailyproblem(admin, "https://codeforces.com/contest/1500/problem/A")
    )
    assert admin.last_text.startswith("Daily problem has been set to:")
    assert "No announcement channel is set." in admin.last_text

    setup.judge.submissions = [
        Submission(id=2, problem=Problem(contest_id=1500, index="A"), verdict="OK")
    ]

    async def check_twice():
        first, second = Interaction(), Interaction()
        await setup.tree.check(first)
        await setup.tree.check(second)
        await service.tasks.drain()
        return first, second

    first, second = asyncio.run(check_twice())
    assert "earned 1 point" in first.last_text
    assert "already submitted" in second.last_text

    board = Interaction()
    asyncio.run(setup.tree.leaderboard(board))
    reply = board.response.sent[0]
    assert reply["ephemeral"] is False
    assert "1. <@7> - 1 point(s)" in reply["embed"].description
    assert setup.publisher.sent[0][0] == "55"


def test_admin_commands_require_manage_guild(setup) -> None:
    for name, arg in (
        ("setdailyproblem", "https://codeforces.com/contest/1500/problem/A"),
        ("setleaderboardchannel", types.SimpleNamespace(id=55)),
        ("setannouncementchannel", types.SimpleNamespace(id=56)),
    ):
        inter = Interaction(manage_guild=False)
        asyncio.run(getattr(setup.tree, name)(inter, arg))
        assert inter.last_text.startswith("You do not have permission")
    assert setup.service.store.get_guild("1") is None


def test_setdailyproblem_rejects_bad_url(setup) -> None:
    inter = Interaction(manage_guild=True)
    asyncio.run(setup.tree.setdailyproblem(inter, "https://example.com/foo"))
    assert inter.last_text.startswith("Invalid problem URL format.")
    assert setup.service.store.get_guild("1") is None


def test_setdailyproblem_rejects_unknown_problem(setup) -> None:
    inter = Interaction(manage_guild=True)
    asyncio.run(
        setup.tree.setdailyproblem(inter, "https://codeforces.com/contest/1500/problem/B")
    )
    assert inter.last_text.startswith("The provided problem URL is not valid.")


def test_setannouncementchannel(setup) -> None:
    inter = Interaction(manage_guild=True)
    asyncio.run(setup.tree.setannouncementchannel(inter, types.SimpleNamespace(id=56)))
    assert inter.last_text == "Announcement channel has been set to <#56>"
    assert setup.service.store.get_guild("1").announcement_channel_id == "56"


def test_leaderboard_messages(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.leaderboard(inter))
    assert inter.last_text == "No daily problem is set for this server."

    setup.service.store.set_daily_problem("1", "1500/A")
    inter = Interaction()
    asyncio.run(setup.tree.leaderboard(inter))
    assert inter.last_text == "No members have solved the daily problem yet."


def test_help_lists_every_command(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.help(inter))
    embed = inter.response.sent[0]["embed"]
    assert inter.response.sent[0]["ephemeral"] is False
    assert [f.name for f in embed.fields] == [name for name, _ in register.HELP_ENTRIES]


def test_botinfo_fields(setup) -> None:
    inter = Interaction()
    asyncio.run(setup.tree.botinfo(inter))
    embed = inter.response.sent[0]["embed"]
    fields = {f.name: f.value for f in embed.fields}
    assert fields["Users"] == "7"
    assert fields["Servers"] == "2"
    assert fields["API Latency"] == "50 ms"
    assert fields["Memory Usage"].endswith("MB")
    assert fields["Uptime"].count(",") == 3


def test_check_reports_storage_failure(setup, monkeypatch) -> None:
    asyncio.run(setup.service.confirm_login("7", "1", "abc", "1500/A"))
    setup.service.store.set_daily_problem("1", "1500/A")

    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(setup.service.store, "record_daily_result", broken)
    inter = Interaction()
    asyncio.run(setup.tree.check(inter))
    assert inter.response.deferred == {"ephemeral": True}
    assert inter.followup.sent[0]["embed"].description == (
        "An error occurred while checking your solution."
    )


def test_setdailyproblem_reports_storage_failure(setup, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(setup.service.store, "set_daily_problem", broken)
    inter = Interaction(manage_guild=True)
    asyncio.run(
        setup.tree.setdailyproblem(inter, "https://codeforces.com/contest/1500/problem/A")
    )
    assert inter.last_text == "An error occurred while setting the daily problem."


def test_login_reports_judge_failure(setup, monkeypatch) -> None:
    async def broken():
        raise RuntimeError("judge down")

    monkeypatch.setattr(setup.service, "start_login", broken)
    inter = Interaction()
    asyncio.run(setup.tree.login(inter, "abc"))
    assert inter.last_text == "An error occurred while processing your login."
