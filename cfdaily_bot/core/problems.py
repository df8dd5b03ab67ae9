"""Helpers for Codeforces problem identifiers and URLs."""

from __future__ import annotations

import re

PROBLEM_URL_RE = re.compile(
    r"/contest/(?P<contest>\d+)/problem/(?P<index>[A-Z0-9]+)"
    r"|/problemset/problem/(?P<pcontest>\d+)/(?P<pindex>[A-Z0-9]+)"
)

CONTEST_URL = "https://codeforces.com/contest/{contest_id}/problem/{index}"
PROBLEMSET_URL = "https://codeforces.com/problemset/problem/{contest_id}/{index}"


class InvalidProblemURL(ValueError):
    """Raised when a URL does not point at a Codeforces problem."""


class InvalidProblemId(ValueError):
    """Raised when a stored problem id is not ``<contestId>/<index>``."""


def parse_problem_url(url: str) -> tuple[str, str]:
    """Return ``(contest_id, index)`` extracted from a problem URL.

    Both ``/contest/<id>/problem/<index>`` and
    ``/problemset/problem/<id>/<index>`` paths are accepted.
    """
    match = PROBLEM_URL_RE.search(url or "")
    if not match:
        raise InvalidProblemURL(url)
    if match["contest"]:
        return match["contest"], match["index"]
    return match["pcontest"], match["pindex"]


def make_problem_id(contest_id: int | str, index: str) -> str:
    return f"{contest_id}/{index}"


def split_problem_id(problem_id: str) -> tuple[int, str]:
    """Split ``"1500/A"`` into ``(1500, "A")``."""
    contest_part, _, index = (problem_id or "").partition("/")
    if not contest_part.isdigit() or not index:
        raise InvalidProblemId(
            f'Invalid problem id {problem_id!r}. Expected format "contestId/index".'
        )
    return int(contest_part), index


def contest_url(problem_id: str) -> str:
    contest_id, index = split_problem_id(problem_id)
    return CONTEST_URL.format(contest_id=contest_id, index=index)


def problemset_url(problem_id: str) -> str:
    contest_id, index = split_problem_id(problem_id)
    return PROBLEMSET_URL.format(contest_id=contest_id, index=index)
