"""Base adapter interface for judge platform implementations."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod

from ..core.models import Problem, Submission
from ..core.problems import split_problem_id

log = logging.getLogger("cfdaily.judge")


class JudgeAdapter(ABC):
    """Abstract adapter for read-only judge APIs.

    Implementations report soft failures (transport errors, error statuses,
    malformed payloads) by returning ``None`` instead of raising.
    """

    @abstractmethod
    async def user_submissions(
        self, handle: str, start: int | None = None, count: int | None = None
    ) -> list[Submission] | None:
        """Return submissions of ``handle``, newest first."""

    @abstractmethod
    async def problems(self) -> list[Problem] | None:
        """Return the full problem set."""

    # ------------------------------------------------------------------
    # Queries built on the two endpoints above
    async def last_submission(self, handle: str) -> Submission | None:
        """Return the single most recent submission of ``handle``."""
        submissions = await self.user_submissions(handle, start=1, count=1)
        if not submissions:
            log.info("No submissions found for handle %s", handle)
            return None
        return submissions[0]

    async def random_problem(self) -> Problem | None:
        problems = await self.problems()
        if not problems:
            return None
        problem = random.choice(problems)
        log.info("Selected random problem %s", problem.problem_id)
        return problem

    async def problem_exists(self, contest_id: str, index: str) -> bool:
        """Linear scan of the live problem set for ``contest_id``/``index``."""
        problems = await self.problems()
        if problems is None:
            return False
        return any(
            str(p.contest_id) == str(contest_id) and p.index == index
            for p in problems
        )

    async def has_solved(self, handle: str, problem_id: str) -> bool | None:
        """Whether ``handle`` has an accepted submission for ``problem_id``.

        Returns ``None`` when the submissions could not be fetched. Raises
        :class:`~cfdaily_bot.core.problems.InvalidProblemId` for malformed
        ids.
        """
        contest_id, index = split_problem_id(problem_id)
        submissions = await self.user_submissions(handle)
        if submissions is None:
            return None
        solved = any(
            s.matches(contest_id, index) and s.verdict == "OK" for s in submissions
        )
        log.info("Handle %s solved %s? %s", handle, problem_id, solved)
        return solved
