"""Codeforces adapter implementing :class:`~cfdaily_bot.adapters.base.JudgeAdapter`.

The adapter talks to the public Codeforces API with :mod:`httpx`. Every
response carries a ``status`` discriminator; anything other than ``"OK"`` is
logged and reported as ``None`` so callers can treat it as a soft failure.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..core.models import Problem, Submission
from .base import JudgeAdapter

log = logging.getLogger("cfdaily.codeforces")

_SUBMISSIONS = TypeAdapter(list[Submission])
_PROBLEMS = TypeAdapter(list[Problem])


class CodeforcesAdapter(JudgeAdapter):
    """Adapter that sends requests to the Codeforces HTTP API."""

    api_base = "https://codeforces.com/api"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        api_base: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Store the optional HTTP ``client`` and API base URL."""
        if api_base:
            self.api_base = api_base.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    async def _call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Call an API ``method`` and return its ``result`` payload or ``None``."""
        url = f"{self.api_base}/{method}"
        try:
            response = await self.client.get(url, params=params or {})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            log.error(
                "[%s] Codeforces API returned error status %s",
                method,
                e.response.status_code,
            )
            return None
        except httpx.HTTPError as e:
            log.error("[%s] Codeforces API request failed: %s", method, e)
            return None
        except ValueError as e:
            log.error("[%s] Codeforces API returned malformed JSON: %s", method, e)
            return None

        if not isinstance(data, dict) or data.get("status") != "OK":
            comment = data.get("comment") if isinstance(data, dict) else None
            log.warning("[%s] Codeforces API error: %s", method, comment)
            return None
        return data.get("result")

    async def user_submissions(
        self, handle: str, start: int | None = None, count: int | None = None
    ) -> list[Submission] | None:
        params: dict[str, Any] = {"handle": handle}
        if start is not None:
            params["from"] = start
        if count is not None:
            params["count"] = count
        result = await self._call("user.status", params)
        if result is None:
            return None
        try:
            return _SUBMISSIONS.validate_python(result)
        except ValidationError as e:
            log.error("[user.status] Unexpected submission payload: %s", e)
            return None

    async def problems(self) -> list[Problem] | None:
        result = await self._call("problemset.problems")
        if not isinstance(result, dict):
            return None
        try:
            return _PROBLEMS.validate_python(result.get("problems", []))
        except ValidationError as e:
            log.error("[problemset.problems] Unexpected problem payload: %s", e)
            return None

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
