"""Core package for CF Daily.

This module exposes the record models and storage layer so that consumers
of the package can simply import them from ``cfdaily_bot``. The Discord
bot itself lives in :mod:`cfdaily_bot.bot` and is started from
:mod:`cfdaily_bot.main`.
"""

from .core.models import GuildRecord, MemberEntry, UserRecord
from .core.storage import JSONStorage

__all__ = ["GuildRecord", "MemberEntry", "UserRecord", "JSONStorage"]
