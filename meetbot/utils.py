import logging
import re
from datetime import date
from typing import Iterable, List, Optional

import discord

logger = logging.getLogger(__name__)

MAX_CHARS_PER_REPLY_MSG = 1900     # Discord hard limit is 2000

MENTION_RE = re.compile(r"^<@!?(\d+)>$")


def session_label(day: Optional[date] = None) -> str:
    """Name for the meeting notes of the current ISO year/week."""
    year, week, _ = (day or date.today()).isocalendar()
    return f"notes_{year}_{week}"


def identity_of(user: discord.abc.User) -> str:
    return f"<@{user.id}>"


def user_id_from_token(token: str) -> Optional[int]:
    """`<@123>`, `<@!123>` or a bare `123` -> 123."""
    token = token.strip()
    m = MENTION_RE.match(token)
    if m:
        return int(m.group(1))
    if token.isdigit():
        return int(token)
    return None


def parse_id_list(raw: Optional[str]) -> List[int]:
    return [int(s) for s in (raw or "").split(",") if s.strip()]


def split_into_shorter_messages(message: str) -> List[str]:
    return [
        message[i : i + MAX_CHARS_PER_REPLY_MSG]
        for i in range(0, len(message), MAX_CHARS_PER_REPLY_MSG)
    ]


def should_block(guild: Optional[discord.Guild], allowed_ids: Iterable[int]) -> bool:
    if guild is None:
        # dm's not supported
        logger.info(f"DM not supported")
        return True

    if guild.id and guild.id not in allowed_ids:
        # not allowed in this server
        logger.info(f"Guild {guild} not allowed")
        return True
    return False
