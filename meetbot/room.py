# ───────────────────────────────────────────────────────────────
#  meetbot/room.py  —  a Discord text channel as a meeting room
# ───────────────────────────────────────────────────────────────
import asyncio
import logging
from typing import Iterable, List, Optional, Set, Union

import discord

from meetbot.utils import identity_of, split_into_shorter_messages, user_id_from_token

logger = logging.getLogger(__name__)


class ChannelRoom:
    def __init__(self, channel: discord.TextChannel, operator_ids: Iterable[int] = ()):
        self.channel = channel
        self.operator_ids = set(operator_ids)
        self._outbox: "asyncio.Queue[str]" = asyncio.Queue()

    # Outbound ------------------------------------------------------------
    def announce(self, text: Union[str, List[str]]) -> None:
        if not isinstance(text, str):
            text = " ".join(text)
        if text:
            self._outbox.put_nowait(text)

    async def pump(self):
        """Send queued announcements one at a time, in order."""
        while True:
            text = await self._outbox.get()
            try:
                for chunk in split_into_shorter_messages(text):
                    await self.channel.send(chunk)
            except discord.HTTPException as exc:
                logger.exception(exc)
            finally:
                self._outbox.task_done()

    # Roster / identities -------------------------------------------------
    def present_users(self) -> Set[str]:
        return {identity_of(m) for m in self.channel.members if not m.bot}

    def _member(self, user_id: int) -> Optional[discord.Member]:
        return self.channel.guild.get_member(user_id)

    def resolve(self, token: str) -> Optional[str]:
        uid = user_id_from_token(token)
        if uid is not None:
            member = self._member(uid)
            return identity_of(member) if member else None

        name = token.strip().lstrip("@").lower()
        if not name:
            return None
        matches = [
            m
            for m in self.channel.guild.members
            if name
            in {
                (m.name or "").lower(),
                (m.display_name or "").lower(),
                (getattr(m, "global_name", None) or "").lower(),
            }
        ]
        if len(matches) != 1:
            logger.debug(f"Could not resolve {token!r} ({len(matches)} matches)")
            return None
        return identity_of(matches[0])

    # Authorization -------------------------------------------------------
    def is_operator(self, user: str, silent: bool = False) -> bool:
        uid = user_id_from_token(user)
        member = self._member(uid) if uid is not None else None
        if uid in self.operator_ids or (
            member is not None and member.guild_permissions.administrator
        ):
            return True
        if not silent:
            self.announce(f"{user}, only bot operators can do that.")
        return False

    def operators(self) -> Set[str]:
        return {f"<@{uid}>" for uid in self.operator_ids}

    def set_operator(self, user: str, enabled: bool) -> bool:
        """Grant or revoke; False when nothing changed."""
        uid = user_id_from_token(user)
        if uid is None or (uid in self.operator_ids) == enabled:
            return False
        if enabled:
            self.operator_ids.add(uid)
        else:
            self.operator_ids.discard(uid)
        logger.info(f"Operator {user} {'added' if enabled else 'removed'}")
        return True
