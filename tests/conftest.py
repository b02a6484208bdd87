"""Shared fakes for the room collaborator and the reminder timer."""
from typing import Callable, List, Optional, Union

import pytest

from meetbot.bot import RoomBot


class FakeRoom:
    def __init__(self, users=(), operators=()):
        self.users = set(users)
        self.op_users = set(operators)
        self.aliases = {}
        self.messages: List[str] = []

    def announce(self, text: Union[str, List[str]]) -> None:
        if not isinstance(text, str):
            text = " ".join(text)
        self.messages.append(text)

    def present_users(self):
        return set(self.users)

    def resolve(self, token: str) -> Optional[str]:
        if token in self.users:
            return token
        return self.aliases.get(token)

    def is_operator(self, user: str, silent: bool = False) -> bool:
        if user in self.op_users:
            return True
        if not silent:
            self.announce(f"{user}, only bot operators can do that.")
        return False

    def operators(self):
        return set(self.op_users)

    def set_operator(self, user: str, enabled: bool) -> bool:
        if (user in self.op_users) == enabled:
            return False
        if enabled:
            self.op_users.add(user)
        else:
            self.op_users.discard(user)
        return True

    def clear(self):
        self.messages.clear()


class ManualTimer:
    """Stands in for ReminderTimer; fires only when the test says so."""

    def __init__(self):
        self.delay: Optional[float] = None
        self.callback: Optional[Callable[[], None]] = None
        self.arm_count = 0

    @property
    def active(self) -> bool:
        return self.callback is not None

    def arm(self, delay, callback):
        self.cancel()
        self.delay = delay
        self.callback = callback
        self.arm_count += 1

    def cancel(self):
        self.delay = None
        self.callback = None

    disarm = cancel

    def fire(self):
        callback, self.callback, self.delay = self.callback, None, None
        if callback:
            callback()


@pytest.fixture
def room():
    return FakeRoom(users={"alice", "bob", "carol", "dave"}, operators={"olga"})


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def bot(room, timer, tmp_path):
    return RoomBot(room, prefix="!", notes_dir=str(tmp_path), timer=timer)


@pytest.fixture
def meeting(bot):
    return bot.meeting
