from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Set, Union

import dacite
import yaml


@dataclass(frozen=True)
class Config:
    name: str
    command_prefix: str = "!"
    rollcall_reminder_seconds: float = 60
    turn_reminder_seconds: float = 30
    notes_dir: str = "notes"


def load_config(path: str) -> Config:
    with open(path, "r") as f:
        return dacite.from_dict(
            Config,
            yaml.safe_load(f),
            config=dacite.Config(cast=[float]),
        )


@dataclass
class CommandArgs:
    """A parsed `!verb arg arg` command, as handed to a watcher."""

    user: str
    id: str
    command: str
    args: List[str] = field(default_factory=list)

    @classmethod
    def parse(
        cls, text: str, user: str, event_id: str, prefix: str = "!"
    ) -> Optional["CommandArgs"]:
        if not text or not text.startswith(prefix):
            return None
        words = text[len(prefix):].split()
        if not words:
            return None
        return cls(user=user, id=event_id, command=words[0], args=words[1:])

    def pop(self) -> "CommandArgs":
        # `!meeting next bob` arrives as command=meeting, args=[next, bob]
        if self.args:
            self.command = self.args.pop(0)
        else:
            self.command = ""
        return self


# ───────────────────────────────────────────────────────────────
# Collaborators supplied by the chat transport
# ───────────────────────────────────────────────────────────────
class Room(Protocol):
    def announce(self, text: Union[str, List[str]]) -> None: ...

    def present_users(self) -> Set[str]: ...

    def resolve(self, token: str) -> Optional[str]: ...

    def is_operator(self, user: str, silent: bool = False) -> bool: ...

    def operators(self) -> Set[str]: ...

    def set_operator(self, user: str, enabled: bool) -> bool: ...
