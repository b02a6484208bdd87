import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Union

from meetbot.base import CommandArgs

if TYPE_CHECKING:
    from meetbot.bot import RoomBot

logger = logging.getLogger(__name__)


class Watcher(ABC):
    """A command module living in one room.

    Every watcher sees every message through `handle_message`; commands
    addressed to it (`!<module_name> <verb> ...`) arrive in `handle_command`.
    """

    module_name: str = ""
    module_commands: List[str] = []

    def __init__(self, bot: "RoomBot"):
        self.bot = bot

    @abstractmethod
    def handle_message(self, user: str, text: str) -> None: ...

    @abstractmethod
    def handle_command(self, cmd: CommandArgs) -> None: ...

    def message(self, text: Union[str, List[str]]) -> None:
        self.bot.announce(text)

    def display_command(self) -> str:
        return f"{self.bot.prefix}{self.module_name}"

    def usage(self) -> None:
        self.message(
            f"Usage: {self.display_command()} <{'|'.join(self.module_commands)}>"
        )


class BasicCommands(Watcher):
    """Room-level commands that aren't addressed to a particular module."""

    module_name = "bot"
    module_commands = ["help", "status", "ops"]

    def __init__(self, bot: "RoomBot"):
        super().__init__(bot)
        self.message_count = 0
        self.command_count = 0
        self.last_message_time: Optional[datetime] = None

    def handle_message(self, user: str, text: str) -> None:
        self.message_count += 1
        self.last_message_time = datetime.now(timezone.utc)

    def handle_command(self, cmd: CommandArgs) -> None:
        self.command_count += 1
        if cmd.command == "help":
            if not cmd.args:
                self.message(
                    ["The following modules are available:"] + self.bot.watcher_names()
                )
                self.message(f"Use {self.bot.prefix}help <modulename..> to see what commands are available.")
                return
            for name in cmd.args:
                watcher = self.bot.get_watcher(name)
                if watcher:
                    self.message(
                        [f"Module {watcher.module_name} understands:"]
                        + watcher.module_commands
                    )
        elif cmd.command == "status":
            now = datetime.now(timezone.utc).strftime("%H:%M:%S")
            sent = (
                self.last_message_time.strftime("%H:%M:%S")
                if self.last_message_time
                else "unknown"
            )
            self.message(
                f"It is {now}. Your message was sent at {sent}. (Time UTC) "
                f"I can see {len(self.bot.room.present_users())} people in the room. "
                f"I have processed {self.message_count} messages "
                f"and {self.command_count} commands."
            )
            for w in self.bot.watchers:
                if w is not self and "status" in w.module_commands:
                    w.handle_command(cmd)
        elif cmd.command == "ops":
            self.ops(cmd)
        else:
            self.message(
                f"Usage: {self.bot.prefix}<{'|'.join(self.module_commands)}>"
                f" or {self.bot.prefix}<module> <command>"
            )

    # ───────────────────────────────────────────────────────────
    # Operators
    # ───────────────────────────────────────────────────────────
    def ops(self, cmd: CommandArgs) -> None:
        verb = cmd.args[0] if cmd.args else ""
        if verb in ("?", "status"):
            operators = sorted(self.bot.room.operators())
            self.message([f"There are {len(operators)} operators."] + operators)
        elif verb in ("+", "add", "op"):
            self.change_ops(cmd, True)
        elif verb in ("-", "remove", "deop"):
            self.change_ops(cmd, False)
        else:
            self.ops_usage()

    def change_ops(self, cmd: CommandArgs, enable: bool) -> None:
        if not self.bot.room.is_operator(cmd.user):
            return
        if len(cmd.args) < 2:
            self.ops_usage()
            return
        for token in cmd.args[1:]:
            user = self.bot.room.resolve(token)
            if not user:
                self.message(f"Unrecognized user {token} when changing operators.")
                continue
            if self.bot.room.set_operator(user, enable):
                if enable:
                    self.message(f"{user} is now an operator")
                else:
                    self.message(f"{user} is no longer an operator")
            else:
                self.message(f"Changing operator status of {user} failed.")

    def ops_usage(self) -> None:
        self.message(f"Usage: {self.bot.prefix}ops status")
        self.message(f"Usage: {self.bot.prefix}ops <add|op|+|remove|deop|-> <name..>")
