import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from meetbot.base import CommandArgs
from meetbot.watchers import Watcher

if TYPE_CHECKING:
    from meetbot.bot import RoomBot

logger = logging.getLogger(__name__)


class NotesLogger(Watcher):
    """Appends room traffic to a notes file while switched on."""

    module_name = "log"
    module_commands = ["on", "off", "status"]

    def __init__(self, bot: "RoomBot", notes_dir: str = "notes"):
        super().__init__(bot)
        self.notes_dir = notes_dir
        self.label: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.label is not None

    @property
    def path(self) -> Optional[str]:
        if self.label is None:
            return None
        return os.path.join(self.notes_dir, f"{self.label}.txt")

    def set_logging(self, label: str, enabled: bool) -> None:
        if enabled:
            self.label = label
            logger.info(f"Notes logging on: {self.path}")
        elif self.label is not None:
            logger.info(f"Notes logging off: {self.path}")
            self.label = None

    def handle_message(self, user: str, text: str) -> None:
        self.record(user, text)

    def record(self, user: str, text: str) -> None:
        if not self.enabled:
            return
        stamp = datetime.now().strftime("%H:%M:%S")
        try:
            os.makedirs(self.notes_dir, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"[{stamp}] {user}: {text}\n")
        except OSError as exc:
            logger.exception(exc)
            self.label = None

    def handle_command(self, cmd: CommandArgs) -> None:
        if cmd.command == "status":
            if self.enabled:
                self.message(f"Logging to {self.label}.")
            else:
                self.message("Logging is off.")
        elif cmd.command in ("on", "off"):
            if self.bot.room.is_operator(cmd.user):
                self.set_logging(cmd.id, cmd.command == "on")
                self.message(f"Logging is {cmd.command}.")
        else:
            self.usage()
