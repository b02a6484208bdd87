import logging
from typing import List, Optional, Union

from meetbot.base import CommandArgs, Room
from meetbot.meetings.fsm import (
    ROLLCALL_REMINDER_SECONDS,
    TURN_REMINDER_SECONDS,
    MeetingSession,
)
from meetbot.meetings.timer import ReminderTimer
from meetbot.notes import NotesLogger
from meetbot.watchers import BasicCommands, Watcher

logger = logging.getLogger(__name__)


class RoomBot:
    """The set of command modules watching a single room."""

    def __init__(
        self,
        room: Room,
        name: str = "MeetBot",
        prefix: str = "!",
        notes_dir: str = "notes",
        rollcall_reminder: float = ROLLCALL_REMINDER_SECONDS,
        turn_reminder: float = TURN_REMINDER_SECONDS,
        timer: Optional[ReminderTimer] = None,
    ):
        self.room = room
        self.name = name
        self.prefix = prefix
        self.basic = BasicCommands(self)
        self.meeting = MeetingSession(
            self,
            timer=timer,
            rollcall_reminder=rollcall_reminder,
            turn_reminder=turn_reminder,
        )
        self.notes = NotesLogger(self, notes_dir=notes_dir)
        # Order matters: the meeting sees a message before the notes record it
        self.watchers: List[Watcher] = [self.basic, self.meeting, self.notes]

    def watcher_names(self) -> List[str]:
        return [w.module_name for w in self.watchers]

    def get_watcher(self, name: str) -> Optional[Watcher]:
        for w in self.watchers:
            if w.module_name == name:
                return w
        return None

    def set_logging(self, label: str, enabled: bool) -> None:
        self.notes.set_logging(label, enabled)

    def announce(self, text: Union[str, List[str]]) -> None:
        self.room.announce(text)
        # The bot's own lines belong in the meeting notes too
        if not isinstance(text, str):
            text = " ".join(text)
        self.notes.record(self.name, text)

    def handle_message(self, user: str, text: str, event_id: str = "") -> None:
        for w in self.watchers:
            try:
                w.handle_message(user, text)
            except Exception as exc:
                logger.exception(exc)

        cmd = CommandArgs.parse(text, user, event_id, self.prefix)
        if cmd is None:
            return

        watcher = self.get_watcher(cmd.command)
        if watcher is None:
            watcher = self.basic
        else:
            cmd.pop()
            if not cmd.command:
                watcher.usage()
                return
        logger.info(f"Command {cmd.command} {cmd.args} for {watcher.module_name} from {user}")
        try:
            watcher.handle_command(cmd)
        except Exception as exc:
            logger.exception(exc)
