# ───────────────────────────────────────────────────────────────
#  meetbot/meetings/fsm.py  —  meeting turn-taking state machine
# ───────────────────────────────────────────────────────────────
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from meetbot.base import CommandArgs
from meetbot.meetings.timer import ReminderTimer
from meetbot.utils import session_label
from meetbot.watchers import Watcher

if TYPE_CHECKING:
    from meetbot.bot import RoomBot

logger = logging.getLogger(__name__)

ROLLCALL_REMINDER_SECONDS = 60
TURN_REMINDER_SECONDS = 30


class State(Enum):
    NONE = auto()
    ROLLCALL = auto()
    IN_PROGRESS = auto()


def non_responders(
    present: Iterable[str], pending: Iterable[str], done: Iterable[str]
) -> List[str]:
    """Users in the room who have neither spoken up nor been skipped."""
    heard = set(pending) | set(done)
    return sorted(u for u in set(present) if u not in heard)


class MeetingSession(Watcher):
    module_name = "meeting"
    module_commands = ["status", "rollcall", "next", "skip", "bump", "breakout", "done"]

    def __init__(
        self,
        bot: "RoomBot",
        timer: Optional[ReminderTimer] = None,
        rollcall_reminder: float = ROLLCALL_REMINDER_SECONDS,
        turn_reminder: float = TURN_REMINDER_SECONDS,
    ):
        super().__init__(bot)
        self.timer = timer if timer is not None else ReminderTimer()
        self.rollcall_reminder = rollcall_reminder
        self.turn_reminder = turn_reminder

        self.state = State.NONE
        self.chair = ""
        self.current = ""
        self.pending: List[str] = []
        self.done: Set[str] = set()
        self.breakouts: List[str] = []

    # ───────────────────────────────────────────────────────────
    # Watcher interface
    # ───────────────────────────────────────────────────────────
    def handle_message(self, user: str, text: str) -> None:
        self.observe_activity(user)

    def handle_command(self, cmd: CommandArgs) -> None:
        if cmd.command == "status":
            self.status()
        elif cmd.command == "rollcall":
            self.start_roll_call(cmd.user)
        elif cmd.command == "next":
            self.advance(cmd.user)
        elif cmd.command == "skip":
            self.skip(cmd.user, cmd.args)
        elif cmd.command == "bump":
            self.bump(cmd.user, cmd.args)
        elif cmd.command == "breakout":
            if not cmd.args:
                self.message(f"Usage: {self.display_command()} breakout <text>")
            else:
                self.register_breakout(" ".join(cmd.args))
        elif cmd.command == "done":
            self.force_end(cmd.user)
        else:
            self.usage()

    # ───────────────────────────────────────────────────────────
    # Transitions
    # ───────────────────────────────────────────────────────────
    def start_roll_call(self, initiator: str) -> None:
        if self.state != State.NONE:
            self.short_status()
            return

        self._enable_logging(initiator, True)
        self.state = State.ROLLCALL
        self.breakouts.clear()
        self.done.clear()
        self.pending = [initiator]
        self.chair = initiator
        self.current = ""
        logger.info(f"Roll-call started by {initiator}")

        self.short_status()
        self.message(
            ["Hello @room, this is the roll-call!"] + sorted(self.bot.room.present_users())
        )
        self.timer.arm(self.rollcall_reminder, self.on_timeout)

    def observe_activity(self, sender: str) -> None:
        if self.state == State.NONE:
            return
        if sender not in self.done and sender not in self.pending:
            self.pending.append(sender)
            # Keep the chair at the end
            if self.chair in self.pending:
                self.pending.remove(self.chair)
                self.pending.append(self.chair)
        if self.state == State.IN_PROGRESS and sender == self.current:
            self.timer.cancel()

    def advance(self, requester: str) -> None:
        if not self._may_steer(requester):
            return

        if self.state == State.ROLLCALL:
            self.state = State.IN_PROGRESS
            self.done.clear()
            logger.info(f"Meeting in progress with {len(self.pending)} participants")
            self.status()

        if not self.pending:
            self._finish(requester)
            return

        self.current = self.pending.pop(0)
        self.done.add(self.current)
        if self.pending:
            self.message(f"{self.current}, you're up (after that, {self.pending[0]}).")
            self.timer.arm(self.turn_reminder, self.on_timeout)
        else:
            self.message(f"{self.current}, you're up (after that, we're done!).")
            self._finish(requester)

    def skip(self, requester: str, tokens: Iterable[str]) -> None:
        if not self._may_steer(requester):
            return
        for token in tokens:
            user = self.bot.room.resolve(token)
            if not user:
                logger.debug(f"skip: could not resolve {token!r}")
                continue
            if user in self.pending:
                self.pending.remove(user)
            self.done.add(user)
            self.message(f"User {user} will be skipped this meeting.")

    def bump(self, requester: str, tokens: Iterable[str]) -> None:
        if not self._may_steer(requester):
            return
        for token in tokens:
            user = self.bot.room.resolve(token)
            if not user:
                logger.debug(f"bump: could not resolve {token!r}")
                continue
            if user in self.pending:
                self.pending.remove(user)
            self.done.discard(user)
            self.pending.insert(0, user)
            self.message(f"User {user} is up next.")

    def register_breakout(self, note: str) -> None:
        if self.state != State.IN_PROGRESS:
            self.short_status()
            return
        self.breakouts.append(note)
        self.message(f"Registered breakout '{note}'.")

    def force_end(self, requester: str) -> None:
        if not self.bot.room.is_operator(requester):
            return
        was_running = self.state != State.NONE
        self._reset()
        if was_running:
            self._enable_logging(requester, False)
        logger.info(f"Meeting forcefully ended by {requester}")
        self.message("The meeting has been forcefully ended.")

    def on_timeout(self) -> None:
        if self.state == State.ROLLCALL:
            missing = non_responders(self.bot.room.present_users(), self.pending, self.done)
            if missing:
                self.message(["Roll-call for"] + missing)
        elif self.state == State.IN_PROGRESS and self.current:
            self.message([self.current, "are you with us?"])

    # ───────────────────────────────────────────────────────────
    # Reporting
    # ───────────────────────────────────────────────────────────
    def short_status(self) -> None:
        if self.state == State.NONE:
            self.message("No meeting in progress.")
        elif self.state == State.ROLLCALL:
            self.message("Doing the rollcall.")
        else:
            self.message("Meeting in progress.")

    def status(self) -> None:
        self.short_status()
        if self.state != State.NONE:
            self.message(f"There are {len(self.pending)} participants.")

    # ───────────────────────────────────────────────────────────
    # Helpers
    # ───────────────────────────────────────────────────────────
    def _may_steer(self, requester: str) -> bool:
        if self.state not in (State.ROLLCALL, State.IN_PROGRESS):
            self.short_status()
            return False
        if requester == self.chair or self.bot.room.is_operator(requester):
            return True
        logger.debug(f"Ignoring meeting command from {requester} (not the chair)")
        return False

    def _finish(self, requester: str) -> None:
        breakouts = list(self.breakouts)
        self._reset()
        logger.info("Meeting ended")
        self.message("The meeting has ended.")
        for b in breakouts:
            self.message(f"Breakout: {b}")
        self._enable_logging(requester, False)

    def _reset(self) -> None:
        self.timer.cancel()
        self.state = State.NONE
        self.chair = ""
        self.current = ""
        self.pending = []
        self.done = set()
        self.breakouts = []

    def _enable_logging(self, user: str, enabled: bool) -> None:
        if self.bot.room.is_operator(user, silent=True):
            self.bot.set_logging(session_label(), enabled)
