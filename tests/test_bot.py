"""
Tests for meetbot.bot / meetbot.watchers — command routing across modules.
"""
import re
from datetime import timezone

from meetbot.base import CommandArgs
from meetbot.meetings.fsm import State


def test_parse_command():
    cmd = CommandArgs.parse("!meeting skip bob  carol", "alice", "ev1")
    assert cmd == CommandArgs(user="alice", id="ev1", command="meeting", args=["skip", "bob", "carol"])
    assert cmd.pop().command == "skip"
    assert cmd.args == ["bob", "carol"]


def test_parse_ignores_plain_text():
    assert CommandArgs.parse("hello there", "alice", "ev1") is None
    assert CommandArgs.parse("!", "alice", "ev1") is None
    assert CommandArgs.parse("", "alice", "ev1") is None
    assert CommandArgs.parse("~status", "alice", "ev1", prefix="~").command == "status"


def test_modules_registered_in_order(bot):
    assert bot.watcher_names() == ["bot", "meeting", "log"]
    assert bot.get_watcher("meeting") is bot.meeting
    assert bot.get_watcher("nope") is None


def test_meeting_through_commands(bot, room):
    room.users = {"alice", "bob", "carol"}
    bot.handle_message("alice", "!meeting rollcall")
    bot.handle_message("bob", "morning")
    bot.handle_message("carol", "!meeting status")
    assert bot.meeting.pending == ["bob", "carol", "alice"]
    assert room.messages[-2:] == ["Doing the rollcall.", "There are 3 participants."]

    bot.handle_message("alice", "!meeting next")
    assert bot.meeting.current == "bob"
    bot.handle_message("alice", "!meeting breakout release  checklist")
    assert bot.meeting.breakouts == ["release checklist"]
    bot.handle_message("alice", "!meeting skip carol")
    bot.handle_message("alice", "!meeting next")
    assert bot.meeting.state == State.NONE
    assert room.messages[-1] == "Breakout: release checklist"


def test_done_command_needs_operator(bot, room):
    bot.handle_message("alice", "!meeting rollcall")
    bot.handle_message("alice", "!meeting done")
    assert bot.meeting.state == State.ROLLCALL
    bot.handle_message("olga", "!meeting done")
    assert bot.meeting.state == State.NONE


def test_meeting_usage(bot, room):
    bot.handle_message("alice", "!meeting")
    bot.handle_message("alice", "!meeting dance")
    usage = "Usage: !meeting <status|rollcall|next|skip|bump|breakout|done>"
    assert room.messages == [usage, usage]


def test_breakout_without_text(bot, room):
    bot.handle_message("alice", "!meeting breakout")
    assert room.messages == ["Usage: !meeting breakout <text>"]


def test_help(bot, room):
    bot.handle_message("alice", "!help")
    assert room.messages[0] == "The following modules are available: bot meeting log"

    room.clear()
    bot.handle_message("alice", "!help log")
    assert room.messages == ["Module log understands: on off status"]


def test_status_forwards_to_modules(bot, room):
    bot.handle_message("bob", "hi")
    bot.handle_message("alice", "!status")
    assert re.fullmatch(
        r"It is \d\d:\d\d:\d\d\. Your message was sent at \d\d:\d\d:\d\d\. \(Time UTC\) "
        r"I can see 4 people in the room\. I have processed 2 messages and 1 commands\.",
        room.messages[0],
    )
    assert room.messages[1:] == ["No meeting in progress.", "Logging is off."]
    assert bot.basic.last_message_time.tzinfo is timezone.utc


def test_unknown_command(bot, room):
    bot.handle_message("alice", "!frobnicate")
    assert room.messages == ["Usage: !<help|status|ops> or !<module> <command>"]


def test_failing_watcher_does_not_stop_others(bot, room, monkeypatch):
    def broken(user, text):
        raise RuntimeError("broken")

    monkeypatch.setattr(bot.basic, "handle_message", broken)
    bot.handle_message("alice", "!meeting rollcall")
    assert bot.meeting.state == State.ROLLCALL


# ───────────────────────────────────────────────────────────────
# Operators
# ───────────────────────────────────────────────────────────────
def test_ops_status(bot, room):
    bot.handle_message("bob", "!ops ?")
    assert room.messages == ["There are 1 operators. olga"]


def test_ops_add_lets_user_steer(bot, room):
    bot.handle_message("alice", "!meeting rollcall")
    bot.handle_message("olga", "!ops add bob")
    assert room.messages[-1] == "bob is now an operator"

    bot.handle_message("bob", "!meeting next")
    assert bot.meeting.state == State.IN_PROGRESS


def test_ops_remove(bot, room):
    bot.handle_message("olga", "!ops + bob carol")
    bot.handle_message("bob", "!ops deop carol")
    assert room.op_users == {"olga", "bob"}
    assert room.messages[-1] == "carol is no longer an operator"

    room.clear()
    bot.handle_message("olga", "!ops - carol")
    assert room.messages == ["Changing operator status of carol failed."]


def test_ops_unknown_user(bot, room):
    bot.handle_message("olga", "!ops add nobody dave")
    assert room.messages == [
        "Unrecognized user nobody when changing operators.",
        "dave is now an operator",
    ]


def test_ops_needs_operator(bot, room):
    bot.handle_message("bob", "!ops add bob")
    assert room.op_users == {"olga"}
    assert room.messages == ["bob, only bot operators can do that."]


def test_ops_usage(bot, room):
    bot.handle_message("olga", "!ops add")
    bot.handle_message("olga", "!ops")
    assert room.messages == [
        "Usage: !ops status",
        "Usage: !ops <add|op|+|remove|deop|-> <name..>",
    ] * 2
