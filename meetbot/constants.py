"""
constants.py  —  MeetBot
Reminder delays and command prefix from config.yaml, secrets from the env.
"""

from dotenv import load_dotenv
import os
from typing import List

from meetbot.base import Config, load_config
from meetbot.utils import parse_id_list

load_dotenv()

# ───────────────────────────────────────────────────────────────
# Load settings from config.yaml
# ───────────────────────────────────────────────────────────────
SCRIPT_DIR = os.path.dirname(os.path.realpath(__file__))
CONFIG: Config = load_config(os.path.join(SCRIPT_DIR, "config.yaml"))

BOT_NAME       = CONFIG.name
COMMAND_PREFIX = CONFIG.command_prefix

ROLLCALL_REMINDER_SECONDS = CONFIG.rollcall_reminder_seconds
TURN_REMINDER_SECONDS     = CONFIG.turn_reminder_seconds

# ───────────────────────────────────────────────────────────────
# Environment variables
# ───────────────────────────────────────────────────────────────
DISCORD_BOT_TOKEN = os.environ["DISCORD_BOT_TOKEN"]

ALLOWED_SERVER_IDS: List[int] = parse_id_list(os.environ["ALLOWED_SERVER_IDS"])

# Users who may steer any meeting and toggle notes (besides server admins)
OPERATOR_IDS: List[int] = parse_id_list(os.getenv("OPERATOR_IDS"))

# Empty means every text channel in an allowed server
MEETING_CHANNEL_IDS: List[int] = parse_id_list(os.getenv("MEETING_CHANNEL_IDS"))

NOTES_DIR = os.getenv("NOTES_DIR", CONFIG.notes_dir)
