# ───────────────────────────────────────────────────────────────
#  meetbot/main.py  —  MeetBot
# ───────────────────────────────────────────────────────────────
import asyncio
import logging
from typing import Dict, Set

import discord
from discord import Message as DiscordMessage

from meetbot.bot import RoomBot
from meetbot.constants import (
    ALLOWED_SERVER_IDS,
    BOT_NAME,
    COMMAND_PREFIX,
    DISCORD_BOT_TOKEN,
    MEETING_CHANNEL_IDS,
    NOTES_DIR,
    OPERATOR_IDS,
    ROLLCALL_REMINDER_SECONDS,
    TURN_REMINDER_SECONDS,
)
from meetbot.room import ChannelRoom
from meetbot.utils import identity_of, logger, should_block

logging.basicConfig(
    format="[%(asctime)s] [%(filename)s:%(lineno)d] %(message)s",
    level=logging.INFO,
)

# ───────────────────────────────────────────────────────────────
intents = discord.Intents.default()
intents.message_content = True
intents.members = True  # roll-call needs the channel roster

client = discord.Client(intents=intents)
room_bots: Dict[int, RoomBot] = {}
_pump_tasks: Set[asyncio.Task] = set()
# ───────────────────────────────────────────────────────────────
# Helpers
# ───────────────────────────────────────────────────────────────
def _room_bot_for(channel: discord.TextChannel) -> RoomBot:
    bot = room_bots.get(channel.id)
    if bot is None:
        room = ChannelRoom(channel, operator_ids=OPERATOR_IDS)
        task = asyncio.create_task(room.pump())
        _pump_tasks.add(task)
        task.add_done_callback(_pump_tasks.discard)
        bot = RoomBot(
            room,
            name=BOT_NAME,
            prefix=COMMAND_PREFIX,
            notes_dir=NOTES_DIR,
            rollcall_reminder=ROLLCALL_REMINDER_SECONDS,
            turn_reminder=TURN_REMINDER_SECONDS,
        )
        room_bots[channel.id] = bot
        logger.info(f"Watching #{channel.name} ({channel.id})")
    return bot

# ───────────────────────────────────────────────────────────────
@client.event
async def on_ready():
    logger.info(f"{BOT_NAME} logged in as {client.user}, command prefix {COMMAND_PREFIX!r}")

# ───────────────────────────────────────────────────────────────
# Every message in a watched channel goes to that room's modules
# ───────────────────────────────────────────────────────────────
@client.event
async def on_message(msg: DiscordMessage):
    try:
        if msg.author == client.user or msg.author.bot:
            return
        if not isinstance(msg.channel, discord.TextChannel):
            return
        if should_block(msg.guild, ALLOWED_SERVER_IDS):
            return
        if MEETING_CHANNEL_IDS and msg.channel.id not in MEETING_CHANNEL_IDS:
            return

        bot = _room_bot_for(msg.channel)
        bot.handle_message(identity_of(msg.author), msg.content, str(msg.id))

    except Exception as exc:
        logger.exception(exc)

# ───────────────────────────────────────────────────────────────
def run():
    client.run(DISCORD_BOT_TOKEN)


if __name__ == "__main__":
    run()
