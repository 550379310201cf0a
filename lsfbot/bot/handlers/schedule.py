import html
import logging
from datetime import timedelta
from typing import Optional

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from lsfbot.bot.chat_access import detect_group
from lsfbot.bot.commands import GROUP_COMMANDS, PRIVATE_COMMANDS
from lsfbot.config import settings as env_settings
from lsfbot.schedule.models import Group
from lsfbot.schedule.store import schedule_store
from lsfbot.services.date_service import get_local_now, parse_ddmmyyyy
from lsfbot.services.message_builder import (
    NO_SESSIONS_TEXT,
    ParseMode,
    build_day_listing,
    format_error,
    format_fetched_at,
    split_telegram,
)
from lsfbot.services.refresh_service import refresh_schedule
from lsfbot.subscribers.store import subscriber_store

router = Router()

LOOKAHEAD_DAYS = 7


def _command_argument(message: Message) -> Optional[str]:
    parts = (message.text or "").split(maxsplit=1)
    if len(parts) < 2:
        return None
    return parts[1].strip() or None


async def resolve_viewer_group(message: Message) -> Optional[Group]:
    """
    Group whose sessions the requester sees: the group of the chat when asked
    in one of the group chats, else the stored or detected membership.
    """
    chat_group = env_settings.group_for_chat(message.chat.id)
    if chat_group is not None:
        return chat_group
    user = message.from_user
    if not user:
        return None
    record = subscriber_store.get(user.id)
    if record is not None and record.group is not None:
        return record.group
    return await detect_group(message.bot, user.id)


async def _answer_chunks(message: Message, text: str) -> None:
    for chunk in split_telegram(text):
        await message.answer(chunk, parse_mode=ParseMode.HTML)


@router.message(Command("list"))
async def list_sessions(message: Message) -> None:
    tz = env_settings.TZ
    schedule = schedule_store.snapshot()
    group = await resolve_viewer_group(message)
    argument = _command_argument(message)

    if argument:
        try:
            target_date = parse_ddmmyyyy(argument)
        except ValueError:
            await message.reply("Error: Invalid date format (expected TT.MM.JJJJ)")
            return
        entries = schedule.sessions_on(target_date, tz, group)
        await _answer_chunks(message, build_day_listing(target_date, entries, tz, env_settings.online_link))
        return

    now = get_local_now(tz)
    for offset in range(LOOKAHEAD_DAYS):
        target_date = now.date() + timedelta(days=offset)
        entries = [
            (course, session)
            for course, session in schedule.sessions_on(target_date, tz, group)
            if session.start > now
        ]
        if entries:
            await _answer_chunks(message, build_day_listing(target_date, entries, tz, env_settings.online_link))
            return

    last_day = now.date() + timedelta(days=LOOKAHEAD_DAYS - 1)
    await message.answer(
        NO_SESSIONS_TEXT.format(date=f"{now.strftime('%d.%m.%Y')} - {last_day.strftime('%d.%m.%Y')}")
    )


@router.message(Command("update"))
async def update_schedule(message: Message) -> None:
    logging.info(
        "Received /update from user %s in chat %s",
        getattr(message.from_user, "id", None),
        message.chat.id,
    )
    try:
        schedule = await refresh_schedule()
    except Exception as exc:
        await message.reply(format_error(exc))
        return
    await message.reply(
        "Stundenplan wurde aktualisiert "
        f"({len(schedule)} Veranstaltungen, Stand {format_fetched_at(schedule.fetched_at, env_settings.TZ)})"
    )


@router.message(Command("help"))
async def help_command(message: Message) -> None:
    commands = PRIVATE_COMMANDS if message.chat.type == "private" else GROUP_COMMANDS
    lines = [f"/{name} - {html.escape(description)}" for name, description in commands.items()]
    await message.answer("\n".join(lines))
