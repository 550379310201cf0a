import html
import logging
from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from lsfbot.bot.chat_access import detect_group
from lsfbot.errors import PersistenceError
from lsfbot.services.message_builder import format_error
from lsfbot.subscribers.store import (
    DEFAULT_LEAD_TIME_MINUTES,
    SubscriberPreference,
    subscriber_store,
)

router = Router()
router.message.filter(F.chat.type == "private")

MIN_LEAD_TIME = 5
MAX_LEAD_TIME = 24 * 60
NOT_FOUND_TEXT = "Error: User not found (direct messages can be enabled with /enable)"
SET_USAGE_TEXT = html.escape("Usage: /set send-before <minutes|off> or /set send-after-previous <on|off>")


def _arguments(message: Message) -> list[str]:
    return (message.text or "").split()[1:]


def _parse_lead_time(value: str) -> Optional[int]:
    """'off' -> None, a number of minutes -> int; ValueError otherwise."""
    if value == "off":
        return None
    minutes = int(value)
    if not MIN_LEAD_TIME <= minutes <= MAX_LEAD_TIME:
        raise ValueError(value)
    return minutes


def _parse_switch(value: str) -> bool:
    if value == "on":
        return True
    if value == "off":
        return False
    raise ValueError(value)


@router.message(Command("enable"))
async def enable(message: Message) -> None:
    user_id = message.from_user.id
    group = None
    if subscriber_store.get(user_id) is None:
        # Assigned once, on first contact.
        group = await detect_group(message.bot, user_id)

    def mutate(current: Optional[SubscriberPreference]) -> SubscriberPreference:
        if current is not None:
            return current.model_copy(update={"enabled": True})
        return SubscriberPreference(
            id=user_id,
            group=group,
            enabled=True,
            lead_time=DEFAULT_LEAD_TIME_MINUTES,
            follow_previous=False,
        )

    try:
        subscriber_store.upsert(user_id, mutate)
    except PersistenceError as exc:
        logging.error("Failed to enable direct messages for user %s: %s", user_id, exc)
        await message.reply(format_error(exc))
        return
    await message.reply("Enabled direct messages")


@router.message(Command("disable"))
async def disable(message: Message) -> None:
    user_id = message.from_user.id
    try:
        subscriber_store.upsert(
            user_id,
            lambda current: current.model_copy(update={"enabled": False}) if current else None,
        )
    except PersistenceError as exc:
        await message.reply(format_error(exc))
        return
    await message.reply("Disabled direct messages")


@router.message(Command("remove"))
async def remove(message: Message) -> None:
    try:
        subscriber_store.remove(message.from_user.id)
    except PersistenceError as exc:
        await message.reply(format_error(exc))
        return
    await message.reply("Disabled direct messages and removed configuration")


@router.message(Command("set"))
async def set_option(message: Message) -> None:
    user_id = message.from_user.id
    args = _arguments(message)
    if len(args) != 2:
        await message.reply(SET_USAGE_TEXT)
        return
    option, value = args

    if option == "send-before":
        try:
            update = {"lead_time": _parse_lead_time(value)}
        except ValueError:
            await message.reply(
                f"Error: Unknown value `{html.escape(value)}` (available values: {MIN_LEAD_TIME}-{MAX_LEAD_TIME}, `off`)"
            )
            return
    elif option == "send-after-previous":
        try:
            update = {"follow_previous": _parse_switch(value)}
        except ValueError:
            await message.reply(f"Error: Unknown value `{html.escape(value)}` (available values: `on`, `off`)")
            return
    else:
        await message.reply(f"Error: Unknown subcommand `{html.escape(option)}`")
        return

    if subscriber_store.get(user_id) is None:
        await message.reply(NOT_FOUND_TEXT)
        return
    try:
        subscriber_store.upsert(
            user_id,
            lambda current: current.model_copy(update=update) if current else None,
        )
    except PersistenceError as exc:
        await message.reply(format_error(exc))
        return
    await message.reply(f"Set `{option}` to `{value}`")


@router.message(Command("get"))
async def get_options(message: Message) -> None:
    record = subscriber_store.get(message.from_user.id)
    if record is None:
        await message.reply(NOT_FOUND_TEXT)
        return
    send_before = f"{record.lead_time}min" if record.lead_time is not None else "off"
    group = record.group.display_name if record.group else "-"
    await message.answer(
        "Configuration\n"
        f"enabled: {'on' if record.enabled else 'off'}\n"
        f"group: {group}\n"
        f"send-before: {send_before}\n"
        f"send-after-previous: {'on' if record.follow_previous else 'off'}"
    )
