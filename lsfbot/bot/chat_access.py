from typing import Optional

from aiogram import Bot

from lsfbot.config import settings as env_settings
from lsfbot.schedule.models import Group


async def is_user_chat_member(bot: Bot, chat_id: int, user_id: int) -> bool:
    try:
        member = await bot.get_chat_member(chat_id, user_id)
    except Exception:
        return False

    status = getattr(member, "status", None)
    if status in ("left", "kicked"):
        return False
    if getattr(member, "is_member", True) is False:
        return False
    return True


async def detect_group(bot: Bot, user_id: int) -> Optional[Group]:
    """First configured group chat the user belongs to, in group order."""
    for group, chat_id in env_settings.group_chat_ids().items():
        if await is_user_chat_member(bot, chat_id, user_id):
            return group
    return None
