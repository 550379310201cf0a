import logging

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError

from lsfbot.config import settings as env_settings
from lsfbot.errors import DeliveryError
from lsfbot.services.message_builder import ParseMode, build_session_message
from lsfbot.services.reminders import DirectTarget, GroupTarget, Notification, NotificationTarget

logger = logging.getLogger(__name__)


def _format_send_error(exc: Exception) -> str:
    detail = (str(exc) or "").strip() or repr(exc)
    if isinstance(exc, TelegramForbiddenError):
        return f"forbidden: {detail}"
    if isinstance(exc, TelegramBadRequest):
        return f"bad_request: {detail}"
    return detail


async def resolve_chat_id(bot: Bot, target: NotificationTarget) -> int:
    """
    Map a notification target to a Telegram chat id.

    Group chats come from configuration. Private chats are looked up on every
    call; a user who blocked the bot or never started it fails here.
    """
    if isinstance(target, GroupTarget):
        chat_id = env_settings.group_chat_ids().get(target.group)
        if chat_id is None:
            raise DeliveryError(f"No chat configured for {target.group.display_name}")
        return chat_id
    if isinstance(target, DirectTarget):
        try:
            chat = await bot.get_chat(target.subscriber_id)
        except Exception as exc:
            raise DeliveryError(
                f"Failed to open private chat with user {target.subscriber_id}: {_format_send_error(exc)}"
            ) from exc
        return chat.id
    raise DeliveryError(f"Unsupported notification target {target!r}")


async def send_notification(bot: Bot, notification: Notification) -> bool:
    """
    Deliver one notification, best effort.
    Returns False on any failure; failures are logged and never raised.
    """
    try:
        chat_id = await resolve_chat_id(bot, notification.target)
    except DeliveryError as exc:
        logger.error("Dropping reminder for %s: %s", notification.course.title, exc)
        return False

    text = build_session_message(
        notification.course,
        notification.session,
        env_settings.TZ,
        env_settings.online_link,
        lead_in=notification.lead_in,
    )
    try:
        await bot.send_message(chat_id=chat_id, text=text, parse_mode=ParseMode.HTML)
    except Exception as exc:
        logger.error("Failed to send reminder message to chat_id=%s: %s", chat_id, _format_send_error(exc))
        return False

    logger.info("Sent reminder message to chat_id=%s (%s)", chat_id, notification.course.title)
    return True
