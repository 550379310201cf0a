import asyncio
import logging

from aiogram.exceptions import TelegramNetworkError
from aiogram.types import BotCommandScopeAllGroupChats, BotCommandScopeAllPrivateChats, BotCommandScopeDefault

from lsfbot.logging_setup import setup_logging
from lsfbot.config import settings as env_settings
from lsfbot.schedule.models import Group
from lsfbot.bot.commands import GROUP_COMMANDS, PRIVATE_COMMANDS, as_bot_commands
from lsfbot.services.refresh_service import refresh_schedule
from lsfbot.services.scheduler_service import ensure_reminder_job, init_scheduler, scheduler, shutdown_scheduler
from lsfbot.subscribers.store import subscriber_store
from lsfbot.bot.dispatcher import bot, dp

async def main():
    # 1. Setup Logging
    setup_logging(env_settings.LOG_PATH)
    logging.info("Initializing Bot...")

    # 2. Verify bot token
    try:
        bot_info = await bot.get_me()
        logging.info(f"Bot verified: @{bot_info.username} (id={bot_info.id})")
    except TelegramNetworkError as e:
        logging.error(f"Failed to verify bot token due to network error: {e}")
        logging.error("If api.telegram.org is blocked, set TELEGRAM_PROXY in .env.")
    except Exception as e:
        logging.error(f"Failed to verify bot token: {e}")
        logging.error("Please check your BOT_TOKEN in .env file")
        raise

    # 3. Load subscribers
    subscriber_store.reload()
    logging.info("Loaded subscribers=%d from %s", len(subscriber_store.list()), subscriber_store.path)
    configured = env_settings.group_chat_ids()
    missing_groups = [group.display_name for group in Group if group not in configured]
    if missing_groups:
        logging.warning("Group reminders disabled for unset chats: %s", ", ".join(missing_groups))

    # 4. Initial timetable fetch; without it there is nothing to remind about.
    await refresh_schedule()

    # 5. Set bot commands (shows up in UI)
    try:
        await bot.set_my_commands(as_bot_commands(GROUP_COMMANDS), scope=BotCommandScopeDefault())
        await bot.set_my_commands(as_bot_commands(GROUP_COMMANDS), scope=BotCommandScopeAllGroupChats())
        await bot.set_my_commands(as_bot_commands(PRIVATE_COMMANDS), scope=BotCommandScopeAllPrivateChats())
        logging.info("Bot commands updated.")
    except Exception:
        logging.exception("Failed to set bot commands.")

    # 6. Init Scheduler and the reminder cycle
    init_scheduler(timezone=env_settings.TZ)
    ensure_reminder_job()
    scheduler.start()

    # 7. Start Polling
    logging.info("Starting polling...")
    try:
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        shutdown_scheduler()
        await bot.session.close()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Bot stopped by user!")
    except SystemExit:
        logging.info("Bot stopped!")
    except Exception as e:
        logging.error(f"Fatal error: {e}", exc_info=True)
        raise
