import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from lsfbot.config import settings as env_settings
from lsfbot.errors import PersistenceError
from lsfbot.schedule.store import schedule_store
from lsfbot.services.date_service import get_local_now
from lsfbot.services.reminders import CYCLE, due_notifications
from lsfbot.services.sender import send_notification
from lsfbot.subscribers.store import subscriber_store

scheduler = AsyncIOScheduler()

REMINDER_JOB_ID = "reminder_cycle"
# Cycles run half a minute off the minute grid. Sessions start and end on
# whole minutes, so a cycle never lands exactly on an open window bound.
CYCLE_OFFSET = timedelta(seconds=30)


def init_scheduler(timezone: str = "Europe/Berlin"):
    """
    Initialize the scheduler configuration.
    """
    if not scheduler.running:
        scheduler.configure(timezone=timezone)


def first_cycle_at(now: datetime) -> datetime:
    """The next instant on the half-minute offset grid, at or after `now`."""
    aligned = now.replace(second=0, microsecond=0) + CYCLE_OFFSET
    if aligned < now:
        aligned += timedelta(minutes=1)
    return aligned


async def run_reminder_cycle(now: Optional[datetime] = None, bot=None) -> int:
    """
    One pass of the reminder loop. Returns the number of delivered messages.
    """
    try:
        await asyncio.to_thread(subscriber_store.reload)
    except PersistenceError:
        logging.exception("Subscriber reload failed; using the last loaded records.")

    schedule = schedule_store.snapshot()
    subscribers = subscriber_store.list()
    now = now or get_local_now(env_settings.TZ)

    notifications = due_notifications(schedule, subscribers, now, env_settings.TZ)
    logging.debug(
        "Reminder cycle at %s: %d course(s), %d subscriber(s), %d notification(s) due",
        now.isoformat(),
        len(schedule),
        len(subscribers),
        len(notifications),
    )
    if not notifications:
        return 0

    if bot is None:
        # Lazy import to avoid a circular import with the bot dispatcher.
        from lsfbot.bot.dispatcher import bot

    delivered = 0
    for notification in notifications:
        if await send_notification(bot, notification):
            delivered += 1
    if delivered != len(notifications):
        logging.warning("Reminder cycle delivered %d of %d notification(s).", delivered, len(notifications))
    return delivered


def ensure_reminder_job() -> None:
    scheduler.add_job(
        run_reminder_cycle,
        IntervalTrigger(
            seconds=int(CYCLE.total_seconds()),
            start_date=first_cycle_at(get_local_now(env_settings.TZ)),
        ),
        id=REMINDER_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )


def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
