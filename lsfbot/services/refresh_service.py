import logging
from functools import partial

from lsfbot.config import settings as env_settings
from lsfbot.lsf.extractor import extract
from lsfbot.lsf.fetcher import fetch_page
from lsfbot.schedule.models import Schedule
from lsfbot.schedule.store import ScheduleStore, schedule_store

logger = logging.getLogger(__name__)


def build_extractor():
    """Bind the configured sources and fetch options into a blocking callable."""
    fetch = partial(
        fetch_page,
        timeout=env_settings.FETCH_TIMEOUT_SECONDS,
        verify_tls=env_settings.LSF_VERIFY_TLS,
    )
    return partial(
        extract,
        env_settings.sources(),
        fetch=fetch,
        tz=env_settings.TZ,
        delay=env_settings.FETCH_DELAY_SECONDS,
    )


async def refresh_schedule(store: ScheduleStore = schedule_store) -> Schedule:
    """
    Re-scrape the portal and publish the result.

    Raises the extraction error when the run fails; the schedule that was
    current before stays published.
    """
    if not env_settings.sources():
        logger.warning("No timetable sources configured; publishing an empty schedule.")

    logger.info("Schedule refresh started")
    try:
        schedule = await store.refresh(build_extractor())
    except Exception:
        logger.exception("Schedule refresh failed; keeping the previous snapshot (%d courses).", len(store.snapshot()))
        raise

    logger.info("Schedule refresh completed (courses=%d).", len(schedule))
    return schedule
