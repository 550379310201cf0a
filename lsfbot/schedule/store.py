import asyncio
import logging
from typing import Callable

from lsfbot.schedule.models import Schedule

logger = logging.getLogger(__name__)


class ScheduleStore:
    """
    Holds the current schedule snapshot.

    Readers call snapshot() and iterate the returned object without any lock;
    a refresh builds a complete new Schedule and publishes it in one assignment.
    Refreshes are serialised so there is only ever one writer.
    """

    def __init__(self, schedule: Schedule | None = None):
        self._schedule = schedule if schedule is not None else Schedule()
        self._refresh_lock = asyncio.Lock()

    def snapshot(self) -> Schedule:
        return self._schedule

    def publish(self, schedule: Schedule) -> None:
        self._schedule = schedule
        logger.info("Published schedule snapshot with %d courses", len(schedule))

    @property
    def refreshing(self) -> bool:
        return self._refresh_lock.locked()

    async def refresh(self, extract: Callable[[], Schedule]) -> Schedule:
        """
        Run a blocking extraction in a worker thread and publish its result.
        Errors propagate to the caller; the previous snapshot stays in place.
        """
        async with self._refresh_lock:
            schedule = await asyncio.to_thread(extract)
            self.publish(schedule)
            return schedule


schedule_store = ScheduleStore()
