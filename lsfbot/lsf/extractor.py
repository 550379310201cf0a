import logging
import time as time_module
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional
from zoneinfo import ZoneInfo

from lsfbot.errors import ParseError
from lsfbot.lsf.fetcher import fetch_page
from lsfbot.lsf.parser import (
    OverviewRow,
    parse_course_title,
    parse_group_caption,
    parse_overview,
    parse_time_range,
)
from lsfbot.schedule.models import Course, CourseKind, Group, Schedule, Session

logger = logging.getLogger(__name__)

ROOM_SEPARATOR = " & "
DEFAULT_DELAY_SECONDS = 2.0


def build_sessions(row: OverviewRow, tz: ZoneInfo) -> tuple[Session, ...]:
    start_time, end_time = parse_time_range(row.time_text)
    sessions = []
    for day in row.dates:
        start = datetime.combine(day, start_time, tzinfo=tz)
        end = datetime.combine(day, end_time, tzinfo=tz)
        try:
            sessions.append(Session(start=start, end=end))
        except ValueError as exc:
            raise ParseError(f"Invalid time range `{row.time_text}` on {day.isoformat()}: {exc}") from exc
    return tuple(sessions)


def merge_course(courses: List[Course], candidate: Course) -> None:
    """
    Append `candidate`, or fold it into an already collected course with the
    same kind, group and sessions by joining the rooms.
    """
    for index, existing in enumerate(courses):
        if existing.key != candidate.key:
            continue
        if candidate.room:
            room = f"{existing.room}{ROOM_SEPARATOR}{candidate.room}" if existing.room else candidate.room
            courses[index] = replace(existing, room=room)
        logger.debug("Merged duplicate entry for %s (room=%s)", candidate.title, courses[index].room)
        return
    courses.append(candidate)


def _extract_source(
    configured_kind: CourseKind,
    url: str,
    fetch: Callable[[str], str],
    tz: ZoneInfo,
    courses: List[Course],
) -> None:
    logger.info("Fetching course page for %s: %s", configured_kind.display_name, url)
    page = fetch(url)
    kind = parse_course_title(page)
    if kind is not configured_kind:
        logger.warning(
            "Page %s is configured as %s but titled %s; using the page title",
            url,
            configured_kind.display_name,
            kind.display_name,
        )

    for row in parse_overview(page, url):
        group: Optional[Group] = parse_group_caption(fetch(row.expand_url), row.table_index)
        sessions = build_sessions(row, tz)
        if not sessions:
            logger.warning("Found entry without any dates (%s, %s, %s)", kind.display_name, group, row.time_text)
        merge_course(
            courses,
            Course(kind=kind, group=group, sessions=sessions, room=row.room, note=row.note),
        )


def extract(
    sources: Iterable[tuple[CourseKind, str]],
    fetch: Callable[[str], str] = fetch_page,
    tz: str = "Europe/Berlin",
    delay: float = DEFAULT_DELAY_SECONDS,
    sleep: Callable[[float], None] = time_module.sleep,
) -> Schedule:
    """
    Fetch every configured course page and build a complete schedule.

    Any error aborts the whole run; callers never see a partial schedule.
    """
    zone = ZoneInfo(tz)
    courses: List[Course] = []
    sources = list(sources)
    logger.info("Fetching timetable from %d source(s)", len(sources))
    for position, (kind, url) in enumerate(sources):
        if position and delay > 0:
            sleep(delay)
        _extract_source(kind, url, fetch, zone, courses)
    logger.info("Successfully fetched timetable (%d courses)", len(courses))
    return Schedule(courses=tuple(courses), fetched_at=datetime.now(zone))
