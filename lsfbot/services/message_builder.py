import html
from datetime import date, datetime
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from lsfbot.schedule.models import Course, CourseKind, Session

class ParseMode:
    HTML = "HTML"

WEEKDAYS = {
    0: "Montag",
    1: "Dienstag",
    2: "Mittwoch",
    3: "Donnerstag",
    4: "Freitag",
    5: "Samstag",
    6: "Sonntag",
}

NO_SESSIONS_TEXT = "Keine Lehrveranstaltungen am {date}"

LinkResolver = Callable[[CourseKind, bool], Optional[str]]


def _no_links(kind: CourseKind, grouped: bool) -> Optional[str]:
    return None


def format_session_time(session: Session, tz: str) -> str:
    zone = ZoneInfo(tz)
    start = session.start.astimezone(zone)
    end = session.end.astimezone(zone)
    weekday_name = WEEKDAYS.get(start.weekday(), start.strftime("%A"))
    return f"{weekday_name} {start.strftime('%H:%M')} - {end.strftime('%H:%M')}"


def build_session_message(
    course: Course,
    session: Session,
    tz: str,
    online_link: LinkResolver = _no_links,
    lead_in: Optional[str] = None,
) -> str:
    """
    Builds the reminder/listing text for one session.
    Format example (Telegram render):
    in 10 minutes
    🟦 Mathematik 1 (Gruppe 2)
    Montag 10:00 - 11:30
    Online: https://...
    Raum: F-033
    Bemerkung: Übung
    """
    lines: list[str] = []
    if lead_in:
        lines.append(html.escape(lead_in))
    lines.append(f"{course.kind.color} <b>{html.escape(course.title)}</b>")
    lines.append(html.escape(format_session_time(session, tz)))

    link = online_link(course.kind, course.group is not None)
    if link:
        lines.append(f"Online: {html.escape(link)}")
    if course.room:
        lines.append(f"Raum: {html.escape(course.room)}")
    if course.note:
        lines.append(f"Bemerkung: {html.escape(course.note)}")
    return "\n".join(lines)


def build_day_listing(
    target_date: date,
    entries: Sequence[tuple[Course, Session]],
    tz: str,
    online_link: LinkResolver = _no_links,
) -> str:
    if not entries:
        return NO_SESSIONS_TEXT.format(date=target_date.strftime("%d.%m.%Y"))
    weekday_name = WEEKDAYS.get(target_date.weekday(), target_date.strftime("%A"))
    header = f"📅 {target_date.strftime('%d.%m.%Y')} {weekday_name}"
    blocks = [build_session_message(course, session, tz, online_link) for course, session in entries]
    return (header + "\n\n" + "\n\n".join(blocks)).strip()


def format_error(exc: Exception) -> str:
    """Error reply for chats; bot replies are parsed as HTML."""
    return f"Error: {html.escape(str(exc))}"


def format_fetched_at(value: Optional[datetime], tz: str) -> str:
    if value is None:
        return "—"
    return value.astimezone(ZoneInfo(tz)).strftime("%d.%m.%Y %H:%M")


def split_telegram(text: str, limit: int = 4096) -> list[str]:
    """
    Splits text into chunks of at most `limit` characters,
    preferring to split at line breaks.
    """
    if len(text) <= limit:
        return [text]

    chunks = []
    current_chunk = ""

    for line in text.splitlines(keepends=True):
        if len(current_chunk) + len(line) > limit:
            if current_chunk:
                chunks.append(current_chunk)
                current_chunk = ""

            # A single line longer than the limit has to be hard split.
            while len(line) > limit:
                chunks.append(line[:limit])
                line = line[limit:]
            current_chunk = line
        else:
            current_chunk += line

    if current_chunk:
        chunks.append(current_chunk)

    return chunks
