"""
Parse timetable pages of the LSF portal (HIS "Einzelansicht" of a course).

Page structure the parser relies on:
- the course name is the ``h1`` inside the page form, suffixed " - Einzelansicht";
- every schedule context is a ``table`` with the overview summary attribute;
  after a header row its rows come in pairs: a summary row (time range, room,
  remark, link to the expanded view) followed by a detail row listing dates;
- the expanded view repeats the tables, each with a ``caption.t_capt`` naming
  the group ("Termine Gruppe: Gruppe 2" or "[unbenannt]").
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from lsfbot.errors import MarkupError, ParseError
from lsfbot.schedule.models import CourseKind, Group, parse_course_kind, parse_group

TITLE_SELECTOR = "div > form > h1"
TITLE_SUFFIX = " - Einzelansicht"
TABLE_SELECTOR = "table[summary='Übersicht über alle Veranstaltungstermine']"
EXPAND_LINK_SELECTOR = "td:first-child > a:first-child"
TIME_SELECTOR = "td:nth-child(3)"
ROOM_SELECTOR = "td:nth-child(6) > a"
NOTE_SELECTOR = "td:nth-child(10)"
DATES_SELECTOR = "td > div > ul > li"
CAPTION_SELECTOR = "caption.t_capt"
CAPTION_PREFIX = "Termine Gruppe: "
UNNAMED_GROUP = "[unbenannt]"


@dataclass
class OverviewRow:
    table_index: int
    expand_url: str
    time_text: str
    room: Optional[str] = None
    note: Optional[str] = None
    dates: List[date] = field(default_factory=list)


def _soup(html_text: str) -> BeautifulSoup:
    return BeautifulSoup(html_text, "html.parser")


def _normalize_space(text: str) -> str:
    return text.replace("&nbsp;", " ").replace("\xa0", " ").strip()


def _optional_text(node: Optional[Tag]) -> Optional[str]:
    if node is None:
        return None
    text = _normalize_space(node.get_text())
    return text or None


def parse_course_title(html_text: str) -> CourseKind:
    node = _soup(html_text).select_one(TITLE_SELECTOR)
    if node is None:
        raise MarkupError(TITLE_SELECTOR)
    name = _normalize_space(node.get_text())
    if name.endswith(TITLE_SUFFIX):
        name = name[: -len(TITLE_SUFFIX)].rstrip()
    return parse_course_kind(name)


def parse_time_range(text: str) -> tuple[time, time]:
    """Parse '08:00 bis 09:30' into start and end time of day."""
    parts = _normalize_space(text).split(" bis ")
    if len(parts) != 2:
        raise ParseError(f"Malformed time range `{text.strip()}`")
    try:
        start = datetime.strptime(parts[0].strip(), "%H:%M").time()
        end = datetime.strptime(parts[1].strip(), "%H:%M").time()
    except ValueError as exc:
        raise ParseError(f"Malformed time range `{text.strip()}`") from exc
    return start, end


def parse_date(text: str) -> date:
    raw = _normalize_space(text)
    try:
        return datetime.strptime(raw, "%d.%m.%Y").date()
    except ValueError as exc:
        raise ParseError(f"Malformed date `{raw}`") from exc


def _parse_summary_row(row: Tag, table_index: int, base_url: str) -> OverviewRow:
    link = row.select_one(EXPAND_LINK_SELECTOR)
    if link is None:
        raise MarkupError(EXPAND_LINK_SELECTOR, base_url)
    href = link.get("href")
    if not href:
        raise MarkupError(f"{EXPAND_LINK_SELECTOR}[href]", base_url)

    time_cell = row.select_one(TIME_SELECTOR)
    if time_cell is None:
        raise MarkupError(TIME_SELECTOR, base_url)

    return OverviewRow(
        table_index=table_index,
        expand_url=urljoin(base_url, href),
        time_text=_normalize_space(time_cell.get_text()),
        room=_optional_text(row.select_one(ROOM_SELECTOR)),
        note=_optional_text(row.select_one(NOTE_SELECTOR)),
    )


def _parse_detail_row(row: Tag) -> List[date]:
    dates = []
    for item in row.select(DATES_SELECTOR):
        # Only the leading text node holds the date; later nodes are annotations.
        first = next(item.stripped_strings, None)
        if first is None:
            raise ParseError("Empty date entry")
        dates.append(parse_date(first))
    return dates


def _data_rows(table: Tag) -> List[Tag]:
    # html.parser does not synthesise <tbody>, so collect the table's own rows
    # whether or not the markup has one, and drop the header row.
    rows = [row for row in table.find_all("tr") if row.find_parent("table") is table]
    return rows[1:]


def parse_overview(html_text: str, base_url: str = "") -> List[OverviewRow]:
    soup = _soup(html_text)
    rows: List[OverviewRow] = []
    for table_index, table in enumerate(soup.select(TABLE_SELECTOR)):
        table_rows = _data_rows(table)
        for position in range(0, len(table_rows), 2):
            summary = _parse_summary_row(table_rows[position], table_index, base_url)
            if position + 1 >= len(table_rows):
                raise MarkupError(f"tr (dates of row {position + 1})", base_url)
            summary.dates = _parse_detail_row(table_rows[position + 1])
            rows.append(summary)
    return rows


def parse_group_caption(html_text: str, table_index: int) -> Optional[Group]:
    tables = _soup(html_text).select(TABLE_SELECTOR)
    if table_index >= len(tables):
        raise MarkupError(f"{TABLE_SELECTOR} #{table_index + 1}")
    caption = tables[table_index].select_one(CAPTION_SELECTOR)
    if caption is None:
        raise MarkupError(CAPTION_SELECTOR)
    text = next(caption.stripped_strings, None)
    if text is None:
        raise MarkupError(f"{CAPTION_SELECTOR} text")
    if text.startswith(CAPTION_PREFIX):
        text = text[len(CAPTION_PREFIX):].strip()
    if text == UNNAMED_GROUP:
        return None
    return parse_group(_normalize_space(text))
