from datetime import date, time

import pytest

from lsf_pages import course_page, detail_row, expanded_page, overview_table, summary_row
from lsfbot.errors import MarkupError, ParseError, UnknownCourseName, UnknownGroupName
from lsfbot.lsf.parser import (
    parse_course_title,
    parse_date,
    parse_group_caption,
    parse_overview,
    parse_time_range,
)
from lsfbot.schedule.models import CourseKind, Group


class TestParseTimeRange:
    def test_plain(self):
        assert parse_time_range("08:00 bis 09:30") == (time(8, 0), time(9, 30))

    def test_non_breaking_spaces(self):
        assert parse_time_range("08:00\xa0bis\xa009:30") == (time(8, 0), time(9, 30))
        assert parse_time_range(" 08:00&nbsp;bis&nbsp;09:30 ") == (time(8, 0), time(9, 30))

    def test_missing_separator(self):
        with pytest.raises(ParseError):
            parse_time_range("08:00 - 09:30")

    def test_bad_clock(self):
        with pytest.raises(ParseError):
            parse_time_range("8 Uhr bis 09:30")


class TestParseDate:
    def test_valid(self):
        assert parse_date(" 19.10.2026 ") == date(2026, 10, 19)

    def test_invalid(self):
        with pytest.raises(ParseError):
            parse_date("2026-10-19")


def test_course_title_strips_suffix():
    page = course_page("AIN1 Digitaltechnik", [])
    assert parse_course_title(page) is CourseKind.DIGITALTECHNIK


def test_course_title_unknown_name():
    page = course_page("AIN1 Analysis 2", [])
    with pytest.raises(UnknownCourseName):
        parse_course_title(page)


def test_course_title_missing_node():
    with pytest.raises(MarkupError) as exc_info:
        parse_course_title("<html><body><h1>AIN1 Digitaltechnik</h1></body></html>")
    assert exc_info.value.selector == "div > form > h1"


def test_parse_overview_pairs_rows_across_tables():
    page = course_page(
        "AIN1 Mathematik 1",
        [
            overview_table(
                [
                    summary_row("/expand?a", room="F-033", note="Vorlesung"),
                    detail_row(["19.10.2026", "26.10.2026"]),
                    summary_row("/expand?b", time_text="12:00 bis 13:30", room=None),
                    detail_row(["20.10.2026"]),
                ]
            ),
            overview_table(
                [
                    summary_row("https://lsf.example.org/expand?c"),
                    detail_row([]),
                ]
            ),
        ],
    )

    rows = parse_overview(page, "https://lsf.example.org/course?id=1")

    assert len(rows) == 3
    first, second, third = rows
    assert first.table_index == 0
    assert first.expand_url == "https://lsf.example.org/expand?a"
    assert first.time_text == "10:00 bis 11:30"
    assert first.room == "F-033"
    assert first.note == "Vorlesung"
    assert first.dates == [date(2026, 10, 19), date(2026, 10, 26)]

    assert second.room is None
    assert second.note is None
    assert second.dates == [date(2026, 10, 20)]

    assert third.table_index == 1
    assert third.expand_url == "https://lsf.example.org/expand?c"
    assert third.dates == []


def test_parse_overview_without_tables_is_empty():
    assert parse_overview(course_page("AIN1 Mathematik 1", []), "") == []


def test_parse_overview_missing_detail_row():
    page = course_page("AIN1 Mathematik 1", [overview_table([summary_row("/expand?a")])])
    with pytest.raises(MarkupError):
        parse_overview(page, "https://lsf.example.org/")


def test_parse_overview_missing_expand_link():
    row = "<tr><td>kein Link</td><td></td><td>10:00 bis 11:00</td></tr>"
    page = course_page("AIN1 Mathematik 1", [overview_table([row, detail_row(["19.10.2026"])])])
    with pytest.raises(MarkupError):
        parse_overview(page, "https://lsf.example.org/")


def test_parse_overview_bad_date():
    page = course_page(
        "AIN1 Mathematik 1",
        [overview_table([summary_row("/expand?a"), detail_row(["31.02.2026"])])],
    )
    with pytest.raises(ParseError):
        parse_overview(page, "https://lsf.example.org/")


def test_group_caption_named_and_unnamed():
    page = expanded_page(["Termine Gruppe: [unbenannt]", "Termine Gruppe: Gruppe 2"])
    assert parse_group_caption(page, 0) is None
    assert parse_group_caption(page, 1) is Group.GRUPPE_2


def test_group_caption_unknown_group():
    page = expanded_page(["Termine Gruppe: Gruppe 7"])
    with pytest.raises(UnknownGroupName):
        parse_group_caption(page, 0)


def test_group_caption_table_missing():
    page = expanded_page(["Termine Gruppe: Gruppe 1"])
    with pytest.raises(MarkupError):
        parse_group_caption(page, 1)
