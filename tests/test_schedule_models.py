from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from lsfbot.errors import UnknownCourseName, UnknownEnumValue, UnknownGroupName
from lsfbot.schedule.models import (
    Course,
    CourseKind,
    Group,
    Schedule,
    Session,
    parse_course_kind,
    parse_group,
)

BERLIN = ZoneInfo("Europe/Berlin")


def _session(day: date, start: str, end: str) -> Session:
    start_h, start_m = map(int, start.split(":"))
    end_h, end_m = map(int, end.split(":"))
    return Session(
        start=datetime(day.year, day.month, day.day, start_h, start_m, tzinfo=BERLIN),
        end=datetime(day.year, day.month, day.day, end_h, end_m, tzinfo=BERLIN),
    )


def test_session_rejects_end_before_start():
    with pytest.raises(ValueError):
        _session(date(2026, 10, 19), "10:00", "09:59")


def test_session_rejects_zero_duration():
    with pytest.raises(ValueError):
        _session(date(2026, 10, 19), "10:00", "10:00")


def test_session_requires_timezone():
    with pytest.raises(ValueError):
        Session(start=datetime(2026, 10, 19, 10, 0), end=datetime(2026, 10, 19, 11, 0))


def test_course_key_ignores_session_order():
    a = _session(date(2026, 10, 19), "10:00", "11:30")
    b = _session(date(2026, 10, 26), "10:00", "11:30")
    first = Course(kind=CourseKind.MATHEMATIK1, group=None, sessions=(a, b), room="A")
    second = Course(kind=CourseKind.MATHEMATIK1, group=None, sessions=(b, a), room="B")

    assert first.key == second.key
    assert first.sessions == (a, b)
    assert second.sessions == (a, b)


def test_course_key_differs_by_group():
    a = _session(date(2026, 10, 19), "10:00", "11:30")
    grouped = Course(kind=CourseKind.DIGITALTECHNIK, group=Group.GRUPPE_1, sessions=(a,))
    everyone = Course(kind=CourseKind.DIGITALTECHNIK, group=None, sessions=(a,))
    assert grouped.key != everyone.key


def test_course_title_and_visibility():
    course = Course(kind=CourseKind.SOFTWAREMODELLIERUNG, group=Group.GRUPPE_3, sessions=())
    assert course.title == "Softwaremodellierung (Gruppe 3)"
    assert course.visible_to(Group.GRUPPE_3)
    assert not course.visible_to(Group.GRUPPE_2)
    assert not course.visible_to(None)

    lecture = Course(kind=CourseKind.SOFTWAREMODELLIERUNG, group=None, sessions=())
    assert lecture.title == "Softwaremodellierung"
    assert lecture.visible_to(None)
    assert lecture.visible_to(Group.GRUPPE_4)


def test_lookup_tables_are_exact():
    assert parse_course_kind("AIN1 Mathematik 1") is CourseKind.MATHEMATIK1
    assert parse_course_kind("AIN1 Programmiertechnik1 - findet online statt") is CourseKind.PROGRAMMIERTECHNIK1
    assert parse_group("Gruppe 4") is Group.GRUPPE_4

    with pytest.raises(UnknownCourseName):
        parse_course_kind("AIN1 mathematik 1")
    with pytest.raises(UnknownGroupName) as exc_info:
        parse_group("Gruppe 5")
    assert isinstance(exc_info.value, UnknownEnumValue)
    assert exc_info.value.value == "Gruppe 5"


def test_kind_display_and_color():
    assert str(CourseKind.DIGITALTECHNIK) == "Digitaltechnik"
    assert len({kind.color for kind in CourseKind}) == len(CourseKind)
    assert Group.GRUPPE_2.display_name == "Gruppe 2"
    assert Group("gruppe_2") is Group.GRUPPE_2


def test_sessions_on_filters_by_day_and_group_sorted():
    monday = date(2026, 10, 19)
    late = _session(monday, "14:00", "15:30")
    early = _session(monday, "08:00", "09:30")
    other_day = _session(monday + timedelta(days=1), "08:00", "09:30")
    schedule = Schedule(
        courses=(
            Course(kind=CourseKind.MATHEMATIK1, group=None, sessions=(late, other_day)),
            Course(kind=CourseKind.DIGITALTECHNIK, group=Group.GRUPPE_1, sessions=(early,)),
            Course(kind=CourseKind.DIGITALTECHNIK, group=Group.GRUPPE_2, sessions=(early,)),
        )
    )

    entries = schedule.sessions_on(monday, "Europe/Berlin", Group.GRUPPE_1)

    assert [(course.title, session.start.hour) for course, session in entries] == [
        ("Digitaltechnik (Gruppe 1)", 8),
        ("Mathematik 1", 14),
    ]


def test_schedule_equality_ignores_fetch_time():
    first = Schedule(courses=(), fetched_at=datetime(2026, 1, 1, tzinfo=BERLIN))
    second = Schedule(courses=(), fetched_at=datetime(2026, 1, 2, tzinfo=BERLIN))
    assert first == second
    assert len(first) == 0
