from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterator, Optional
from zoneinfo import ZoneInfo

from lsfbot.errors import UnknownCourseName, UnknownGroupName


class CourseKind(Enum):
    MATHEMATIK1 = ("mathematik1", "Mathematik 1", "🟦")
    PROGRAMMIERTECHNIK1 = ("programmiertechnik1", "Programmiertechnik 1", "🟧")
    SOFTWAREMODELLIERUNG = ("softwaremodellierung", "Softwaremodellierung", "🟪")
    DIGITALTECHNIK = ("digitaltechnik", "Digitaltechnik", "🟩")

    def __init__(self, key: str, display_name: str, color: str):
        self.key = key
        self.display_name = display_name
        self.color = color

    def __str__(self) -> str:
        return self.display_name


class Group(str, Enum):
    GRUPPE_1 = "gruppe_1"
    GRUPPE_2 = "gruppe_2"
    GRUPPE_3 = "gruppe_3"
    GRUPPE_4 = "gruppe_4"

    @property
    def display_name(self) -> str:
        return f"Gruppe {self.value[-1]}"

    def __str__(self) -> str:
        return self.display_name


# Page titles as published by the portal. Site text changes must fail loudly,
# so there is no normalisation beyond trimming.
COURSE_NAMES: dict[str, CourseKind] = {
    "AIN1 Mathematik 1": CourseKind.MATHEMATIK1,
    "AIN1 Programmiertechnik1 - findet online statt": CourseKind.PROGRAMMIERTECHNIK1,
    "AIN1 Softwaremodellierung": CourseKind.SOFTWAREMODELLIERUNG,
    "AIN1 Digitaltechnik": CourseKind.DIGITALTECHNIK,
}

GROUP_NAMES: dict[str, Group] = {
    "Gruppe 1": Group.GRUPPE_1,
    "Gruppe 2": Group.GRUPPE_2,
    "Gruppe 3": Group.GRUPPE_3,
    "Gruppe 4": Group.GRUPPE_4,
}


def parse_course_kind(name: str) -> CourseKind:
    try:
        return COURSE_NAMES[name]
    except KeyError:
        raise UnknownCourseName(name) from None


def parse_group(caption: str) -> Group:
    try:
        return GROUP_NAMES[caption]
    except KeyError:
        raise UnknownGroupName(caption) from None


@dataclass(frozen=True, order=True)
class Session:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Session start and end must be timezone-aware")
        if self.end <= self.start:
            raise ValueError(
                f"Session ends before it starts ({self.start.isoformat()} .. {self.end.isoformat()})"
            )


@dataclass(frozen=True)
class Course:
    kind: CourseKind
    group: Optional[Group]
    sessions: tuple[Session, ...]
    room: Optional[str] = None
    note: Optional[str] = None

    def __post_init__(self):
        # Session order carries no meaning; keep a canonical one.
        object.__setattr__(self, "sessions", tuple(sorted(self.sessions)))

    @property
    def key(self) -> tuple[CourseKind, Optional[Group], frozenset[Session]]:
        return self.kind, self.group, frozenset(self.sessions)

    @property
    def title(self) -> str:
        if self.group is None:
            return self.kind.display_name
        return f"{self.kind.display_name} ({self.group.display_name})"

    def visible_to(self, group: Optional[Group]) -> bool:
        return self.group is None or self.group == group


@dataclass(frozen=True)
class Schedule:
    courses: tuple[Course, ...] = ()
    fetched_at: Optional[datetime] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.courses)

    def occurrences(
        self, predicate: Optional[Callable[[Course, Session], bool]] = None
    ) -> Iterator[tuple[Course, Session]]:
        """Yield (course, session) pairs in schedule order."""
        for course in self.courses:
            for session in course.sessions:
                if predicate is None or predicate(course, session):
                    yield course, session

    def sessions_on(
        self, day: date, tz: str, group: Optional[Group]
    ) -> list[tuple[Course, Session]]:
        zone = ZoneInfo(tz)
        found = list(
            self.occurrences(
                lambda course, session: course.visible_to(group)
                and session.start.astimezone(zone).date() == day
            )
        )
        found.sort(key=lambda pair: pair[1].start)
        return found
