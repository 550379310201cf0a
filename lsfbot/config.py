from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

from lsfbot.schedule.models import CourseKind, Group

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_SUBSCRIBERS_PATH = "./data/subscribers.json"


class Settings(BaseSettings):
    BOT_TOKEN: str
    TZ: str = "Europe/Berlin"
    TELEGRAM_PROXY: Optional[str] = None
    # Blank disables the log file.
    LOG_PATH: Optional[str] = "data/bot.log"

    # Group chats that receive the fixed 30 minute reminders.
    GROUP_1_CHAT_ID: Optional[int] = None
    GROUP_2_CHAT_ID: Optional[int] = None
    GROUP_3_CHAT_ID: Optional[int] = None
    GROUP_4_CHAT_ID: Optional[int] = None

    # Course detail pages on the timetable portal, plus online meeting links.
    MATHEMATIK1_LSF_URL: Optional[str] = None
    MATHEMATIK1_LECTURE_LINK: Optional[str] = None
    MATHEMATIK1_EXERCISE_LINK: Optional[str] = None
    PROGRAMMIERTECHNIK1_LSF_URL: Optional[str] = None
    PROGRAMMIERTECHNIK1_LECTURE_LINK: Optional[str] = None
    PROGRAMMIERTECHNIK1_EXERCISE_LINK: Optional[str] = None
    SOFTWAREMODELLIERUNG_LSF_URL: Optional[str] = None
    SOFTWAREMODELLIERUNG_LECTURE_LINK: Optional[str] = None
    SOFTWAREMODELLIERUNG_EXERCISE_LINK: Optional[str] = None
    DIGITALTECHNIK_LSF_URL: Optional[str] = None
    DIGITALTECHNIK_LECTURE_LINK: Optional[str] = None
    DIGITALTECHNIK_EXERCISE_LINK: Optional[str] = None

    SUBSCRIBERS_PATH: str = DEFAULT_SUBSCRIBERS_PATH
    FETCH_DELAY_SECONDS: float = 2.0
    FETCH_TIMEOUT_SECONDS: float = 15.0
    # The portal has been served with a broken certificate chain before.
    LSF_VERIFY_TLS: bool = True

    @field_validator("TZ")
    @classmethod
    def validate_timezone(cls, value: str):
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"TZ must be a valid IANA timezone, got '{value}'") from exc
        return value

    @field_validator(
        "GROUP_1_CHAT_ID",
        "GROUP_2_CHAT_ID",
        "GROUP_3_CHAT_ID",
        "GROUP_4_CHAT_ID",
        "MATHEMATIK1_LSF_URL",
        "MATHEMATIK1_LECTURE_LINK",
        "MATHEMATIK1_EXERCISE_LINK",
        "PROGRAMMIERTECHNIK1_LSF_URL",
        "PROGRAMMIERTECHNIK1_LECTURE_LINK",
        "PROGRAMMIERTECHNIK1_EXERCISE_LINK",
        "SOFTWAREMODELLIERUNG_LSF_URL",
        "SOFTWAREMODELLIERUNG_LECTURE_LINK",
        "SOFTWAREMODELLIERUNG_EXERCISE_LINK",
        "DIGITALTECHNIK_LSF_URL",
        "DIGITALTECHNIK_LECTURE_LINK",
        "DIGITALTECHNIK_EXERCISE_LINK",
        "TELEGRAM_PROXY",
        "LOG_PATH",
        mode="before",
    )
    @classmethod
    def blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def sources(self) -> list[tuple[CourseKind, str]]:
        """Configured (course, portal URL) pairs in enumeration order."""
        pairs = []
        for kind in CourseKind:
            url = getattr(self, f"{kind.name}_LSF_URL")
            if url:
                pairs.append((kind, url))
        return pairs

    def group_chat_ids(self) -> dict[Group, int]:
        chat_ids = {}
        for index, group in enumerate(Group, start=1):
            chat_id = getattr(self, f"GROUP_{index}_CHAT_ID")
            if chat_id is not None:
                chat_ids[group] = chat_id
        return chat_ids

    def group_for_chat(self, chat_id: int) -> Optional[Group]:
        for group, group_chat_id in self.group_chat_ids().items():
            if group_chat_id == chat_id:
                return group
        return None

    def online_link(self, kind: CourseKind, grouped: bool) -> Optional[str]:
        # Grouped entries are exercises, everything else is the lecture.
        suffix = "EXERCISE_LINK" if grouped else "LECTURE_LINK"
        return getattr(self, f"{kind.name}_{suffix}") or None

    class Config:
        env_file = BASE_DIR / ".env"
        env_file_encoding = "utf-8"

settings = Settings()
