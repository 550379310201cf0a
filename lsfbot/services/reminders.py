"""
Decide which reminders are due at a given instant.

Everything here is a pure function of a schedule snapshot, the subscriber
records and `now`; nothing is remembered between cycles. Three rules feed the
result:

- group reminders: every session starting in (25, 30) minutes is announced in
  the group chat of its course, or in all group chats when the course has no
  group;
- lead-time reminders: subscribers with a lead time L get a direct message for
  visible sessions starting in (L - 5, L) minutes;
- follow-previous reminders: subscribers who opted in get a direct message
  about their next session of the day when one of their sessions ended in the
  last five minutes.

All windows are open on both ends and as wide as the cycle period, so with
one evaluation per period every session is caught exactly once.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

from lsfbot.schedule.models import Course, Group, Schedule, Session
from lsfbot.services.date_service import format_relative
from lsfbot.subscribers.store import SubscriberPreference

CYCLE = timedelta(minutes=5)
GROUP_LEAD = timedelta(minutes=30)
FOLLOW_LOOKBACK = CYCLE


@dataclass(frozen=True)
class GroupTarget:
    group: Group


@dataclass(frozen=True)
class DirectTarget:
    subscriber_id: int


NotificationTarget = Union[GroupTarget, DirectTarget]


@dataclass(frozen=True)
class Notification:
    target: NotificationTarget
    course: Course
    session: Session
    # Relative start phrase, only set for follow-previous reminders.
    lead_in: Optional[str] = None


def targets_for(course: Course) -> List[GroupTarget]:
    if course.group is None:
        return [GroupTarget(group) for group in Group]
    return [GroupTarget(course.group)]


def _starts_within(session: Session, now: datetime, lead: timedelta) -> bool:
    until_start = session.start - now
    return lead - CYCLE < until_start < lead


def group_reminders(schedule: Schedule, now: datetime) -> List[Notification]:
    due = sorted(
        schedule.occurrences(lambda course, session: _starts_within(session, now, GROUP_LEAD)),
        key=lambda pair: pair[1].start,
    )
    return [
        Notification(target=target, course=course, session=session)
        for course, session in due
        for target in targets_for(course)
    ]


def lead_time_reminders(
    schedule: Schedule, subscriber: SubscriberPreference, now: datetime
) -> List[Notification]:
    if not subscriber.enabled or subscriber.lead_time is None:
        return []
    lead = timedelta(minutes=subscriber.lead_time)
    target = DirectTarget(subscriber.id)
    due = sorted(
        schedule.occurrences(
            lambda course, session: course.visible_to(subscriber.group)
            and _starts_within(session, now, lead)
        ),
        key=lambda pair: pair[1].start,
    )
    return [Notification(target=target, course=course, session=session) for course, session in due]


def follow_previous_reminder(
    schedule: Schedule, subscriber: SubscriberPreference, now: datetime, tz: str
) -> Optional[Notification]:
    if not subscriber.enabled or not subscriber.follow_previous:
        return None

    zone = ZoneInfo(tz)
    today = now.astimezone(zone).date()
    todays = list(
        schedule.occurrences(
            lambda course, session: course.visible_to(subscriber.group)
            and session.start.astimezone(zone).date() == today
        )
    )

    ended = [session.end for _, session in todays if now - FOLLOW_LOOKBACK < session.end < now]
    if not ended:
        return None
    # With several sessions ending inside the lookback, the latest end is the
    # one the subscriber is walking out of.
    reference = max(ended)

    following = [pair for pair in todays if pair[1].start > reference]
    if not following:
        return None
    # min() keeps the first of equal starts, i.e. schedule order.
    course, session = min(following, key=lambda pair: pair[1].start)
    return Notification(
        target=DirectTarget(subscriber.id),
        course=course,
        session=session,
        lead_in=format_relative(session.start - now),
    )


def personal_reminders(
    schedule: Schedule, subscriber: SubscriberPreference, now: datetime, tz: str
) -> List[Notification]:
    notifications = lead_time_reminders(schedule, subscriber, now)
    follow = follow_previous_reminder(schedule, subscriber, now, tz)
    if follow is not None:
        notifications.append(follow)
    return notifications


def due_notifications(
    schedule: Schedule,
    subscribers: Iterable[SubscriberPreference],
    now: datetime,
    tz: str,
) -> List[Notification]:
    notifications = group_reminders(schedule, now)
    for subscriber in subscribers:
        notifications.extend(personal_reminders(schedule, subscriber, now, tz))
    return notifications
