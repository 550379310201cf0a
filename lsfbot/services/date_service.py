from datetime import date, datetime, timedelta
import zoneinfo


def get_local_now(tz: str) -> datetime:
    return datetime.now(zoneinfo.ZoneInfo(tz))


def get_today(tz: str) -> date:
    return get_local_now(tz).date()


def parse_ddmmyyyy(value: str) -> date:
    return datetime.strptime(value.strip(), "%d.%m.%Y").date()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_relative(delta: timedelta) -> str:
    """
    Human readable offset in precise form, e.g. "in 45 minutes",
    "in 1 hour and 5 minutes", "2 minutes ago".
    """
    total_minutes = int(round(abs(delta).total_seconds() / 60))
    if total_minutes == 0:
        return "now"

    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))

    if len(parts) > 1:
        text = ", ".join(parts[:-1]) + " and " + parts[-1]
    else:
        text = parts[0]
    return f"in {text}" if delta > timedelta(0) else f"{text} ago"
